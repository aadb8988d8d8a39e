"""Placement bookkeeping for a finished atlas.

Frame ``width``/``height`` are the footprint inside the atlas. A frame with
``rotated`` set was turned a quarter turn clockwise before it was copied, so
its original size is ``(height, width)`` and a consumer has to turn the region
a quarter turn counter-clockwise to get the sprite back upright.
"""

import pathlib
from typing import Any, Dict, Optional

from .errors import DuplicateFrameError
from .packer import Placement


class AtlasMetadata:
    def __init__(self, sheet_path: Optional[pathlib.Path] = None) -> None:
        self.sheet_path = sheet_path
        self.frames: Dict[str, Placement] = {}

    def add(self, name: str, placement: Placement) -> None:
        if name in self.frames:
            raise DuplicateFrameError(f"Frame {name!r} is already in the atlas.")
        self.frames[name] = placement

    def add_sheet_path(self, path: pathlib.Path) -> None:
        self.sheet_path = pathlib.Path(path)

    def __len__(self) -> int:
        return len(self.frames)

    def __contains__(self, name: object) -> bool:
        return name in self.frames

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheet_path": self.sheet_path.as_posix() if self.sheet_path is not None else "",
            "frames": {name: placement.to_dict() for name, placement in self.frames.items()},
        }

import pathlib

import pytest

from sprite_atlas_packer.errors import DuplicateFrameError
from sprite_atlas_packer.metadata import AtlasMetadata
from sprite_atlas_packer.packer import Placement


def test_frames_keep_insertion_order():
    metadata = AtlasMetadata()
    metadata.add("zeta", Placement(0, 0, 4, 4))
    metadata.add("alpha", Placement(4, 0, 4, 4))
    metadata.add("mid", Placement(0, 4, 8, 2, True))

    assert list(metadata.frames) == ["zeta", "alpha", "mid"]
    assert len(metadata) == 3
    assert "alpha" in metadata


def test_duplicate_frame_is_rejected():
    metadata = AtlasMetadata()
    metadata.add("hero", Placement(0, 0, 4, 4))

    with pytest.raises(DuplicateFrameError):
        metadata.add("hero", Placement(4, 4, 4, 4))
    assert metadata.frames["hero"] == Placement(0, 0, 4, 4)


def test_to_dict():
    metadata = AtlasMetadata()
    metadata.add("hero", Placement(1, 2, 3, 4, True))
    metadata.add_sheet_path(pathlib.Path("out") / "atlas.png")

    assert metadata.to_dict() == {
        "sheet_path": "out/atlas.png",
        "frames": {"hero": {"x": 1, "y": 2, "width": 3, "height": 4, "rotated": True}},
    }

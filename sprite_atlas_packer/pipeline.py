import io
import os
import pathlib
import tempfile
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import structlog
from PIL import Image

from .config import PackerConfig
from .compositor import composite
from .metadata import AtlasMetadata
from .output import metadata_path, select_output
from .packer import PackItem, pack
from .sources import build_items, collect_sprite_paths, load_sprites

logger = structlog.get_logger()


@dataclass
class AtlasResult:
    image: Image.Image
    metadata: AtlasMetadata
    image_path: Optional[pathlib.Path] = None
    metadata_path: Optional[pathlib.Path] = None


def sheet_path_for(config: PackerConfig) -> pathlib.Path:
    return config.output_path / f"{config.name}.png"


def build_atlas(items: Sequence[PackItem], max_size: int, sheet_path: pathlib.Path) -> AtlasResult:
    """Pack, composite and describe ``items`` without touching the disk."""
    packed = pack(items, max_size)
    image = composite((packed.width, packed.height), packed.placements, items)

    metadata = AtlasMetadata()
    for item, placement in zip(items, packed.placements):
        metadata.add(item.name, placement)
    metadata.add_sheet_path(sheet_path)

    return AtlasResult(image, metadata)


def _missing_directories(directory: pathlib.Path) -> List[pathlib.Path]:
    missing = []
    while not directory.exists() and directory.parent != directory:
        missing.append(directory)
        directory = directory.parent
    return missing


def _stage(directory: pathlib.Path, data: bytes) -> pathlib.Path:
    with tempfile.NamedTemporaryFile(dir=directory, prefix=".atlas-", suffix=".tmp", delete=False) as handle:
        handle.write(data)
    return pathlib.Path(handle.name)


def write_outputs(directory: pathlib.Path, files: Sequence[Tuple[pathlib.Path, bytes]]) -> None:
    """Write every file or none of them.

    Each payload is staged under a temporary name in ``directory`` and moved
    into place with ``os.replace``. On failure, staged files, already moved
    targets and directories created here are removed again.
    """
    created = _missing_directories(directory)
    staged: List[Tuple[pathlib.Path, pathlib.Path]] = []
    replaced: List[pathlib.Path] = []
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for target, data in files:
            staged.append((_stage(directory, data), target))
        for temporary, target in staged:
            os.replace(temporary, target)
            replaced.append(target)
    except OSError:
        for temporary, _ in staged:
            temporary.unlink(missing_ok=True)
        for target in replaced:
            target.unlink(missing_ok=True)
        for path in created:
            if path.is_dir() and not any(path.iterdir()):
                path.rmdir()
        raise


def pack_atlas(config: PackerConfig) -> AtlasResult:
    """Run the whole packer for ``config`` and write the atlas and its metadata.

    Everything is computed in memory first. Either both the image and the
    metadata file end up on disk, or neither does.
    """
    output = select_output(config)

    paths = collect_sprite_paths(config.folders)
    sprites = load_sprites(paths, config.options.show_extension)
    items = build_items(sprites, config.options.rotation)

    sheet_path = sheet_path_for(config)
    result = build_atlas(items, config.options.max_size, sheet_path)
    encoded = output.encode(result.metadata, config)

    buffer = io.BytesIO()
    result.image.save(buffer, format="PNG")

    target = metadata_path(config, output)
    write_outputs(config.output_path, [(sheet_path, buffer.getvalue()), (target, encoded)])
    result.image_path = sheet_path
    result.metadata_path = target

    logger.info(
        "Atlas written",
        sprites=len(items),
        width=result.image.width,
        height=result.image.height,
        image=str(sheet_path),
        metadata=str(target),
    )
    return result

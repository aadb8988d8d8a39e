import pathlib
from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence

import structlog
from PIL import Image, UnidentifiedImageError

from .errors import DuplicateSpriteError, SourceError
from .packer import PackItem

logger = structlog.get_logger()

SUPPORTED_EXTENSIONS = {".png"}


@dataclass
class Sprite:
    name: str
    image: Image.Image


def walk_folder(folder: pathlib.Path) -> Iterator[pathlib.Path]:
    """Yield every file below ``folder``, depth first, in sorted order."""
    if not folder.is_dir():
        raise SourceError(f"Input directory not found: {folder}")

    stack = [folder]
    while stack:
        directory = stack.pop()
        entries = sorted(directory.iterdir())
        subdirectories = []
        for entry in entries:
            if entry.is_dir():
                subdirectories.append(entry)
            else:
                yield entry
        # reversed so the first subdirectory is popped first
        stack.extend(reversed(subdirectories))


def collect_sprite_paths(folders: Sequence[pathlib.Path]) -> List[pathlib.Path]:
    paths: List[pathlib.Path] = []
    for folder in folders:
        paths.extend(
            path for path in walk_folder(pathlib.Path(folder))
            if path.suffix.lower() in SUPPORTED_EXTENSIONS
        )
    return paths


def sprite_name(path: pathlib.Path, show_extension: bool) -> str:
    if not show_extension:
        path = path.with_suffix("")
    return path.as_posix()


def load_sprites(paths: Sequence[pathlib.Path], show_extension: bool) -> List[Sprite]:
    sprites: List[Sprite] = []
    seen: Dict[str, pathlib.Path] = {}
    for path in paths:
        name = sprite_name(path, show_extension)
        if name in seen:
            raise DuplicateSpriteError(
                f"Sprites {seen[name]} and {path} both map to the name {name!r}."
            )
        seen[name] = path

        logger.info("Found sprite", path=str(path))
        try:
            with Image.open(path) as source_image:
                image = source_image.convert("RGBA")
        except (UnidentifiedImageError, OSError) as exc:
            raise SourceError(f"Could not read sprite {path}: {exc}") from exc
        sprites.append(Sprite(name, image))
    return sprites


def build_items(sprites: Sequence[Sprite], rotation_allowed: bool) -> List[PackItem]:
    return [
        PackItem(sprite.name, sprite.image.width, sprite.image.height, rotation_allowed, sprite.image)
        for sprite in sprites
    ]

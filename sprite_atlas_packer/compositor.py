from typing import Any, Sequence, Tuple

import numpy as np
from PIL import Image

from .errors import InternalGeometryError
from .packer import PackItem, Placement


def to_rgba_array(source: Any) -> np.ndarray:
    if isinstance(source, np.ndarray):
        return source
    image = source if source.mode == "RGBA" else source.convert("RGBA")
    return np.asarray(image, dtype=np.uint8)


def rotate_90(pixels: np.ndarray) -> np.ndarray:
    """Rotate an (h, w, 4) buffer a quarter turn clockwise into (w, h, 4)."""
    return np.rot90(pixels, k=-1)


def composite(
    canvas_size: Tuple[int, int],
    placements: Sequence[Placement],
    items: Sequence[PackItem],
) -> Image.Image:
    width, height = canvas_size
    if len(placements) != len(items):
        raise InternalGeometryError(
            f"Got {len(placements)} placements for {len(items)} items."
        )

    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    for item, placement in zip(items, placements):
        pixels = to_rgba_array(item.source)
        if placement.rotated:
            pixels = rotate_90(pixels)

        if pixels.shape[:2] != (placement.height, placement.width):
            raise InternalGeometryError(
                f"Placement of {item.name!r} is {placement.width}x{placement.height} "
                f"but its pixels are {pixels.shape[1]}x{pixels.shape[0]}."
            )
        if placement.x < 0 or placement.y < 0 or placement.right > width or placement.bottom > height:
            raise InternalGeometryError(
                f"Placement of {item.name!r} at ({placement.x}, {placement.y}) "
                f"size {placement.width}x{placement.height} exceeds the {width}x{height} canvas."
            )

        canvas[placement.y:placement.bottom, placement.x:placement.right] = pixels

    return Image.fromarray(canvas, "RGBA")

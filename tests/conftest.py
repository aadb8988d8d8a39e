import pathlib

import numpy as np
import pytest
from PIL import Image


def make_pixels(width: int, height: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)


def make_image(width: int, height: int, seed: int = 0) -> Image.Image:
    return Image.fromarray(make_pixels(width, height, seed), "RGBA")


def write_png(path: pathlib.Path, width: int, height: int, seed: int = 0) -> pathlib.Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    make_image(width, height, seed).save(path, format="PNG")
    return path


@pytest.fixture
def sprite_tree(tmp_path):
    root = tmp_path / "sprites"
    write_png(root / "hero.png", 32, 48, seed=1)
    write_png(root / "items" / "coin.png", 16, 16, seed=2)
    write_png(root / "items" / "gem.PNG", 20, 10, seed=3)
    write_png(root / "tiles" / "grass.png", 64, 64, seed=4)
    (root / "notes.txt").write_text("not a sprite", encoding="utf-8")
    return root

import numpy as np
import pytest

from sprite_atlas_packer.compositor import composite, rotate_90
from sprite_atlas_packer.errors import InternalGeometryError
from sprite_atlas_packer.packer import PackItem, Placement, pack

from conftest import make_image, make_pixels


def test_rotate_90_is_clockwise():
    pixels = make_pixels(3, 2, seed=7)
    rotated = rotate_90(pixels)

    assert rotated.shape == (3, 2, 4)
    height = pixels.shape[0]
    for row in range(rotated.shape[0]):
        for col in range(rotated.shape[1]):
            assert (rotated[row, col] == pixels[height - 1 - col, row]).all()


def test_canvas_starts_transparent():
    canvas = np.asarray(composite((8, 4), [], []))
    assert canvas.shape == (4, 8, 4)
    assert not canvas.any()


def test_plain_placement_copies_pixels_exactly():
    item = PackItem("sprite", 5, 3, source=make_image(5, 3, seed=11))
    item_pixels = np.asarray(item.source)
    placement = Placement(2, 1, 5, 3, False)

    canvas = np.asarray(composite((8, 8), [placement], [item]))

    assert (canvas[1:4, 2:7] == item_pixels).all()
    mask = np.ones((8, 8), dtype=bool)
    mask[1:4, 2:7] = False
    assert not canvas[mask].any()


def test_semi_transparent_pixels_are_not_blended():
    source = np.zeros((1, 1, 4), dtype=np.uint8)
    source[0, 0] = (200, 100, 50, 10)
    item = PackItem("dot", 1, 1, source=source)

    canvas = np.asarray(composite((1, 1), [Placement(0, 0, 1, 1)], [item]))

    assert tuple(canvas[0, 0]) == (200, 100, 50, 10)


def test_rotated_placement_matches_rotated_source():
    image = make_image(4, 6, seed=3)
    source = np.asarray(image)
    item = PackItem("sprite", 4, 6, rotation_allowed=True, source=image)
    placement = Placement(1, 2, 6, 4, True)

    canvas = np.asarray(composite((8, 8), [placement], [item]))

    source_height = source.shape[0]
    for j in range(placement.height):
        for i in range(placement.width):
            expected = source[source_height - 1 - i, j]
            assert (canvas[placement.y + j, placement.x + i] == expected).all()


def test_out_of_bounds_placement_is_internal_error():
    item = PackItem("sprite", 4, 4, source=make_image(4, 4))
    with pytest.raises(InternalGeometryError):
        composite((4, 4), [Placement(2, 0, 4, 4)], [item])


def test_footprint_mismatch_is_internal_error():
    item = PackItem("sprite", 4, 2, source=make_image(4, 2))
    with pytest.raises(InternalGeometryError):
        composite((8, 8), [Placement(0, 0, 2, 4, False)], [item])


def test_packed_items_round_trip_through_canvas():
    images = [make_image(w, h, seed=i) for i, (w, h) in enumerate([(10, 30), (25, 8), (16, 16), (7, 19)])]
    items = [PackItem(f"s{i}", img.width, img.height, True, img) for i, img in enumerate(images)]
    packed = pack(items, 128)

    canvas = composite((packed.width, packed.height), packed.placements, items)

    assert canvas.size == (packed.width, packed.height)
    assert canvas.mode == "RGBA"
    for item, placement in zip(items, packed.placements):
        region = canvas.crop((placement.x, placement.y, placement.right, placement.bottom))
        region_pixels = np.asarray(region)
        expected = np.asarray(item.source)
        if placement.rotated:
            expected = rotate_90(expected)
        assert (region_pixels == expected).all()

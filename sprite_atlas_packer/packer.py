"""MaxRects bin packing into the smallest power-of-two canvas.

Canvases may be rectangular. Candidate sizes are tried in order of area,
then longer side, then height, so for equal area a wide canvas is tried
before a tall one. Items are placed in descending area order; items of
equal area keep their input order. Each item goes into the free rectangle
with the least leftover area (Best Area Fit), ties broken by the smallest
leftover short side and then by the free rectangle found first. The
natural orientation is always scored before the rotated one, so an item
is only rotated when rotation strictly improves the fit or is the only
way it fits.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

from .errors import PackingInfeasibleError

logger = structlog.get_logger()


@dataclass(frozen=True)
class PackItem:
    name: str
    width: int
    height: int
    rotation_allowed: bool = False
    source: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Item {self.name!r} has non-positive dimensions: {self.width}x{self.height}")

    @property
    def area(self) -> int:
        return self.width * self.height

    def orientations(self) -> List[Tuple[int, int, bool]]:
        sizes = [(self.width, self.height, False)]
        if self.rotation_allowed and self.width != self.height:
            sizes.append((self.height, self.width, True))
        return sizes


@dataclass(frozen=True)
class Placement:
    """Where an item landed on the canvas.

    ``width`` and ``height`` are the footprint as placed: when ``rotated``
    is set they are the source image's height and width.
    """

    x: int
    y: int
    width: int
    height: int
    rotated: bool = False

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def overlaps(self, other: "Placement") -> bool:
        return (
            self.x < other.right and other.x < self.right
            and self.y < other.bottom and other.y < self.bottom
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "rotated": self.rotated,
        }


@dataclass(frozen=True)
class PackResult:
    width: int
    height: int
    # aligned index for index with the packed items
    placements: List[Placement]


@dataclass
class FreeRect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def contains(self, other: "FreeRect") -> bool:
        return (
            other.x >= self.x and other.y >= self.y
            and other.right <= self.right and other.bottom <= self.bottom
        )


def is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


def next_power_of_two(value: int) -> int:
    if value <= 1:
        return 1
    return 1 << (value - 1).bit_length()


def powers_of_two_up_to(limit: int) -> List[int]:
    sizes = []
    size = 1
    while size <= limit:
        sizes.append(size)
        size <<= 1
    return sizes


def fits_in(item: PackItem, width: int, height: int) -> bool:
    return any(w <= width and h <= height for w, h, _ in item.orientations())


def candidate_sizes(items: Sequence[PackItem], max_size: int) -> List[Tuple[int, int]]:
    total_area = sum(item.area for item in items)
    sizes = powers_of_two_up_to(max_size)
    candidates = [
        (width, height)
        for width in sizes
        for height in sizes
        if width * height >= total_area and all(fits_in(item, width, height) for item in items)
    ]
    candidates.sort(key=lambda size: (size[0] * size[1], max(size), size[1]))
    return candidates


class MaxRectsSheet:
    """Free-rectangle bookkeeping for one candidate canvas."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.free_rects: List[FreeRect] = [FreeRect(0, 0, width, height)]

    def find_position(self, item: PackItem) -> Optional[Placement]:
        best: Optional[Placement] = None
        best_score: Optional[Tuple[int, int]] = None
        for width, height, rotated in item.orientations():
            for free in self.free_rects:
                if width > free.width or height > free.height:
                    continue
                leftover_width = free.width - width
                leftover_height = free.height - height
                score = (
                    free.width * free.height - width * height,
                    min(leftover_width, leftover_height),
                )
                if best_score is None or score < best_score:
                    best_score = score
                    best = Placement(free.x, free.y, width, height, rotated)
        return best

    def insert(self, item: PackItem) -> Optional[Placement]:
        placement = self.find_position(item)
        if placement is None:
            return None
        self._split_free_rects(placement)
        self._prune_free_rects()
        return placement

    def _split_free_rects(self, used: Placement) -> None:
        remaining: List[FreeRect] = []
        for free in self.free_rects:
            if (used.x >= free.right or used.right <= free.x
                    or used.y >= free.bottom or used.bottom <= free.y):
                remaining.append(free)
                continue
            if used.y > free.y:
                remaining.append(FreeRect(free.x, free.y, free.width, used.y - free.y))
            if used.bottom < free.bottom:
                remaining.append(FreeRect(free.x, used.bottom, free.width, free.bottom - used.bottom))
            if used.x > free.x:
                remaining.append(FreeRect(free.x, free.y, used.x - free.x, free.height))
            if used.right < free.right:
                remaining.append(FreeRect(used.right, free.y, free.right - used.right, free.height))
        self.free_rects = remaining

    def _prune_free_rects(self) -> None:
        pruned: List[FreeRect] = []
        for index, free in enumerate(self.free_rects):
            redundant = False
            for other_index, other in enumerate(self.free_rects):
                if index == other_index or not other.contains(free):
                    continue
                # identical rectangles: keep only the first one
                if free.contains(other) and index < other_index:
                    continue
                redundant = True
                break
            if not redundant:
                pruned.append(free)
        self.free_rects = pruned


def packing_order(items: Sequence[PackItem]) -> List[int]:
    return sorted(range(len(items)), key=lambda index: -items[index].area)


def pack_into(items: Sequence[PackItem], width: int, height: int) -> Optional[List[Placement]]:
    sheet = MaxRectsSheet(width, height)
    placements: List[Optional[Placement]] = [None] * len(items)
    for index in packing_order(items):
        placement = sheet.insert(items[index])
        if placement is None:
            return None
        placements[index] = placement
    return [placement for placement in placements if placement is not None]


def pack(items: Sequence[PackItem], max_size: int) -> PackResult:
    """Place every item on the smallest power-of-two canvas that holds them all.

    Raises:
        PackingInfeasibleError: no canvas with both sides at most ``max_size``
            admits all items.
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")
    if not items:
        return PackResult(1, 1, [])

    for item in items:
        if not fits_in(item, max_size, max_size):
            raise PackingInfeasibleError(
                f"Item {item.name!r} ({item.width}x{item.height}) is larger than the maximum atlas size {max_size}."
            )

    candidates = candidate_sizes(items, max_size)
    for width, height in candidates:
        placements = pack_into(items, width, height)
        if placements is None:
            logger.debug("Candidate atlas size rejected", width=width, height=height)
            continue
        logger.info("Packed atlas", width=width, height=height, items=len(items))
        return PackResult(width, height, placements)

    raise PackingInfeasibleError(
        f"Unable to pack {len(items)} items into an atlas of at most {max_size}x{max_size} pixels."
    )

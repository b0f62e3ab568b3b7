"""
Data classes for the gridstrings touch instrument.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterator, Mapping


# ---------------------------------------------------------------------------
# 2D vector
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Vec2:
    """Simple immutable 2D point in view coordinates."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, o: Vec2) -> Vec2:
        return Vec2(self.x + o.x, self.y + o.y)

    def __sub__(self, o: Vec2) -> Vec2:
        return Vec2(self.x - o.x, self.y - o.y)

    def __mul__(self, s: float) -> Vec2:
        return Vec2(self.x * s, self.y * s)

    def dot(self, o: Vec2) -> float:
        return self.x * o.x + self.y * o.y

    def length(self) -> float:
        return (self.x ** 2 + self.y ** 2) ** 0.5

    def to_pixel(self) -> tuple[int, int]:
        return int(round(self.x)), int(round(self.y))


# ---------------------------------------------------------------------------
# String table
# ---------------------------------------------------------------------------
class Orientation(Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class GridString(IntEnum):
    """
    The twelve playable strings.

    The value is the string index shared by the layout and the sound bank.
    """

    # Left column, top to bottom
    LEFT_TOP = 0
    LEFT_MIDDLE = 1
    LEFT_BOTTOM = 2
    # Right column, top to bottom
    RIGHT_TOP = 3
    RIGHT_MIDDLE = 4
    RIGHT_BOTTOM = 5
    # Upper row, left to right
    UPPER_LEFT = 6
    UPPER_CENTER = 7
    UPPER_RIGHT = 8
    # Lower row, left to right
    LOWER_LEFT = 9
    LOWER_CENTER = 10
    LOWER_RIGHT = 11


@dataclass(frozen=True)
class StringPlacement:
    """
    Where a string sits on the grid.

    ``line`` is the column (vertical) or row (horizontal), 0 or 1.
    ``band`` is the third of that line the string covers, 0 to 2.
    """

    orientation: Orientation
    line: int
    band: int


STRING_PLACEMENTS: dict[GridString, StringPlacement] = {
    string: StringPlacement(
        Orientation.VERTICAL if string < 6 else Orientation.HORIZONTAL,
        line=(string % 6) // 3,
        band=string % 3,
    )
    for string in GridString
}


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ViewportGeometry:
    """Viewport size plus the reserved bands at the top and bottom."""

    width: float
    height: float
    top_inset: float = 0.0
    bottom_inset: float = 0.0

    @property
    def playable_height(self) -> float:
        return self.height - self.top_inset - self.bottom_inset


@dataclass(frozen=True)
class Segment:
    """One playable string: a line segment tagged with its index."""

    index: int
    start: Vec2
    end: Vec2
    orientation: Orientation

    @property
    def string(self) -> GridString:
        return GridString(self.index)

    @property
    def is_vertical(self) -> bool:
        return self.orientation is Orientation.VERTICAL

    @property
    def midpoint(self) -> Vec2:
        return (self.start + self.end) * 0.5

    def length(self) -> float:
        return (self.end - self.start).length()


# ---------------------------------------------------------------------------
# Touch input / hit result
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class TouchEvent:
    """A single touch-down in view coordinates."""

    point: Vec2


@dataclass(frozen=True)
class Hit:
    """The string a touch resolved to."""

    index: int
    distance: float


# ---------------------------------------------------------------------------
# Sound bank
# ---------------------------------------------------------------------------
class SoundBank:
    """
    Maps every ``GridString`` to a sample resource id.

    The bank must name all twelve strings; ``bank[i]`` returns the resource
    for string index ``i``.
    """

    def __init__(self, resources: Mapping[GridString, str]) -> None:
        by_string = {GridString(k): v for k, v in resources.items()}
        missing = [s.name for s in GridString if s not in by_string]
        if missing:
            raise ValueError(
                f"Sound bank must map all {len(GridString)} strings; "
                f"missing: {', '.join(missing)}"
            )
        self._resources = tuple(by_string[s] for s in GridString)

    @classmethod
    def default(cls) -> SoundBank:
        """``sound1`` … ``sound12``, one per string in index order."""
        return cls({string: f"sound{int(string) + 1}" for string in GridString})

    @classmethod
    def from_list(cls, resources: list[str]) -> SoundBank:
        if len(resources) != len(GridString):
            raise ValueError(
                f"Expected {len(GridString)} sound resources, got {len(resources)}"
            )
        return cls(dict(zip(GridString, resources)))

    def __getitem__(self, index: int) -> str:
        return self._resources[GridString(index)]

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[str]:
        return iter(self._resources)

    def items(self) -> list[tuple[GridString, str]]:
        return list(zip(GridString, self._resources))

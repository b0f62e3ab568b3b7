"""
Grid layout: derives the twelve playable string segments from the viewport.

The grid is two columns (x = w/3, x = 2w/3) and two rows cutting the
playable area into three equal bands. Every column is split into one
segment per band, every row into one segment per third of the width.
"""

from __future__ import annotations

import logging
from typing import Mapping

from .config import EDGE_MARGIN_BOTTOM, EDGE_MARGIN_TOP, LOWER_ROW_Y
from .errors import DegenerateGeometry
from .models import (
    STRING_PLACEMENTS,
    GridString,
    Orientation,
    Segment,
    StringPlacement,
    Vec2,
    ViewportGeometry,
)

logger = logging.getLogger(__name__)


def _check_geometry(geometry: ViewportGeometry) -> None:
    if geometry.width <= 0:
        raise DegenerateGeometry(f"viewport width {geometry.width} is not positive")
    if geometry.playable_height <= 0:
        raise DegenerateGeometry(
            f"playable height {geometry.playable_height} is not positive "
            f"(height={geometry.height}, insets={geometry.top_inset}/"
            f"{geometry.bottom_inset})"
        )


def _place(
    index: int,
    placement: StringPlacement,
    geometry: ViewportGeometry,
    edge_margin_top: float,
    edge_margin_bottom: float,
    lower_row_y: float | None,
) -> Segment:
    width = geometry.width
    top = geometry.top_inset
    band_height = geometry.playable_height / 3
    band = placement.band

    if placement.orientation is Orientation.VERTICAL:
        x = width * (placement.line + 1) / 3
        y0 = top + band * band_height
        y1 = top + (band + 1) * band_height
        if band == 0:
            y0 -= edge_margin_top
            # Left column's top string also reaches into the middle band
            if placement.line == 0:
                y1 += edge_margin_top
        if band == 2:
            y1 += edge_margin_bottom
        return Segment(index, Vec2(x, y0), Vec2(x, y1), Orientation.VERTICAL)

    if placement.line == 1 and lower_row_y is not None:
        y = lower_row_y
    else:
        y = top + (placement.line + 1) * band_height
    x0 = width * band / 3
    x1 = width * (band + 1) / 3
    return Segment(index, Vec2(x0, y), Vec2(x1, y), Orientation.HORIZONTAL)


def generate_segments(
    geometry: ViewportGeometry,
    placements: Mapping[GridString, StringPlacement] = STRING_PLACEMENTS,
    *,
    edge_margin_top: float = EDGE_MARGIN_TOP,
    edge_margin_bottom: float = EDGE_MARGIN_BOTTOM,
    lower_row_y: float | None = LOWER_ROW_Y,
) -> tuple[Segment, ...]:
    """
    Build the string segments for *geometry*, ordered by index.

    The lower row sits on the band 2/3 separator unless *lower_row_y* pins
    it to a fixed view coordinate. Returns an empty tuple when the viewport
    has no playable area.
    """
    try:
        _check_geometry(geometry)
    except DegenerateGeometry as exc:
        logger.warning("Skipping grid layout: %s", exc)
        return ()

    return tuple(
        _place(int(string), placements[string], geometry,
               edge_margin_top, edge_margin_bottom, lower_row_y)
        for string in sorted(placements, key=int)
    )


class GridLayout:
    """
    Holds the current segments and rebuilds them on every geometry change.

    Segments handed out earlier are never modified; a new tuple replaces
    the old one.
    """

    def __init__(
        self,
        placements: Mapping[GridString, StringPlacement] = STRING_PLACEMENTS,
        *,
        edge_margin_top: float = EDGE_MARGIN_TOP,
        edge_margin_bottom: float = EDGE_MARGIN_BOTTOM,
        lower_row_y: float | None = LOWER_ROW_Y,
    ) -> None:
        self.placements = dict(placements)
        self.edge_margin_top = edge_margin_top
        self.edge_margin_bottom = edge_margin_bottom
        self.lower_row_y = lower_row_y
        self.geometry: ViewportGeometry | None = None
        self.segments: tuple[Segment, ...] = ()

    def update(self, geometry: ViewportGeometry) -> tuple[Segment, ...]:
        self.geometry = geometry
        self.segments = generate_segments(
            geometry,
            self.placements,
            edge_margin_top=self.edge_margin_top,
            edge_margin_bottom=self.edge_margin_bottom,
            lower_row_y=self.lower_row_y,
        )
        logger.debug(
            "Grid regenerated for %gx%g: %d segments",
            geometry.width, geometry.height, len(self.segments),
        )
        return self.segments

    @property
    def width(self) -> float:
        return self.geometry.width if self.geometry is not None else 0.0

    def __len__(self) -> int:
        return len(self.segments)

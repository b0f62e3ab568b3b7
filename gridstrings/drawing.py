"""
OpenCV drawing helpers for the grid overlay.
"""

from __future__ import annotations

import cv2
import numpy as np

from .config import (
    COLOR_BLACK,
    COLOR_CYAN,
    COLOR_GREEN,
    COLOR_RED,
    COLOR_WHITE,
    COLOR_YELLOW,
    CORNER_GUIDE_ALPHA,
    CORNER_GUIDE_LENGTH,
    GRID_LINE_ALPHA,
)
from .models import Hit, Segment, Vec2, ViewportGeometry


def _blend(image: np.ndarray, overlay: np.ndarray, alpha: float) -> None:
    cv2.addWeighted(overlay, alpha, image, 1 - alpha, 0, image)


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------
def draw_grid(
    image: np.ndarray,
    frame: list[tuple[Segment, Vec2]],
    *,
    highlight: int | None = None,
    color: tuple[int, int, int] = COLOR_WHITE,
    thickness: int = 1,
) -> None:
    """Draw every string at its displaced position, semi-transparent."""
    if not frame:
        return

    overlay = image.copy()
    for segment, offset in frame:
        start = (segment.start + offset).to_pixel()
        end = (segment.end + offset).to_pixel()
        line_color = COLOR_YELLOW if segment.index == highlight else color
        cv2.line(overlay, start, end, line_color, thickness, cv2.LINE_AA)
    _blend(image, overlay, GRID_LINE_ALPHA)


def draw_string_labels(image: np.ndarray, segments: tuple[Segment, ...]) -> None:
    """Small index label at each string's midpoint."""
    for segment in segments:
        cx, cy = segment.midpoint.to_pixel()
        cv2.putText(image, str(segment.index), (cx + 4, cy - 4),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.35, COLOR_CYAN, 1, cv2.LINE_AA)


def draw_corner_guides(image: np.ndarray, length: int = CORNER_GUIDE_LENGTH) -> None:
    """Viewfinder-style L marks in each corner."""
    h, w = image.shape[:2]
    corners = [
        ((0, 0), (length, 0), (0, length)),
        ((w - 1, 0), (w - 1 - length, 0), (w - 1, length)),
        ((0, h - 1), (length, h - 1), (0, h - 1 - length)),
        ((w - 1, h - 1), (w - 1 - length, h - 1), (w - 1, h - 1 - length)),
    ]

    overlay = image.copy()
    for corner, horizontal_end, vertical_end in corners:
        cv2.line(overlay, corner, horizontal_end, COLOR_WHITE, 1, cv2.LINE_AA)
        cv2.line(overlay, corner, vertical_end, COLOR_WHITE, 1, cv2.LINE_AA)
    _blend(image, overlay, CORNER_GUIDE_ALPHA)


def draw_inset_bars(image: np.ndarray, geometry: ViewportGeometry) -> None:
    """Black bars over the reserved top/bottom bands."""
    h, w = image.shape[:2]
    top = int(round(geometry.top_inset))
    bottom = int(round(geometry.height - geometry.bottom_inset))
    if top > 0:
        cv2.rectangle(image, (0, 0), (w, top), COLOR_BLACK, -1)
    if bottom < h:
        cv2.rectangle(image, (0, bottom), (w, h), COLOR_BLACK, -1)


# ---------------------------------------------------------------------------
# Touch feedback
# ---------------------------------------------------------------------------
def draw_touch_marker(
    image: np.ndarray,
    point: Vec2 | None,
    hit: Hit | None,
    threshold: float,
) -> None:
    """Circle the last touch; green when it played a string, red otherwise."""
    if point is None:
        return
    cx, cy = point.to_pixel()
    color = COLOR_GREEN if hit is not None else COLOR_RED
    cv2.circle(image, (cx, cy), 4, color, -1, cv2.LINE_AA)
    cv2.circle(image, (cx, cy), int(round(threshold)), color, 1, cv2.LINE_AA)


def draw_status_panel(
    image: np.ndarray,
    *,
    hit: Hit | None,
    playing: str | None,
    touches_connected: bool,
    fps: float | None = None,
) -> None:
    """Translucent panel with the last hit, current sample and input state."""
    h, w = image.shape[:2]
    panel_x, panel_y = 10, 10
    panel_w = min(w - 20, 220)
    panel_h = 78

    overlay = image.copy()
    cv2.rectangle(overlay, (panel_x, panel_y),
                  (panel_x + panel_w, panel_y + panel_h), COLOR_BLACK, -1)
    cv2.addWeighted(overlay, 0.6, image, 0.4, 0, image)

    hit_text = (f"String: {hit.index} (d={hit.distance:.1f})"
                if hit is not None else "String: -")
    cv2.putText(image, hit_text, (panel_x + 10, panel_y + 20),
                cv2.FONT_HERSHEY_SIMPLEX, 0.45, COLOR_WHITE, 1, cv2.LINE_AA)

    cv2.putText(image, f"Playing: {playing or '-'}", (panel_x + 10, panel_y + 40),
                cv2.FONT_HERSHEY_SIMPLEX, 0.45, COLOR_YELLOW, 1, cv2.LINE_AA)

    status_color = COLOR_GREEN if touches_connected else COLOR_RED
    status_text = "Remote: connected" if touches_connected else "Remote: -"
    cv2.putText(image, status_text, (panel_x + 10, panel_y + 60),
                cv2.FONT_HERSHEY_SIMPLEX, 0.4, status_color, 1, cv2.LINE_AA)

    if fps is not None:
        cv2.putText(image, f"FPS: {fps:.0f}", (w - 80, 25),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, COLOR_GREEN, 1, cv2.LINE_AA)


def blank_canvas(geometry: ViewportGeometry) -> np.ndarray:
    """Dark backdrop the size of the viewport."""
    h = max(1, int(round(geometry.height)))
    w = max(1, int(round(geometry.width)))
    canvas = np.zeros((h, w, 3), dtype=np.uint8)
    # Faint gradient so the translucent lines read against something
    shade = np.linspace(24, 48, h, dtype=np.uint8)[:, None]
    canvas[:] = shade[..., None]
    return canvas

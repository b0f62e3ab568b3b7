import numpy as np

from gridstrings.drawing import (
    blank_canvas,
    draw_corner_guides,
    draw_grid,
    draw_inset_bars,
    draw_status_panel,
    draw_touch_marker,
)
from gridstrings.hit_test import resolve_touch
from gridstrings.instrument import GridInstrument
from gridstrings.models import Vec2, ViewportGeometry

from conftest import RecordingSink


def test_canvas_matches_viewport(phone):
    canvas = blank_canvas(phone)
    assert canvas.shape == (844, 390, 3)
    assert canvas.dtype == np.uint8


def test_grid_lines_are_drawn(phone):
    instrument = GridInstrument(RecordingSink())
    instrument.update_geometry(phone)
    canvas = blank_canvas(phone)
    before = canvas.copy()

    draw_grid(canvas, instrument.frame(now=0.0))

    # Left column pixel brightened, open area untouched
    assert canvas[400, 130].sum() > before[400, 130].sum()
    assert (canvas[400, 60] == before[400, 60]).all()


def test_inset_bars_blacken_reserved_bands():
    geometry = ViewportGeometry(width=100, height=200, top_inset=20, bottom_inset=30)
    canvas = blank_canvas(geometry)

    draw_inset_bars(canvas, geometry)

    assert not canvas[:20].any()
    assert not canvas[171:].any()
    assert canvas[100].any()


def test_overlays_do_not_fail(phone):
    canvas = blank_canvas(phone)
    hit = resolve_touch(Vec2(130, 50), (), phone.width)

    draw_corner_guides(canvas)
    draw_touch_marker(canvas, None, None, 30.0)
    draw_touch_marker(canvas, Vec2(130, 50), hit, 30.0)
    draw_status_panel(canvas, hit=hit, playing="sound1",
                      touches_connected=True, fps=60.0)

    assert canvas.shape == (844, 390, 3)

import pytest

from gridstrings.hit_test import distance_to_segment, resolve_touch, touch_threshold
from gridstrings.layout import generate_segments
from gridstrings.models import Orientation, Segment, Vec2, ViewportGeometry


def test_distance_inside_projection():
    d = distance_to_segment(Vec2(5, 3), Vec2(0, 0), Vec2(10, 0))
    assert d == pytest.approx(3.0)


def test_distance_clamps_to_endpoints():
    assert distance_to_segment(Vec2(-3, 4), Vec2(0, 0), Vec2(10, 0)) == pytest.approx(5.0)
    assert distance_to_segment(Vec2(13, 4), Vec2(0, 0), Vec2(10, 0)) == pytest.approx(5.0)


def test_distance_is_symmetric_in_endpoints():
    p, a, b = Vec2(7, -2), Vec2(1, 1), Vec2(9, 5)
    assert distance_to_segment(p, a, b) == pytest.approx(distance_to_segment(p, b, a))


def test_zero_length_segment():
    assert distance_to_segment(Vec2(3, 4), Vec2(0, 0), Vec2(0, 0)) == 5.0


def test_threshold_scales_with_width():
    assert touch_threshold(390) == 30.0
    assert touch_threshold(780) == 60.0
    assert touch_threshold(195) == 15.0


def test_touch_on_first_string(phone):
    hit = resolve_touch(Vec2(130, 50), generate_segments(phone), phone.width)

    assert hit.index == 0
    assert hit.distance == 0.0


def test_touch_in_corner_misses(phone):
    assert resolve_touch(Vec2(0, 0), generate_segments(phone), phone.width) is None


def test_touch_with_no_segments():
    assert resolve_touch(Vec2(130, 50), (), 390) is None


def test_midpoint_of_every_string_plays_it(phone):
    segments = generate_segments(phone)
    for segment in segments:
        hit = resolve_touch(segment.midpoint, segments, phone.width)
        assert hit.index == segment.index
        assert hit.distance == pytest.approx(0.0, abs=1e-9)


def test_crossing_goes_to_lowest_index(phone):
    segments = generate_segments(phone)
    # Strings 3, 4, 7 and 8 all meet here
    crossing = Vec2(260, segments[7].start.y)

    assert resolve_touch(crossing, segments, phone.width).index == 3


def test_equidistant_strings_tie_to_lower_index():
    segments = [
        Segment(0, Vec2(100, 0), Vec2(100, 200), Orientation.VERTICAL),
        Segment(1, Vec2(120, 0), Vec2(120, 200), Orientation.VERTICAL),
    ]
    hit = resolve_touch(Vec2(110, 100), segments, 390)

    assert hit.index == 0
    assert hit.distance == pytest.approx(10.0)


def test_nearest_string_wins():
    segments = [
        Segment(0, Vec2(100, 0), Vec2(100, 200), Orientation.VERTICAL),
        Segment(1, Vec2(120, 0), Vec2(120, 200), Orientation.VERTICAL),
    ]
    assert resolve_touch(Vec2(115, 100), segments, 390).index == 1


def test_threshold_is_exclusive(phone):
    segments = generate_segments(phone)

    assert resolve_touch(Vec2(159, 100), segments, phone.width).distance == pytest.approx(29.0)
    assert resolve_touch(Vec2(160, 100), segments, phone.width) is None


def test_wider_viewport_accepts_farther_touches():
    wide = ViewportGeometry(width=780, height=844)
    segments = generate_segments(wide)

    hit = resolve_touch(Vec2(260 + 45, 100), segments, wide.width)
    assert hit.index == 0
    assert hit.distance == pytest.approx(45.0)


def test_vertical_string_ignores_touch_past_its_end(phone):
    segments = generate_segments(phone)
    # 10 points above the top of string 0, inside the threshold but outside its range
    assert resolve_touch(Vec2(130, -40), segments, phone.width) is None


def test_horizontal_string_hit_near_row(phone):
    segments = generate_segments(phone)
    row_y = segments[6].start.y

    hit = resolve_touch(Vec2(65, row_y + 20), segments, phone.width)
    assert hit.index == 6
    assert hit.distance == pytest.approx(20.0)


def test_horizontal_string_ignores_touch_outside_its_span():
    segments = [Segment(6, Vec2(0, 100), Vec2(130, 100), Orientation.HORIZONTAL)]
    # Within the threshold of the end point, but past it in x
    assert resolve_touch(Vec2(140, 100), segments, 390) is None


def test_touch_just_below_first_band_plays_left_top():
    geometry = ViewportGeometry(width=390, height=844, top_inset=100, bottom_inset=250)
    segments = generate_segments(geometry)
    band = (844 - 100 - 250) / 3

    # Strings 0 and 1 are both 5 away here; the lower index wins
    hit = resolve_touch(Vec2(135, 100 + band + 15), segments, geometry.width)

    assert hit.index == 0
    assert hit.distance == pytest.approx(5.0)


def test_right_column_has_no_overlap():
    geometry = ViewportGeometry(width=390, height=844, top_inset=100, bottom_inset=250)
    segments = generate_segments(geometry)
    band = (844 - 100 - 250) / 3

    assert resolve_touch(Vec2(265, 100 + band + 15), segments, geometry.width).index == 4

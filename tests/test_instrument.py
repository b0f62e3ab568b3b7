import inspect

from gridstrings.errors import MissingAudioResource
from gridstrings.instrument import GridInstrument
from gridstrings.models import TouchEvent, Vec2, ViewportGeometry

from conftest import RecordingSink


def make_instrument(geometry, sink=None, **kwargs):
    instrument = GridInstrument(sink or RecordingSink(), **kwargs)
    instrument.update_geometry(geometry)
    return instrument


def test_touch_plays_string(phone):
    instrument = make_instrument(phone)

    hit = instrument.handle_touch(TouchEvent(Vec2(130, 50)), now=0.0)

    assert hit.index == 0
    assert instrument.dispatcher.sink.calls == [("stop", None), ("play", "sound1")]
    assert instrument.animator.vibration.active_indices == [0]
    assert instrument.last_hit == hit


def test_only_first_touch_of_batch_is_used(phone):
    instrument = make_instrument(phone)

    hit = instrument.touches_began([Vec2(130, 50), Vec2(260, 50)], now=0.0)

    assert hit.index == 0
    assert [c for c in instrument.dispatcher.sink.calls if c[0] == "play"] == [
        ("play", "sound1"),
    ]


def test_empty_batch(phone):
    instrument = make_instrument(phone)

    assert instrument.touches_began([]) is None
    assert instrument.dispatcher.sink.calls == []


def test_miss_does_nothing(phone):
    instrument = make_instrument(phone)

    assert instrument.touches_began([Vec2(0, 0)], now=0.0) is None

    assert instrument.dispatcher.sink.calls == []
    assert instrument.animator.vibration.active_indices == []
    assert instrument.last_touch == Vec2(0, 0)
    assert instrument.last_hit is None


def test_no_geometry_no_hits():
    instrument = GridInstrument(RecordingSink())

    assert instrument.touches_began([Vec2(130, 50)]) is None
    assert instrument.segments == ()


def test_geometry_change_moves_strings(phone):
    instrument = make_instrument(phone)
    instrument.update_geometry(ViewportGeometry(width=780, height=844))

    # Old left column position no longer plays anything
    assert instrument.touches_began([Vec2(130, 50)], now=0.0) is None
    assert instrument.touches_began([Vec2(260, 50)], now=0.0).index == 0


def test_missing_sample_still_shakes_string(phone):
    errors = []
    sink = RecordingSink(resources=[])
    instrument = make_instrument(phone, sink, on_error=errors.append)

    hit = instrument.touches_began([Vec2(130, 50)], now=0.0)

    assert hit.index == 0
    assert isinstance(errors[0], MissingAudioResource)
    assert sink.calls == []
    assert instrument.animator.vibration.active_indices == [0]


def test_view_lifecycle(phone):
    sink = RecordingSink()
    instrument = make_instrument(phone, sink)

    instrument.view_did_appear()
    instrument.tick()
    assert instrument.animator.clock.running
    assert instrument.animator.clock.elapsed > 0

    instrument.view_will_disappear()
    assert not instrument.animator.clock.running

    instrument.shutdown()
    assert sink.closed


def test_frame_pairs_segments_with_offsets(phone):
    instrument = make_instrument(phone)
    instrument.touches_began([Vec2(130, 50)], now=0.0)

    frame = instrument.frame(now=0.0)

    assert len(frame) == 12
    segment, offset = frame[0]
    assert segment.index == 0
    assert offset == Vec2(-2.0, 0.0)
    assert frame[1][1] == Vec2(0.0, 0.0)


def test_tick_applies_playback_completion(phone):
    sink = RecordingSink()
    instrument = make_instrument(phone, sink)
    instrument.touches_began([Vec2(130, 50)], now=0.0)

    sink.finish()
    assert instrument.dispatcher.current == "sound1"

    instrument.tick()
    assert instrument.dispatcher.current is None


def test_error_callback_is_typed_and_forwarded(phone):
    annotation = inspect.signature(GridInstrument).parameters["on_error"].annotation
    assert annotation == "ErrorCallback | None"

    errors = []
    instrument = make_instrument(phone, RecordingSink(broken=["sound1"]),
                                 on_error=errors.append)
    instrument.touches_began([Vec2(130, 50)], now=0.0)

    assert instrument.dispatcher.on_error == errors.append
    assert len(errors) == 1

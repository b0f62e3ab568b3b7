"""
GridInstrument: wires the grid layout, hit testing, playback and feedback.

The host (OpenCV window, WebSocket bridge, tests) feeds it layout changes,
view appear/disappear transitions and touch-down batches; everything runs
on the host's single interaction thread.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from .animation import FeedbackAnimator
from .audio_engine import ErrorCallback, PlaybackDispatcher, PlaybackSink
from .hit_test import resolve_touch
from .layout import GridLayout
from .models import (
    STRING_PLACEMENTS,
    GridString,
    Hit,
    Segment,
    SoundBank,
    StringPlacement,
    TouchEvent,
    Vec2,
    ViewportGeometry,
)

logger = logging.getLogger(__name__)


class GridInstrument:
    """
    The touch-to-sound engine behind one grid view.

    Parameters
    ----------
    sink : PlaybackSink
        Audio output for the dispatcher.
    sound_bank : SoundBank | None
        String → sample table. Defaults to ``SoundBank.default()``.
    placements : Mapping[GridString, StringPlacement]
        String → grid position table shared with the sound bank's keys.
    animator : FeedbackAnimator | None
        Visual feedback driver; a new one is created if omitted.
    on_error : callable | None
        Passed to the dispatcher for missing/undecodable samples.
    """

    def __init__(
        self,
        sink: PlaybackSink,
        sound_bank: SoundBank | None = None,
        placements: Mapping[GridString, StringPlacement] = STRING_PLACEMENTS,
        animator: FeedbackAnimator | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.layout = GridLayout(placements)
        self.dispatcher = PlaybackDispatcher(sink, sound_bank, on_error=on_error)
        self.animator = animator or FeedbackAnimator()
        self.last_touch: Vec2 | None = None
        self.last_hit: Hit | None = None

    # -----------------------------------------------------------------
    # Layout / lifecycle
    # -----------------------------------------------------------------
    @property
    def segments(self) -> tuple[Segment, ...]:
        return self.layout.segments

    def update_geometry(self, geometry: ViewportGeometry) -> tuple[Segment, ...]:
        """Rebuild the strings; call on every layout change."""
        return self.layout.update(geometry)

    def view_did_appear(self) -> None:
        self.animator.start()

    def view_will_disappear(self) -> None:
        self.animator.stop()

    def shutdown(self) -> None:
        self.animator.stop()
        self.dispatcher.close()

    # -----------------------------------------------------------------
    # Touch handling
    # -----------------------------------------------------------------
    def touches_began(
        self,
        points: Iterable[Vec2],
        now: float | None = None,
    ) -> Hit | None:
        """Handle a touch-down batch; only the first touch is played."""
        first = next(iter(points), None)
        if first is None:
            return None
        return self.handle_touch(TouchEvent(first), now)

    def handle_touch(self, event: TouchEvent, now: float | None = None) -> Hit | None:
        point = event.point
        logger.debug("Touch location: x: %.1f, y: %.1f", point.x, point.y)
        self.last_touch = point

        hit = resolve_touch(point, self.layout.segments, self.layout.width)
        self.last_hit = hit
        if hit is None:
            return None

        logger.info("String touched: %d (%s)", hit.index, GridString(hit.index).name)
        self.dispatcher.trigger(hit.index)
        self.animator.trigger(hit.index, now)
        return hit

    # -----------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------
    def tick(self) -> None:
        """
        Advance one display frame: idle animation, then any playback
        completions the sink reported since the last frame.
        """
        self.animator.clock.tick()
        self.dispatcher.poll()

    def frame(self, now: float | None = None) -> list[tuple[Segment, Vec2]]:
        """Segments paired with their current displacement."""
        segments = self.layout.segments
        return list(zip(segments, self.animator.offsets(segments, now)))

"""
gridstrings — Preview window for the touch grid instrument.

Draws the 3×3 grid in an OpenCV window and plays a string when you click
near one of its lines. A WebSocket server also accepts touch-down messages
from a phone or browser client (see ``touch_server``).

Controls:
  - Left click: touch down
  - ESC or 'q': Quit
  - 'l': Toggle string index labels
  - 'f': Toggle FPS display

Usage:
    python3 -m gridstrings.main
    python3 -m gridstrings.main --sink fluidsynth --soundfont FluidR3_GM.sf2
    python3 -m gridstrings.main --width 428 --height 926 --no-server
    python3 -m gridstrings.main --debug --log-module hit_test=WARNING --lower-row-y 425
"""

from __future__ import annotations

import argparse
import logging
import time

import cv2

from .audio_engine import FluidSynthSink, PlaybackSink, SampleFileSink
from .config import (
    DEFAULT_BOTTOM_INSET,
    DEFAULT_TOP_INSET,
    DEFAULT_VIEWPORT_HEIGHT,
    DEFAULT_VIEWPORT_WIDTH,
    LOWER_ROW_Y,
    SOUNDFONT_PATH,
    SOUNDS_DIR,
    TARGET_FPS,
    WS_PORT,
)
from .drawing import (
    blank_canvas,
    draw_corner_guides,
    draw_grid,
    draw_inset_bars,
    draw_status_panel,
    draw_string_labels,
    draw_touch_marker,
)
from .hit_test import touch_threshold
from .instrument import GridInstrument
from .logging_config import parse_module_levels, setup_logging
from .models import SoundBank, Vec2, ViewportGeometry
from .touch_server import TouchInbox, start_touch_server_thread

logger = logging.getLogger(__name__)

WINDOW_NAME = "gridstrings"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Touch grid instrument preview",
    )
    parser.add_argument("--width", type=int, default=DEFAULT_VIEWPORT_WIDTH)
    parser.add_argument("--height", type=int, default=DEFAULT_VIEWPORT_HEIGHT)
    parser.add_argument("--top-inset", type=float, default=DEFAULT_TOP_INSET)
    parser.add_argument("--bottom-inset", type=float, default=DEFAULT_BOTTOM_INSET)
    parser.add_argument("--lower-row-y", type=float, default=LOWER_ROW_Y,
                        help="Pin the lower row of strings to a fixed y (e.g. 425)")
    parser.add_argument(
        "--sink", choices=["auto", "samples", "fluidsynth"], default="auto",
        help="Audio output: WAV samples, FluidSynth notes, or whichever is available",
    )
    parser.add_argument("--sounds-dir", default=SOUNDS_DIR)
    parser.add_argument("--soundfont", default=SOUNDFONT_PATH)
    parser.add_argument("--port", type=int, default=WS_PORT)
    parser.add_argument("--no-server", action="store_true",
                        help="Do not start the WebSocket touch server")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--log-module", action="append", metavar="MODULE=LEVEL",
                        help="Per-module log level, e.g. hit_test=WARNING (repeatable)")
    return parser


def build_sink(args: argparse.Namespace, sound_bank: SoundBank) -> PlaybackSink:
    """Pick the audio sink; ``auto`` prefers a complete WAV bank."""
    if args.sink in ("auto", "samples"):
        sink = SampleFileSink(args.sounds_dir)
        if args.sink == "samples":
            return sink
        missing = [r for r in sound_bank if not sink.has_resource(r)]
        if not missing and sink.ready:
            return sink
        logger.info(
            "WAV bank incomplete in %s (%d missing); using FluidSynth",
            args.sounds_dir, len(missing),
        )
    return FluidSynthSink.for_sound_bank(sound_bank, soundfont_path=args.soundfont)


def main(argv: list[str] | None = None) -> None:
    """Run the preview window until the user quits."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        module_levels = parse_module_levels(args.log_module)
    except ValueError as exc:
        parser.error(str(exc))
    setup_logging(logging.DEBUG if args.debug else logging.INFO, args.log_file,
                  module_levels)

    geometry = ViewportGeometry(
        width=args.width,
        height=args.height,
        top_inset=args.top_inset,
        bottom_inset=args.bottom_inset,
    )
    sound_bank = SoundBank.default()
    instrument = GridInstrument(build_sink(args, sound_bank), sound_bank)
    instrument.layout.lower_row_y = args.lower_row_y
    instrument.update_geometry(geometry)

    inbox = TouchInbox()
    if not args.no_server:
        start_touch_server_thread(inbox, lambda: instrument.layout.geometry,
                                  port=args.port)

    pending: list[Vec2] = []

    def on_mouse(event, x, y, flags, param) -> None:
        if event == cv2.EVENT_LBUTTONDOWN:
            pending.append(Vec2(float(x), float(y)))

    cv2.namedWindow(WINDOW_NAME)
    cv2.setMouseCallback(WINDOW_NAME, on_mouse)

    logger.info("Starting gridstrings preview (%dx%d)", args.width, args.height)
    logger.info("Controls: click = touch | ESC/q = Quit | l = Labels | f = FPS")

    show_labels = False
    show_fps = True
    fps = 0.0
    prev_time = time.time()
    delay_ms = max(1, int(1000 / TARGET_FPS))

    instrument.view_did_appear()
    try:
        while True:
            # One touch-down per click / message
            for point in pending + inbox.drain():
                instrument.touches_began([point])
            pending.clear()

            instrument.tick()

            frame = blank_canvas(geometry)
            draw_inset_bars(frame, geometry)
            draw_grid(
                frame, instrument.frame(),
                highlight=instrument.last_hit.index if instrument.last_hit else None,
            )
            if show_labels:
                draw_string_labels(frame, instrument.segments)
            draw_corner_guides(frame)
            draw_touch_marker(frame, instrument.last_touch, instrument.last_hit,
                              touch_threshold(geometry.width))

            current_time = time.time()
            fps = 0.9 * fps + 0.1 / max(current_time - prev_time, 1e-6)
            prev_time = current_time
            draw_status_panel(
                frame,
                hit=instrument.last_hit,
                playing=instrument.dispatcher.current,
                touches_connected=inbox.connected,
                fps=fps if show_fps else None,
            )

            cv2.imshow(WINDOW_NAME, frame)

            key = cv2.waitKey(delay_ms) & 0xFF
            if key == 27 or key == ord("q"):
                break
            elif key == ord("l"):
                show_labels = not show_labels
            elif key == ord("f"):
                show_fps = not show_fps
    finally:
        instrument.view_will_disappear()
        instrument.shutdown()
        cv2.destroyAllWindows()
        logger.info("Done.")


if __name__ == "__main__":
    main()

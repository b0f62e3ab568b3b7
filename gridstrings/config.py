"""
Configuration constants for the gridstrings touch instrument.
"""

import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).parent

# ---------------------------------------------------------------------------
# Grid geometry
# ---------------------------------------------------------------------------
# Reserved bands above/below the playable area (camera chrome on the phone)
DEFAULT_TOP_INSET = 100.0
DEFAULT_BOTTOM_INSET = 250.0

# Default viewport used by the preview window (iPhone 14 logical points)
DEFAULT_VIEWPORT_WIDTH = 390
DEFAULT_VIEWPORT_HEIGHT = 844

# Outer bands of each column reach past the playable area so touches on
# the very edge still register.
EDGE_MARGIN_TOP = 30.0
EDGE_MARGIN_BOTTOM = 90.0

# Fixed y for the lower row of strings (425 on the phone layout). None puts
# it on the band 2/3 separator so it follows the geometry.
_lower_row = os.environ.get("GRIDSTRINGS_LOWER_ROW_Y")
LOWER_ROW_Y = float(_lower_row) if _lower_row else None

# ---------------------------------------------------------------------------
# Hit testing
# ---------------------------------------------------------------------------
# 30 points of slack on a 390-point-wide screen, scaled with width
TOUCH_THRESHOLD_REFERENCE = 30.0
REFERENCE_VIEWPORT_WIDTH = 390.0

# ---------------------------------------------------------------------------
# Animation
# ---------------------------------------------------------------------------
IDLE_AMPLITUDE = 1.5
IDLE_BASE_FREQUENCY = 2.0
IDLE_FREQUENCY_STEP = 0.5   # per string index, keeps lines out of phase
IDLE_TIME_STEP = 0.01       # clock advance per display frame

VIBRATION_DURATION = 0.3    # seconds
VIBRATION_KEYFRAMES = (-2.0, 2.0, -2.0, 2.0, 0.0)

# Preview loop refresh
TARGET_FPS = 60

# ---------------------------------------------------------------------------
# Colors (BGR)
# ---------------------------------------------------------------------------
COLOR_WHITE = (255, 255, 255)
COLOR_BLACK = (0, 0, 0)
COLOR_GREEN = (0, 255, 0)
COLOR_RED = (0, 0, 255)
COLOR_YELLOW = (0, 255, 255)
COLOR_CYAN = (255, 255, 0)

GRID_LINE_ALPHA = 0.5
CORNER_GUIDE_ALPHA = 0.4
CORNER_GUIDE_LENGTH = 15

# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------
WS_PORT = int(os.environ.get("GRIDSTRINGS_WS_PORT", "8765"))

# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------
SOUNDS_DIR = os.environ.get("GRIDSTRINGS_SOUNDS_DIR", str(PACKAGE_DIR / "sounds"))
SAMPLE_EXTENSION = ".wav"

SOUNDFONT_PATH = os.environ.get(
    "GRIDSTRINGS_SOUNDFONT", str(PACKAGE_DIR / "soundfont.sf2"),
)
FLUIDSYNTH_GAIN = 0.8
INSTRUMENT_PROGRAM = 25  # GM program 25 = Acoustic Guitar (steel)
FLUIDSYNTH_VELOCITY = 100
FLUIDSYNTH_NOTE_DURATION = 1.5  # seconds a synthesized string rings

# One MIDI note per string: the two columns walk up a guitar's open
# strings, the two rows add the upper register.
# E2 A2 D3 | G3 B3 E4 | A3 C4 E4 | G4 B4 D5
STRING_MIDI_NOTES = [40, 45, 50, 55, 59, 64, 57, 60, 64, 67, 71, 74]

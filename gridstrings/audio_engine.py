"""
Audio engine: plays the sample bound to a string.

The ``PlaybackDispatcher`` owns the "currently playing" sample and talks to
a ``PlaybackSink``. Two sinks are provided:

- ``SampleFileSink`` plays ``<resource>.wav`` files (``soundfile`` +
  ``sounddevice``),
- ``FluidSynthSink`` maps each resource to a MIDI note and plays it through
  ``pyfluidsynth`` when no WAV bank is around.

Both report completion once through a callback and never raise on audio
failures.
"""

from __future__ import annotations

import logging
import queue
import sys
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Mapping, Optional

import soundfile as sf

from .config import (
    FLUIDSYNTH_GAIN,
    FLUIDSYNTH_NOTE_DURATION,
    FLUIDSYNTH_VELOCITY,
    INSTRUMENT_PROGRAM,
    SAMPLE_EXTENSION,
    SOUNDFONT_PATH,
    SOUNDS_DIR,
    STRING_MIDI_NOTES,
)
from .errors import (
    AudioDecodeFailure,
    GridStringsError,
    IndexOutOfRange,
    MissingAudioResource,
)
from .models import SoundBank

logger = logging.getLogger(__name__)

# on_finished(resource_id, ok, error)
FinishedCallback = Callable[[str, bool, Optional[GridStringsError]], None]
ErrorCallback = Callable[[GridStringsError], None]


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------
class PlaybackSink(ABC):
    """Named-resource audio output."""

    @abstractmethod
    def has_resource(self, resource_id: str) -> bool:
        ...

    @abstractmethod
    def play(self, resource_id: str, on_finished: FinishedCallback | None = None) -> bool:
        """
        Start *resource_id* without blocking.

        Returns False (after calling *on_finished* with the error) when the
        sample cannot be started.
        """

    @abstractmethod
    def stop(self) -> None:
        ...

    def close(self) -> None:
        self.stop()


class TimedSink(PlaybackSink):
    """
    Sink whose completion is signalled by a timer after the sample length.

    A generation counter makes sure a stopped or replaced sample never
    reports completion. ``_start``, ``_end`` and ``_halt`` always run under
    the sink lock. ``on_finished`` runs on the timer thread for completions.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generation = 0
        self._timer: threading.Timer | None = None

    @abstractmethod
    def _start(self, resource_id: str) -> float:
        """Begin output and return its duration in seconds."""

    def _end(self, resource_id: str) -> None:
        """Called when a sample ran to completion."""

    @abstractmethod
    def _halt(self) -> None:
        """Silence whatever is playing."""

    def play(self, resource_id: str, on_finished: FinishedCallback | None = None) -> bool:
        failure: AudioDecodeFailure | None = None
        with self._lock:
            try:
                duration = self._start(resource_id)
            except AudioDecodeFailure as exc:
                logger.debug("Playback did not start: %s", exc)
                failure = exc
            else:
                self._generation += 1
                timer = threading.Timer(
                    duration, self._finished,
                    args=(self._generation, resource_id, on_finished),
                )
                timer.daemon = True
                self._timer = timer
                timer.start()

        if failure is None:
            return True
        if on_finished is not None:
            on_finished(resource_id, False, failure)
        return False

    def _finished(
        self, gen: int, resource_id: str, on_finished: FinishedCallback | None,
    ) -> None:
        # Generation check and _end are atomic with play/stop
        with self._lock:
            if gen != self._generation:
                return  # stopped, or a newer sample took over
            self._timer = None
            self._end(resource_id)
        logger.debug("Audio finished playing: %s", resource_id)
        if on_finished is not None:
            on_finished(resource_id, True, None)

    def stop(self) -> None:
        with self._lock:
            self._generation += 1
            timer, self._timer = self._timer, None
            if timer is not None:
                timer.cancel()
            self._halt()


class SampleFileSink(TimedSink):
    """
    Plays WAV files from a directory.

    Parameters
    ----------
    sounds_dir : str | Path | None
        Directory holding ``<resource><extension>`` files. Falls back to
        ``config.SOUNDS_DIR``.
    extension : str
        File extension appended to each resource id.
    """

    def __init__(
        self,
        sounds_dir: str | Path | None = None,
        extension: str = SAMPLE_EXTENSION,
    ) -> None:
        super().__init__()
        self.sounds_dir = Path(sounds_dir or SOUNDS_DIR)
        self.extension = extension
        self._sd = None
        self._init_output()

    def _init_output(self) -> None:
        """Load the PortAudio binding; audio stays off if it is unavailable."""
        try:
            import sounddevice
        except (ImportError, OSError) as exc:
            logger.error(
                "sounddevice unavailable (%s). Install PortAudio and "
                "`pip install sounddevice`.", exc,
            )
            return
        self._sd = sounddevice

    @property
    def ready(self) -> bool:
        return self._sd is not None

    def path_for(self, resource_id: str) -> Path:
        return self.sounds_dir / f"{resource_id}{self.extension}"

    def has_resource(self, resource_id: str) -> bool:
        return self.path_for(resource_id).is_file()

    def _start(self, resource_id: str) -> float:
        if not self.ready:
            raise AudioDecodeFailure(resource_id, "audio output unavailable")

        path = self.path_for(resource_id)
        try:
            data, sr = sf.read(str(path), dtype="float32", always_2d=False)
        except (RuntimeError, OSError) as exc:
            raise AudioDecodeFailure(resource_id, str(exc)) from exc
        if len(data) == 0:
            raise AudioDecodeFailure(resource_id, "empty sample")

        try:
            self._sd.play(data, sr)
        except Exception as exc:
            raise AudioDecodeFailure(resource_id, str(exc)) from exc

        logger.info("Playing sound: %s", path.name)
        return len(data) / sr

    def _halt(self) -> None:
        if self._sd is not None:
            self._sd.stop()


class FluidSynthSink(TimedSink):
    """
    Plays each resource as a MIDI note through FluidSynth.

    Parameters
    ----------
    notes : Mapping[str, int]
        Resource id → MIDI note number.
    soundfont_path : str | None
        Path to a ``.sf2`` SoundFont file. Falls back to
        ``config.SOUNDFONT_PATH`` and then to common system locations.
    gain : float
        Master gain (0.0 – 1.0).
    program : int
        General MIDI program number for the instrument.
    note_duration : float
        Seconds each note rings before its noteoff.
    """

    # Fallback SoundFont locations (checked in order)
    _FALLBACK_PATHS = [
        "/usr/share/sounds/sf2/FluidR3_GM.sf2",
        "/usr/share/soundfonts/FluidR3_GM.sf2",
        "/opt/homebrew/share/fluid-synth/sf2/VintageDreamsWaves-v2.sf2",
    ]

    def __init__(
        self,
        notes: Mapping[str, int],
        soundfont_path: str | None = None,
        gain: float = FLUIDSYNTH_GAIN,
        program: int = INSTRUMENT_PROGRAM,
        velocity: int = FLUIDSYNTH_VELOCITY,
        note_duration: float = FLUIDSYNTH_NOTE_DURATION,
        driver: str | None = None,
    ) -> None:
        super().__init__()
        self.notes = dict(notes)
        self._sf_path = soundfont_path or SOUNDFONT_PATH
        self._gain = gain
        self._program = program
        self._velocity = max(0, min(127, velocity))
        self._note_duration = note_duration
        self._driver = driver or self._default_driver()
        self._synth = None
        self._sf_id: int | None = None
        self._sounding: int | None = None

        self._init_synth()

    @classmethod
    def for_sound_bank(cls, sound_bank: SoundBank, **kwargs) -> FluidSynthSink:
        """Bind the bank's resources, in string order, to ``STRING_MIDI_NOTES``."""
        return cls(dict(zip(sound_bank, STRING_MIDI_NOTES)), **kwargs)

    @staticmethod
    def _default_driver() -> str:
        if sys.platform == "darwin":
            return "coreaudio"
        if sys.platform.startswith("win"):
            return "dsound"
        return "alsa"

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------
    def _init_synth(self) -> None:
        """Initialise the FluidSynth synthesiser and load the SoundFont."""
        try:
            import fluidsynth
        except (ImportError, OSError) as exc:
            logger.error(
                "pyfluidsynth unavailable (%s). Install FluidSynth and "
                "`pip install pyfluidsynth`.", exc,
            )
            return

        sf_file = Path(self._sf_path)
        if not sf_file.exists():
            for fallback in self._FALLBACK_PATHS:
                candidate = Path(fallback)
                if candidate.exists():
                    sf_file = candidate
                    logger.info("Using fallback SoundFont: %s", sf_file)
                    break
            else:
                logger.error("SoundFont not found at %s", self._sf_path)
                return

        try:
            self._synth = fluidsynth.Synth(gain=self._gain)
            self._synth.start(driver=self._driver)
            self._sf_id = self._synth.sfload(str(sf_file))
            if self._sf_id == -1:
                raise RuntimeError(f"failed to load SoundFont {sf_file}")
            self._synth.program_select(0, self._sf_id, 0, self._program)
            logger.info(
                "FluidSynth ready: SoundFont %s, program %d",
                sf_file.name, self._program,
            )
        except Exception as exc:
            logger.error("Failed to initialise FluidSynth: %s", exc)
            if self._synth is not None:
                self._synth.delete()
            self._synth = None

    @property
    def ready(self) -> bool:
        """True when the synth is loaded and can play notes."""
        return self._synth is not None

    def close(self) -> None:
        """Silence everything and release the synth."""
        self.stop()
        if self._synth is not None:
            self._synth.delete()
            self._synth = None

    # -----------------------------------------------------------------
    # Playback
    # -----------------------------------------------------------------
    def has_resource(self, resource_id: str) -> bool:
        return resource_id in self.notes

    def _start(self, resource_id: str) -> float:
        if not self.ready:
            raise AudioDecodeFailure(resource_id, "synth not ready")
        note = max(0, min(127, self.notes[resource_id]))
        self._synth.noteon(0, note, self._velocity)
        self._sounding = note
        logger.info("Playing sound: %s (MIDI %d)", resource_id, note)
        return self._note_duration

    def _end(self, resource_id: str) -> None:
        self._halt()

    def _halt(self) -> None:
        note, self._sounding = self._sounding, None
        if note is not None and self._synth is not None:
            self._synth.noteoff(0, note)


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------
class PlaybackDispatcher:
    """
    Plays the sound bound to a string index, one sample at a time.

    Starting a sample always stops the previous one first; rapid repeats
    on the same string restart it from the beginning.

    Sinks may report completion from their own threads. Those reports are
    queued and only applied by ``poll``, which the host calls from the
    interaction thread, so ``current`` is never written anywhere else.

    Parameters
    ----------
    sink : PlaybackSink
        Where audio goes.
    sound_bank : SoundBank | None
        String → resource table. Defaults to ``SoundBank.default()``.
    on_error : callable | None
        Receives ``MissingAudioResource`` / ``AudioDecodeFailure`` reports.
    """

    def __init__(
        self,
        sink: PlaybackSink,
        sound_bank: SoundBank | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.sink = sink
        self.sound_bank = sound_bank or SoundBank.default()
        self.on_error = on_error
        self.current: str | None = None
        self._play_id = 0
        self._completions: queue.Queue[tuple[int, str, Optional[GridStringsError]]] = (
            queue.Queue()
        )

    def trigger(self, index: int) -> bool:
        """Play the sample for string *index*. Returns True if it started."""
        size = len(self.sound_bank)
        if not 0 <= index < size:
            raise IndexOutOfRange(index, size)

        resource = self.sound_bank[index]
        logger.debug("Attempting to play sound for string %d", index)

        if not self.sink.has_resource(resource):
            self._report(MissingAudioResource(resource))
            return False

        self.stop()
        play_id = self._play_id
        started = self.sink.play(
            resource,
            lambda res, ok, error: self._completions.put((play_id, res, error)),
        )
        if not started:
            # Start failures are reported synchronously
            self.poll()
            return False
        self.current = resource
        return True

    def poll(self) -> int:
        """Apply queued completions; returns how many were handled."""
        handled = 0
        while True:
            try:
                play_id, _resource, error = self._completions.get_nowait()
            except queue.Empty:
                return handled
            handled += 1
            if play_id == self._play_id:
                self.current = None
            if error is not None:
                self._report(error)

    def stop(self) -> None:
        # Completions from anything started before now are stale
        self._play_id += 1
        self.sink.stop()
        self.current = None

    def close(self) -> None:
        self._play_id += 1
        self.current = None
        self.sink.close()

    def _report(self, error: GridStringsError) -> None:
        logger.error("%s", error)
        if self.on_error is not None:
            self.on_error(error)

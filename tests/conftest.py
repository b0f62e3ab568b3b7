import pytest

from gridstrings.audio_engine import PlaybackSink
from gridstrings.errors import AudioDecodeFailure
from gridstrings.models import SoundBank, ViewportGeometry


class RecordingSink(PlaybackSink):
    """Sink that records calls instead of making noise."""

    def __init__(self, resources=None, broken=()):
        self.resources = set(SoundBank.default() if resources is None else resources)
        self.broken = set(broken)
        self.calls = []
        self.playing = None
        self.on_finished = None
        self.closed = False

    def has_resource(self, resource_id):
        return resource_id in self.resources

    def play(self, resource_id, on_finished=None):
        if resource_id in self.broken:
            self.calls.append(("fail", resource_id))
            if on_finished is not None:
                on_finished(resource_id, False, AudioDecodeFailure(resource_id, "bad data"))
            return False
        self.calls.append(("play", resource_id))
        self.playing = resource_id
        self.on_finished = on_finished
        return True

    def stop(self):
        self.calls.append(("stop", self.playing))
        self.playing = None

    def close(self):
        self.stop()
        self.closed = True

    def finish(self):
        """Simulate the sample running to the end."""
        resource, self.playing = self.playing, None
        self.on_finished(resource, True, None)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def phone():
    # 390x844 with no reserved bands: band height 281.33
    return ViewportGeometry(width=390, height=844)

"""
Error kinds raised or reported by the touch-to-sound engine.

A touch that lands on no string is not an error: the resolver simply
returns ``None``.
"""

from __future__ import annotations


class GridStringsError(Exception):
    """Base class for gridstrings errors."""


class DegenerateGeometry(GridStringsError, ValueError):
    """Viewport width or playable height is not positive."""


class IndexOutOfRange(GridStringsError, IndexError):
    """A string index outside the sound bank reached the dispatcher."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"String index {index} outside sound bank of size {size}")
        self.index = index
        self.size = size


class MissingAudioResource(GridStringsError, LookupError):
    """The sink has no sample for the requested resource id."""

    def __init__(self, resource_id: str) -> None:
        super().__init__(f"Could not find sound resource: {resource_id}")
        self.resource_id = resource_id


class AudioDecodeFailure(GridStringsError):
    """The sink could not decode or start a sample."""

    def __init__(self, resource_id: str, reason: str = "") -> None:
        message = f"Could not play sound resource: {resource_id}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.resource_id = resource_id
        self.reason = reason

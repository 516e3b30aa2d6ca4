"""Lifecycle interfaces and the exhaustive-match exception for fretplay.

Audio engines, MIDI ports and timer schedulers hold resources that must be
released at shutdown. Renderers and the controller can be put back into a
blank state.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Any


class Closeable(metaclass=ABCMeta):
    """Holds a device, port or timer that must be released."""

    @abstractmethod
    def close(self) -> None:
        """Release the resource. The object must not be used afterwards."""
        raise NotImplementedError()


class Resettable(metaclass=ABCMeta):
    """Can return to a blank display or selection state."""

    @abstractmethod
    def reset(self) -> None:
        """Return to the state right after construction."""
        raise NotImplementedError()


class MatchException(Exception):
    """Raised when an enum member or event falls through every branch."""

    def __init__(self, value: Any) -> None:
        """Record the value no branch handled.

        Args:
            value: The unhandled enum member or event.
        """
        super().__init__(f"Failed to match value: {value}")

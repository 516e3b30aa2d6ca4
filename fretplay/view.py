"""View ports for the fretboard display.

The renderer and synthesizer never touch a UI toolkit directly. They call a
FretboardView, which any UI layer can implement. MemoryView keeps the display
state in memory and TerminalView draws it as text.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto, unique
from threading import Lock
from typing import Dict, List, Optional, Tuple

from fretplay import constants
from fretplay.base import MatchException, Resettable


@unique
class MarkerState(Enum):
    """Visual state of a single fret marker."""

    Inactive = auto()  # No finger here
    Active = auto()  # Finger position
    Muted = auto()  # String explicitly silenced

    @property
    def symbol(self) -> str:
        if self == MarkerState.Inactive:
            return "-"
        elif self == MarkerState.Active:
            return "o"
        elif self == MarkerState.Muted:
            return "x"
        else:
            raise MatchException(self)


@dataclass(frozen=True)
class FretMarker:
    """A marker coordinate together with its state."""

    string_index: int
    fret: int
    state: MarkerState


class FretboardView(metaclass=ABCMeta):
    """The display capabilities the renderer and synthesizer rely on."""

    @abstractmethod
    def has_marker(self, string_index: int, fret: int) -> bool:
        """Check whether a marker slot is rendered.

        Args:
            string_index: The string of the slot.
            fret: The fret of the slot.

        Returns:
            True if the view has a marker at this coordinate.
        """
        raise NotImplementedError()

    @abstractmethod
    def marker_slots(self) -> List[Tuple[int, int]]:
        """List every rendered (string, fret) marker slot."""
        raise NotImplementedError()

    @abstractmethod
    def set_marker(self, string_index: int, fret: int, state: MarkerState) -> None:
        """Set the state of an existing marker slot."""
        raise NotImplementedError()

    @abstractmethod
    def set_string_pulse(self, string_index: int, plucked: bool) -> None:
        """Turn the plucked highlight of a string on or off."""
        raise NotImplementedError()

    @abstractmethod
    def set_label(self, text: str) -> None:
        """Set the text of the chord label."""
        raise NotImplementedError()

    @abstractmethod
    def set_chord_button(self, chord_id: Optional[str]) -> None:
        """Highlight one chord button and clear the others (None clears all)."""
        raise NotImplementedError()


class MemoryView(FretboardView, Resettable):
    """A view that keeps marker, pulse and label state in memory.

    Slots cover every string and frets 0 through num_frets. Pulse updates can
    arrive from timer threads, so state changes are guarded by a lock.
    """

    def __init__(self, num_frets: int = constants.DEFAULT_NUM_FRETS) -> None:
        self._num_frets = num_frets
        self._lock = Lock()
        self._markers: Dict[Tuple[int, int], MarkerState] = {}
        self._pulses: Dict[int, bool] = {}
        self._label = ""
        self._pulse_count = 0
        self._button: Optional[str] = None
        self.reset()

    @property
    def num_frets(self) -> int:
        return self._num_frets

    def reset(self) -> None:
        with self._lock:
            self._markers = {slot: MarkerState.Inactive for slot in self._iter_slots()}
            self._pulses = {s: False for s in range(constants.NUM_STRINGS)}
            self._label = ""
            self._button = None

    def _iter_slots(self) -> List[Tuple[int, int]]:
        return [
            (string_index, fret)
            for string_index in range(constants.NUM_STRINGS)
            for fret in range(self._num_frets + 1)
        ]

    def has_marker(self, string_index: int, fret: int) -> bool:
        return (string_index, fret) in self._markers

    def marker_slots(self) -> List[Tuple[int, int]]:
        return self._iter_slots()

    def set_marker(self, string_index: int, fret: int, state: MarkerState) -> None:
        with self._lock:
            self._markers[(string_index, fret)] = state

    def set_string_pulse(self, string_index: int, plucked: bool) -> None:
        with self._lock:
            self._pulses[string_index] = plucked
            if plucked:
                self._pulse_count += 1

    def set_label(self, text: str) -> None:
        with self._lock:
            self._label = text

    def set_chord_button(self, chord_id: Optional[str]) -> None:
        with self._lock:
            self._button = chord_id

    def marker(self, string_index: int, fret: int) -> MarkerState:
        return self._markers[(string_index, fret)]

    def markers(self) -> Dict[Tuple[int, int], MarkerState]:
        """Snapshot of every slot that is not inactive."""
        with self._lock:
            return {
                slot: state
                for slot, state in self._markers.items()
                if state != MarkerState.Inactive
            }

    def is_plucked(self, string_index: int) -> bool:
        return self._pulses[string_index]

    @property
    def pulse_count(self) -> int:
        """Number of times any string has been highlighted."""
        return self._pulse_count

    @property
    def label(self) -> str:
        return self._label

    @property
    def chord_button(self) -> Optional[str]:
        """The highlighted chord button, if any."""
        return self._button


class TerminalView(MemoryView):
    """A MemoryView that can draw itself as a text fretboard.

    The highest string is drawn on top, like a tab staff.
    """

    def render_text(self) -> str:
        """Draw the label and one line per string.

        Returns:
            The drawing, e.g. ``"5 |o|-|-|"`` rows with a ``*`` after
            strings that are currently plucked.
        """
        with self._lock:
            lines = [self._label or "(no chord)"]
            for string_index in reversed(range(constants.NUM_STRINGS)):
                cells = "|".join(
                    self._markers[(string_index, fret)].symbol
                    for fret in range(self._num_frets + 1)
                )
                pulse = " *" if self._pulses[string_index] else ""
                lines.append(f"{string_index} |{cells}|{pulse}")
            return "\n".join(lines)

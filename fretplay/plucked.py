"""Main controller class that coordinates all fretplay components.

This module contains the Plucked class, which turns user events (chord
buttons, string clicks and fret marker clicks) into fretboard rendering and
synthesis. It owns the current chord selection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from fretplay import constants
from fretplay.audio import AudioHandle
from fretplay.base import MatchException, Resettable
from fretplay.catalog import Chord, ChordCatalog
from fretplay.fretboard import FretboardRenderer
from fretplay.synth import PlaybackEvent, Synthesizer
from fretplay.tone import Tone


@dataclass(frozen=True)
class ChordEvent:
    """A chord button was pressed."""

    chord_id: str


@dataclass(frozen=True)
class StringEvent:
    """A string was clicked."""

    string_index: int


@dataclass(frozen=True)
class MarkerEvent:
    """A fret marker was clicked."""

    string_index: int
    fret: int


type UserEvent = Union[ChordEvent, StringEvent, MarkerEvent]


def resolve_string_fret(chord: Optional[Chord], string_index: int) -> int:
    """Pick the fret to sound when a bare string is clicked.

    Args:
        chord: The selected chord, if any.
        string_index: The clicked string.

    Returns:
        The chord's fret for that string if it sounds the string, otherwise
        the open fret.
    """
    if chord is not None:
        pos = chord.position_for(string_index)
        if pos is not None and not pos.muted:
            return pos.fret
    return constants.OPEN_FRET


class Plucked(Resettable):
    """Controller that routes user events to the renderer and synthesizer.

    Rendering and sound are independent: a chord selection draws the
    fingering and schedules the strum without either waiting on the other.
    """

    def __init__(
        self,
        catalog: ChordCatalog,
        renderer: FretboardRenderer,
        synth: Synthesizer,
        audio: AudioHandle,
    ) -> None:
        """Initialize the controller.

        Args:
            catalog: Chords available for selection.
            renderer: Draws chord fingerings.
            synth: Plays plucks and strums.
            audio: The audio engine handle, built on the first gesture.
        """
        self._catalog = catalog
        self._renderer = renderer
        self._synth = synth
        self._audio = audio
        self._current: Optional[Chord] = None

    @property
    def current_chord(self) -> Optional[Chord]:
        return self._current

    def handle_event(self, event: UserEvent) -> None:
        """Handle a user event.

        Args:
            event: The event to process.

        Raises:
            MatchException: If the event type is unknown.
        """
        if isinstance(event, ChordEvent):
            self.select_chord(event.chord_id)
        elif isinstance(event, StringEvent):
            self.click_string(event.string_index)
        elif isinstance(event, MarkerEvent):
            self.click_marker(event.string_index, event.fret)
        else:
            raise MatchException(event)

    def select_chord(self, chord_id: str) -> List[PlaybackEvent]:
        """Show and strum a chord.

        Unknown identifiers are ignored: nothing is drawn or played and the
        current selection is kept.

        Args:
            chord_id: The identifier of the chord button.

        Returns:
            The scheduled plucks, empty for an unknown chord.
        """
        self._audio.ensure()
        chord = self._catalog.lookup(chord_id)
        if chord is None:
            logging.debug("ignoring unknown chord %s", chord_id)
            return []
        logging.info("selected chord %s", chord.name)
        self._current = chord
        self._renderer.render(chord)
        return self._synth.strum(chord)

    def click_string(self, string_index: int) -> Tone:
        """Pluck a string at the fret the current chord gives it."""
        self._audio.ensure()
        fret = resolve_string_fret(self._current, string_index)
        return self._synth.pluck(string_index, fret)

    def click_marker(self, string_index: int, fret: int) -> Tone:
        """Pluck exactly the clicked string and fret."""
        self._audio.ensure()
        return self._synth.pluck(string_index, fret)

    def reset(self) -> None:
        """Clear the display and forget the current chord."""
        logging.info("plucked resetting")
        self._current = None
        self._renderer.reset()

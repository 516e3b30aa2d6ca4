"""Fretboard rendering of chord fingerings.

The renderer turns a Chord into marker updates on a FretboardView. It is
purely visual and never produces sound.
"""

from __future__ import annotations

import logging
from typing import List

from fretplay import constants
from fretplay.base import Resettable
from fretplay.catalog import Chord
from fretplay.view import FretboardView, FretMarker, MarkerState


def chord_markers(chord: Chord) -> List[FretMarker]:
    """Compute the markers that show a chord.

    Muted strings are anchored on the open fret slot.

    Args:
        chord: The chord to show.

    Returns:
        One marker per position, in catalog order.
    """
    markers = []
    for pos in chord.positions:
        if pos.muted:
            markers.append(
                FretMarker(pos.string_index, constants.OPEN_FRET, MarkerState.Muted)
            )
        else:
            markers.append(FretMarker(pos.string_index, pos.fret, MarkerState.Active))
    return markers


def chord_label(chord: Chord) -> str:
    return chord.name + constants.LABEL_SUFFIX


class FretboardRenderer(Resettable):
    """Applies chord fingerings to a fretboard view."""

    def __init__(self, view: FretboardView) -> None:
        self._view = view

    def clear(self) -> None:
        """Reset every marker slot to inactive."""
        for string_index, fret in self._view.marker_slots():
            self._view.set_marker(string_index, fret, MarkerState.Inactive)

    def reset(self) -> None:
        self.clear()
        self._view.set_label("")
        self._view.set_chord_button(None)

    def render(self, chord: Chord) -> List[FretMarker]:
        """Show a chord, replacing whatever was shown before.

        Markers are always cleared first, even when the same chord is shown
        again. Markers whose slot the view does not render are skipped. The
        chord's button becomes the only highlighted one.

        Args:
            chord: The chord to show.

        Returns:
            The marker updates that were applied.
        """
        self.clear()
        applied = []
        for marker in chord_markers(chord):
            if self._view.has_marker(marker.string_index, marker.fret):
                self._view.set_marker(marker.string_index, marker.fret, marker.state)
                applied.append(marker)
            else:
                logging.debug("no marker slot for %s", marker)
        self._view.set_label(chord_label(chord))
        self._view.set_chord_button(chord.chord_id)
        return applied

"""Chord catalog: an immutable registry of six-string chord fingerings.

Chords are validated once when a catalog is built. Lookups of unknown
identifiers return None, which callers treat as a no-op.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from fretplay import constants


class CatalogError(ValueError):
    """Raised when chord data does not satisfy the catalog schema."""


@dataclass(frozen=True)
class StringPosition:
    """The fret to hold on one string for a chord."""

    string_index: int
    """The string number (0 is the lowest pitch string)."""
    fret: int
    """The fret to hold: -1 for muted, 0 for open, otherwise fretted."""

    @property
    def muted(self) -> bool:
        return self.fret == constants.MUTED_FRET


@dataclass(frozen=True)
class Chord:
    """A named fingering with exactly one position per string.

    Positions keep catalog order, which is the order strings are strummed.
    """

    chord_id: str
    """Short lookup key, e.g. "C" or "Am"."""
    name: str
    """Display name, e.g. "C Major"."""
    positions: Tuple[StringPosition, ...]
    """One position per string in catalog order."""

    def position_for(self, string_index: int) -> Optional[StringPosition]:
        """Find the position defined for a string.

        Args:
            string_index: The string to look up.

        Returns:
            The position for that string, or None if the chord has none.
        """
        for pos in self.positions:
            if pos.string_index == string_index:
                return pos
        return None


def validate_chord(chord: Chord) -> None:
    """Check a chord against the catalog schema.

    Args:
        chord: The chord to check.

    Raises:
        CatalogError: If the id or name is empty, the position count is not
            the number of strings, a string index is repeated or out of range,
            or a fret is below the muted value.
    """
    if not chord.chord_id:
        raise CatalogError("Chord id must be non-empty")
    if not chord.name:
        raise CatalogError(f"Chord {chord.chord_id} has no display name")
    if len(chord.positions) != constants.NUM_STRINGS:
        raise CatalogError(
            f"Chord {chord.chord_id} has {len(chord.positions)} positions, "
            f"expected {constants.NUM_STRINGS}"
        )
    seen = set()
    for pos in chord.positions:
        if pos.string_index < 0 or pos.string_index >= constants.NUM_STRINGS:
            raise CatalogError(
                f"Chord {chord.chord_id} has invalid string index {pos.string_index}"
            )
        if pos.string_index in seen:
            raise CatalogError(
                f"Chord {chord.chord_id} repeats string index {pos.string_index}"
            )
        if pos.fret < constants.MUTED_FRET:
            raise CatalogError(
                f"Chord {chord.chord_id} has invalid fret {pos.fret} "
                f"on string {pos.string_index}"
            )
        seen.add(pos.string_index)


def _is_int(value: Any) -> bool:
    # JSON booleans decode to bool, which is an int subclass
    return isinstance(value, int) and not isinstance(value, bool)


def make_chord(chord_id: str, name: str, pairs: Sequence[Tuple[int, int]]) -> Chord:
    """Build a chord from (string, fret) pairs without validating it."""
    positions = tuple(StringPosition(string_index=s, fret=f) for s, f in pairs)
    return Chord(chord_id=chord_id, name=name, positions=positions)


class ChordCatalog:
    """Read-only mapping from chord identifier to Chord."""

    def __init__(self, chords: Sequence[Chord]) -> None:
        """Build and validate a catalog.

        Args:
            chords: The chords to register, in display order.

        Raises:
            CatalogError: If any chord is invalid or an id is repeated.
        """
        self._chords: Dict[str, Chord] = {}
        for chord in chords:
            validate_chord(chord)
            if chord.chord_id in self._chords:
                raise CatalogError(f"Duplicate chord id {chord.chord_id}")
            self._chords[chord.chord_id] = chord

    def lookup(self, chord_id: str) -> Optional[Chord]:
        """Find a chord by identifier.

        Args:
            chord_id: The chord identifier, e.g. "Am".

        Returns:
            The chord, or None if the identifier is unknown.
        """
        return self._chords.get(chord_id)

    def chord_ids(self) -> List[str]:
        return list(self._chords)

    def __contains__(self, chord_id: object) -> bool:
        return chord_id in self._chords

    def __iter__(self) -> Iterator[Chord]:
        return iter(self._chords.values())

    def __len__(self) -> int:
        return len(self._chords)

    @classmethod
    def from_data(cls, data: Any) -> ChordCatalog:
        """Build a catalog from decoded JSON data.

        The expected shape is
        ``{"chords": [{"id": "C", "name": "C Major", "positions": [[5, 0], ...]}]}``.

        Args:
            data: The decoded document.

        Returns:
            A validated catalog.

        Raises:
            CatalogError: If the document does not have the expected shape.
        """
        if not isinstance(data, dict) or not isinstance(data.get("chords"), list):
            raise CatalogError("Catalog document must have a 'chords' list")
        chords: List[Chord] = []
        for entry in data["chords"]:
            try:
                chord_id = entry["id"]
                name = entry["name"]
                pairs = [(s, f) for s, f in entry["positions"]]
            except (KeyError, TypeError, ValueError) as e:
                raise CatalogError(f"Malformed chord entry {entry!r}") from e
            if not isinstance(chord_id, str) or not isinstance(name, str):
                raise CatalogError(f"Malformed chord entry {entry!r}")
            if not all(_is_int(s) and _is_int(f) for s, f in pairs):
                raise CatalogError(f"Chord {chord_id} has non-integer positions")
            chords.append(make_chord(chord_id, name, pairs))
        return cls(chords)

    @classmethod
    def from_json(cls, text: str) -> ChordCatalog:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Catalog is not valid JSON: {e}") from e
        return cls.from_data(data)


def load_catalog(path: Path) -> ChordCatalog:
    """Load and validate a catalog from a JSON file."""
    return ChordCatalog.from_json(path.read_text())


# Positions are listed high string first, so strums sweep from string 5 down.
_DEFAULT_CHORDS: List[Chord] = [
    make_chord("C", "C Major", [(5, 0), (4, 1), (3, 0), (2, 2), (1, 3), (0, -1)]),
    make_chord("D", "D Major", [(5, 2), (4, 3), (3, 2), (2, 0), (1, -1), (0, -1)]),
    make_chord("E", "E Major", [(5, 0), (4, 2), (3, 2), (2, 1), (1, 0), (0, 0)]),
    make_chord("F", "F Major", [(5, 1), (4, 3), (3, 3), (2, 2), (1, 1), (0, 1)]),
    make_chord("G", "G Major", [(5, 3), (4, 2), (3, 0), (2, 0), (1, 0), (0, 3)]),
    make_chord("A", "A Major", [(5, 0), (4, 0), (3, 2), (2, 2), (1, 2), (0, -1)]),
    make_chord("B", "B Major", [(5, 2), (4, 4), (3, 4), (2, 4), (1, -1), (0, -1)]),
    make_chord("Am", "A Minor", [(5, 0), (4, 1), (3, 2), (2, 2), (1, 0), (0, -1)]),
    make_chord("Em", "E Minor", [(5, 0), (4, 2), (3, 2), (2, 0), (1, 0), (0, 0)]),
    make_chord("Dm", "D Minor", [(5, 1), (4, 3), (3, 2), (2, 0), (1, -1), (0, -1)]),
]


def default_catalog() -> ChordCatalog:
    """Create the built-in catalog of ten major and minor chords."""
    return ChordCatalog(_DEFAULT_CHORDS)

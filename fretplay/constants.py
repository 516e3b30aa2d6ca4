"""Constants for the fretplay guitar model and tone synthesis.

String indices run from 0 (low E) to 5 (high E). Times are in milliseconds
unless the name says otherwise.
"""

from typing import Tuple

NUM_STRINGS = 6
"""Number of strings on the instrument."""

MUTED_FRET = -1
"""Fret value meaning the string is not sounded."""

OPEN_FRET = 0
"""Fret value for an open string."""

DEFAULT_NUM_FRETS = 5
"""Number of fretted positions rendered on the fretboard (open slot excluded)."""

SEMITONES_PER_OCTAVE = 12

OPEN_STRING_FREQS: Tuple[float, ...] = (82.41, 110.00, 146.83, 196.00, 246.94, 329.63)
"""Open string frequencies in Hz for standard tuning (E2 A2 D3 G3 B3 E4)."""

STANDARD_TUNING: Tuple[int, ...] = (40, 45, 50, 55, 59, 64)
"""MIDI note numbers of the open strings in standard tuning."""

TONE_DURATION_SECS = 1.5
"""Length of every plucked tone."""

TONE_START_GAIN = 0.3
"""Gain at tone onset (no attack phase)."""

TONE_END_GAIN = 0.01
"""Gain reached at the end of the tone."""

STRUM_STEP_MILLIS = 50
"""Offset between successive string onsets in a strum."""

PLUCK_PULSE_MILLIS = 500
"""How long a string shows its plucked state."""

DEFAULT_SAMPLE_RATE = 44100

DEFAULT_MIDI_PORT_NAME = "fretplay"
DEFAULT_MIDI_CHANNEL = 1
DEFAULT_MIDI_VELOCITY = 96

LABEL_SUFFIX = " chord"
"""Appended to a chord's display name in the label."""

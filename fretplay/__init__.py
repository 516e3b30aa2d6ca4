"""Interactive guitar fretboard: chord fingerings, plucked tones and strums."""

"""Tone rendering for plucked strings.

A tone is a waveform at a string's equal-tempered pitch, shaped by an
exponential decay with no attack. Buffers are mono float64 numpy arrays.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from fretplay import constants
from fretplay.base import MatchException
from fretplay.config import Waveform

type Array = npt.NDArray[np.float64]

TAU = np.float64(2 * np.pi)


def frequency(
    string_index: int,
    fret: int,
    open_freqs: Sequence[float] = constants.OPEN_STRING_FREQS,
) -> float:
    """Compute the pitch of a string held at a fret.

    Args:
        string_index: The string (0 is low E).
        fret: Semitones above the open string.
        open_freqs: Open string frequencies in Hz.

    Returns:
        The frequency in Hz.
    """
    return open_freqs[string_index] * 2 ** (fret / constants.SEMITONES_PER_OCTAVE)


@dataclass(frozen=True)
class Tone:
    """Everything needed to sound one pluck."""

    string_index: int
    fret: int
    freq: float  # Hz
    note: int  # MIDI note number of the same pitch
    duration: float  # Seconds
    start_gain: float
    end_gain: float
    waveform: Waveform


def mk_lspace(duration: float, rate: int) -> Array:
    """Sample times from zero up to (not including) the duration."""
    assert duration >= 0
    assert rate > 0
    num = round(rate * duration)
    return np.arange(num, dtype=np.float64) / rate


def mk_wave(lspace: Array, freq: float, waveform: Waveform) -> Array:
    """Evaluate an oscillator at the given sample times.

    Every shape starts at zero phase and spans -1 to 1.
    """
    assert freq > 0
    cycles = lspace * np.float64(freq)
    if waveform == Waveform.Sine:
        return np.sin(cycles * TAU)
    elif waveform == Waveform.Triangle:
        return 4.0 * np.abs(np.mod(cycles + 0.75, 1.0) - 0.5) - 1.0
    elif waveform == Waveform.Square:
        return np.where(np.mod(cycles, 1.0) < 0.5, 1.0, -1.0)
    elif waveform == Waveform.Sawtooth:
        return 2.0 * np.mod(cycles + 0.5, 1.0) - 1.0
    else:
        raise MatchException(waveform)


def mk_envelope(lspace: Array, duration: float, start: float, end: float) -> Array:
    """Exponential ramp from start to end gain over the duration."""
    assert start > 0 and end > 0
    return start * np.power(end / start, lspace / duration)


def render_tone(tone: Tone, rate: int) -> Array:
    """Render a tone into a mono sample buffer.

    Args:
        tone: The tone to render.
        rate: Sample rate in Hz.

    Returns:
        The samples, ``round(rate * tone.duration)`` long.
    """
    lspace = mk_lspace(tone.duration, rate)
    arr = mk_wave(lspace, tone.freq, tone.waveform)
    np.multiply(
        arr,
        mk_envelope(lspace, tone.duration, tone.start_gain, tone.end_gain),
        out=arr,
    )
    return arr


def mix_tones(timed: List[Tuple[int, Tone]], rate: int) -> Array:
    """Render tones at millisecond offsets into one buffer by summing them.

    Args:
        timed: Pairs of (offset in milliseconds, tone).
        rate: Sample rate in Hz.

    Returns:
        A buffer long enough to hold the last tone to finish, clipped to
        the range -1 to 1.
    """
    rendered = []
    for offset_millis, tone in timed:
        start_ix = round(rate * offset_millis / 1000)
        rendered.append((start_ix, render_tone(tone, rate)))
    length = max((ix + len(arr) for ix, arr in rendered), default=0)
    out = np.zeros(length, dtype=np.float64)
    for start_ix, arr in rendered:
        out[start_ix : start_ix + len(arr)] += arr
    np.clip(out, -1.0, 1.0, out=out)
    return out

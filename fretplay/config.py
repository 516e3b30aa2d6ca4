"""Configuration module for fretplay.

This module defines the configuration dataclass and enums that control tone
synthesis, strum timing, the rendered fretboard range and audio output.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto, unique
from typing import List

from fretplay import constants


@unique
class Waveform(Enum):
    """Oscillator shape used for a plucked tone."""

    Triangle = auto()  # Closest to a plucked string of the simple shapes
    Sine = auto()
    Square = auto()
    Sawtooth = auto()


@unique
class EngineKind(Enum):
    """Which audio engine the application constructs on first use."""

    Sound = auto()  # Audio device output through sounddevice
    Midi = auto()  # Note messages to a MIDI output port
    Null = auto()  # Record tones without producing sound


@dataclass(frozen=True)
class Config:
    """Main configuration class containing synthesis and interface settings."""

    sample_rate: int  # Samples per second for rendered tones
    num_frets: int  # Highest fret with a rendered marker slot
    strum_step_millis: int  # Onset offset between successive strings
    pulse_millis: int  # Duration of the plucked string highlight
    tone_secs: float  # Duration of each tone
    start_gain: float  # Gain at onset
    end_gain: float  # Gain at the end of the decay
    waveform: Waveform  # Oscillator shape
    open_freqs: List[float]  # Open string frequencies, low to high
    tuning: List[int]  # Open string MIDI notes, low to high
    engine: EngineKind  # Audio engine to build on first gesture
    midi_port: str  # Name of the MIDI output port for the MIDI engine
    midi_channel: int  # MIDI channel (1-16)
    midi_velocity: int  # Velocity of MIDI note-on messages


def init_config() -> Config:
    """Initialize a default configuration.

    Returns:
        A Config with standard tuning, a triangle wave tone of 1.5 seconds
        decaying from 0.3 to 0.01, 50 ms strum steps and 500 ms pulses.
    """
    return Config(
        sample_rate=constants.DEFAULT_SAMPLE_RATE,
        num_frets=constants.DEFAULT_NUM_FRETS,
        strum_step_millis=constants.STRUM_STEP_MILLIS,
        pulse_millis=constants.PLUCK_PULSE_MILLIS,
        tone_secs=constants.TONE_DURATION_SECS,
        start_gain=constants.TONE_START_GAIN,
        end_gain=constants.TONE_END_GAIN,
        waveform=Waveform.Triangle,
        open_freqs=list(constants.OPEN_STRING_FREQS),
        tuning=list(constants.STANDARD_TUNING),
        engine=EngineKind.Sound,
        midi_port=constants.DEFAULT_MIDI_PORT_NAME,
        midi_channel=constants.DEFAULT_MIDI_CHANNEL,
        midi_velocity=constants.DEFAULT_MIDI_VELOCITY,
    )

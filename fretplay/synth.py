"""Plucks and strums.

A pluck hands one tone to the audio engine and highlights its string. A
strum schedules one pluck per sounding string at fixed offsets. Tones never
cancel each other; overlapping plucks simply overlap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from fretplay import constants
from fretplay.audio import AudioHandle
from fretplay.catalog import Chord
from fretplay.config import Config
from fretplay.schedule import Action, Schedule, Scheduler
from fretplay.tone import Array, Tone, frequency, mix_tones
from fretplay.view import FretboardView


@dataclass(frozen=True)
class PlaybackEvent:
    """A pluck scheduled as part of a strum."""

    string_index: int
    fret: int
    offset_millis: int


class Synthesizer:
    """Plays plucks and strums through an audio engine.

    Each pluck also highlights its string on the view for a short time. The
    highlight is scheduled separately and never delays the tone.
    """

    def __init__(
        self,
        config: Config,
        audio: AudioHandle,
        view: FretboardView,
        scheduler: Scheduler,
    ) -> None:
        self._config = config
        self._audio = audio
        self._view = view
        self._scheduler = scheduler

    def make_tone(self, string_index: int, fret: int) -> Tone:
        """Build the tone for a string and fret.

        Raises:
            ValueError: If the string is out of range or the fret is negative.
        """
        if string_index < 0 or string_index >= constants.NUM_STRINGS:
            raise ValueError(f"Invalid string index: {string_index}")
        if fret < 0:
            raise ValueError(f"Cannot pluck fret {fret}")
        return Tone(
            string_index=string_index,
            fret=fret,
            freq=frequency(string_index, fret, self._config.open_freqs),
            note=self._config.tuning[string_index] + fret,
            duration=self._config.tone_secs,
            start_gain=self._config.start_gain,
            end_gain=self._config.end_gain,
            waveform=self._config.waveform,
        )

    def pluck(self, string_index: int, fret: int) -> Tone:
        """Sound one string at a fret now.

        Args:
            string_index: The string to pluck (0-5).
            fret: The fret to hold (0 for open).

        Returns:
            The tone handed to the audio engine.
        """
        tone = self.make_tone(string_index, fret)
        logging.debug(
            "pluck string %d fret %d at %.2f Hz", string_index, fret, tone.freq
        )
        self._audio.ensure().play(tone)
        self._view.set_string_pulse(string_index, True)
        pulse = Schedule()
        pulse.add(
            self._config.pulse_millis,
            lambda: self._view.set_string_pulse(string_index, False),
        )
        self._scheduler.submit(pulse)
        return tone

    def strum_events(self, chord: Chord) -> List[PlaybackEvent]:
        """Compute the plucks of a strum without scheduling them.

        Offsets follow the position's index in the chord, so a muted string
        leaves a gap instead of pulling later strings forward.
        """
        step = self._config.strum_step_millis
        return [
            PlaybackEvent(pos.string_index, pos.fret, index * step)
            for index, pos in enumerate(chord.positions)
            if not pos.muted
        ]

    def strum(self, chord: Chord) -> List[PlaybackEvent]:
        """Schedule one pluck per sounding string of a chord.

        Args:
            chord: The chord to strum.

        Returns:
            The scheduled plucks in catalog order.
        """
        events = self.strum_events(chord)
        schedule = Schedule()
        for ev in events:
            schedule.add(ev.offset_millis, self._pluck_action(ev))
        logging.debug("strum %s: %d plucks", chord.chord_id, len(events))
        self._scheduler.submit(schedule)
        return events

    def _pluck_action(self, ev: PlaybackEvent) -> Action:
        def action() -> None:
            self.pluck(ev.string_index, ev.fret)

        return action

    def render_strum(self, chord: Chord) -> Array:
        """Render a strum offline into a single buffer."""
        timed = [
            (ev.offset_millis, self.make_tone(ev.string_index, ev.fret))
            for ev in self.strum_events(chord)
        ]
        return mix_tones(timed, self._config.sample_rate)

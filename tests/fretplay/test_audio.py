"""Tests for audio engines and the engine handle."""

from dataclasses import replace
from typing import List

import numpy as np
import pytest
from mido.frozen import FrozenMessage

from fretplay.audio import (
    AudioHandle,
    MidiEngine,
    RecordingEngine,
    SoundDeviceEngine,
    engine_factory,
)
from fretplay.config import EngineKind, Waveform, init_config
from fretplay.schedule import ManualScheduler
from fretplay.tone import Tone, render_tone

RATE = 8000


def mk_tone(fret: int = 0) -> Tone:
    return Tone(
        string_index=0,
        fret=fret,
        freq=82.41 * 2 ** (fret / 12),
        note=40 + fret,
        duration=1.5,
        start_gain=0.3,
        end_gain=0.01,
        waveform=Waveform.Triangle,
    )


class FakePort:
    def __init__(self) -> None:
        self.sent: List[FrozenMessage] = []
        self.closed = False

    def send(self, msg: FrozenMessage) -> None:
        self.sent.append(msg)

    def reset(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


def test_handle_builds_once() -> None:
    built: List[RecordingEngine] = []

    def factory() -> RecordingEngine:
        engine = RecordingEngine()
        built.append(engine)
        return engine

    handle = AudioHandle(factory)
    assert not handle.ready
    first = handle.ensure()
    second = handle.ensure()
    assert first is second
    assert len(built) == 1
    assert handle.ready
    handle.close()
    assert not handle.ready


def test_null_engine_factory() -> None:
    config = replace(init_config(), engine=EngineKind.Null)
    engine = engine_factory(config, ManualScheduler())()
    assert isinstance(engine, RecordingEngine)


def test_sound_engine_mixes_voices() -> None:
    engine = SoundDeviceEngine(RATE)
    tone = mk_tone()
    single = render_tone(tone, RATE)
    engine.play(tone)
    first = engine.mix(400)
    assert first == pytest.approx(single[:400])
    engine.play(tone)
    assert engine.num_voices == 2
    second = engine.mix(400)
    assert second == pytest.approx(single[400:800] + single[:400])


def test_sound_engine_drops_finished_voices() -> None:
    engine = SoundDeviceEngine(RATE)
    engine.play(mk_tone())
    block = engine.mix(12000 + 100)
    assert engine.num_voices == 0
    assert np.all(block[12000:] == 0.0)
    engine.close()


def test_midi_engine_note_on_off() -> None:
    port = FakePort()
    scheduler = ManualScheduler()
    engine = MidiEngine(
        "test", port, scheduler, channel=2, velocity=96  # type: ignore[arg-type]
    )
    engine.play(mk_tone(fret=3))
    assert port.sent == [FrozenMessage(type="note_on", channel=1, note=43, velocity=96)]
    scheduler.advance(1499)
    assert len(port.sent) == 1
    scheduler.advance(1)
    assert port.sent[-1] == FrozenMessage(
        type="note_on", channel=1, note=43, velocity=0
    )
    engine.close()
    assert port.closed


def test_midi_engine_retrigger_keeps_note_on() -> None:
    port = FakePort()
    scheduler = ManualScheduler()
    engine = MidiEngine(
        "test", port, scheduler, channel=1, velocity=96  # type: ignore[arg-type]
    )
    engine.play(mk_tone())
    scheduler.advance(1000)
    engine.play(mk_tone())
    # First tone's note-off time passes while the second is still sounding
    scheduler.advance(1499)
    assert [msg.velocity for msg in port.sent] == [96, 96]
    scheduler.advance(1)
    assert [msg.velocity for msg in port.sent] == [96, 96, 0]
    assert scheduler.pending() == []


def test_handle_does_not_rebuild_after_close() -> None:
    built: List[RecordingEngine] = []

    def factory() -> RecordingEngine:
        engine = RecordingEngine()
        built.append(engine)
        return engine

    handle = AudioHandle(factory)
    handle.ensure()
    handle.close()
    with pytest.raises(RuntimeError):
        handle.ensure()
    assert len(built) == 1
    assert not handle.ready


def test_handle_closed_before_first_use() -> None:
    handle = AudioHandle(RecordingEngine)
    handle.close()
    with pytest.raises(RuntimeError):
        handle.ensure()

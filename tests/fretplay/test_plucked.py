"""Tests for the controller."""

from typing import Tuple

import pytest

from fretplay.audio import AudioHandle, RecordingEngine
from fretplay.base import MatchException
from fretplay.catalog import ChordCatalog, default_catalog, make_chord
from fretplay.config import init_config
from fretplay.fretboard import FretboardRenderer
from fretplay.plucked import (
    ChordEvent,
    MarkerEvent,
    Plucked,
    StringEvent,
    resolve_string_fret,
)
from fretplay.schedule import ManualScheduler
from fretplay.synth import Synthesizer
from fretplay.view import MarkerState, MemoryView

CATALOG = default_catalog()


def mk_plucked(
    catalog: ChordCatalog = CATALOG,
) -> Tuple[Plucked, RecordingEngine, MemoryView, ManualScheduler, AudioHandle]:
    engine = RecordingEngine()
    audio = AudioHandle(lambda: engine)
    view = MemoryView()
    scheduler = ManualScheduler()
    synth = Synthesizer(init_config(), audio, view, scheduler)
    plucked = Plucked(catalog, FretboardRenderer(view), synth, audio)
    return plucked, engine, view, scheduler, audio


def test_resolve_string_fret() -> None:
    c = CATALOG.lookup("C")
    assert resolve_string_fret(None, 3) == 0
    assert resolve_string_fret(c, 1) == 3
    assert resolve_string_fret(c, 5) == 0
    # Muted string falls back to open
    assert resolve_string_fret(c, 0) == 0


def test_resolve_missing_position() -> None:
    partial = make_chord("P", "Partial", [(5, 2), (4, 3)])
    assert resolve_string_fret(partial, 5) == 2
    assert resolve_string_fret(partial, 0) == 0


def test_audio_built_on_first_gesture() -> None:
    plucked, _, _, _, audio = mk_plucked()
    assert not audio.ready
    plucked.handle_event(StringEvent(0))
    assert audio.ready


def test_select_chord() -> None:
    plucked, engine, view, scheduler, _ = mk_plucked()
    events = plucked.select_chord("Am")
    assert plucked.current_chord is CATALOG.lookup("Am")
    assert len(events) == 5
    assert view.label == "A Minor chord"
    assert view.marker(0, 0) == MarkerState.Muted
    scheduler.run_all()
    assert len(engine.tones) == 5


def test_unknown_chord_is_ignored() -> None:
    plucked, engine, view, scheduler, _ = mk_plucked()
    plucked.select_chord("G")
    scheduler.run_all()
    before = view.markers()
    tones = len(engine.tones)
    assert plucked.select_chord("Zmaj7") == []
    scheduler.run_all()
    assert view.markers() == before
    assert view.label == "G Major chord"
    assert len(engine.tones) == tones
    assert plucked.current_chord is CATALOG.lookup("G")


def test_unknown_chord_on_fresh_board() -> None:
    plucked, engine, view, scheduler, _ = mk_plucked()
    plucked.handle_event(ChordEvent("Zmaj7"))
    assert scheduler.pending() == []
    assert view.markers() == {}
    assert engine.tones == []
    assert plucked.current_chord is None


def test_click_string_uses_current_chord() -> None:
    plucked, engine, _, _, _ = mk_plucked()
    assert plucked.click_string(1).fret == 0
    plucked.select_chord("C")
    assert plucked.click_string(1).fret == 3
    assert plucked.click_string(0).fret == 0
    plucked.select_chord("G")
    assert plucked.click_string(0).fret == 3


def test_click_marker() -> None:
    plucked, engine, view, _, _ = mk_plucked()
    plucked.select_chord("E")
    tone = plucked.click_marker(4, 5)
    assert (tone.string_index, tone.fret) == (4, 5)
    # Manual plucks do not change the rendered chord
    assert view.label == "E Major chord"


def test_rapid_clicks_overlap() -> None:
    plucked, engine, _, scheduler, _ = mk_plucked()
    for _ in range(4):
        plucked.handle_event(MarkerEvent(2, 2))
        scheduler.advance(20)
    assert len(engine.tones) == 4
    assert all(t.duration == 1.5 for t in engine.tones)


def test_reset() -> None:
    plucked, _, view, _, _ = mk_plucked()
    plucked.select_chord("Dm")
    plucked.reset()
    assert plucked.current_chord is None
    assert view.markers() == {}
    assert view.label == ""


def test_unknown_event() -> None:
    plucked, _, _, _, _ = mk_plucked()
    with pytest.raises(MatchException):
        plucked.handle_event("C")  # type: ignore[arg-type]


def test_unknown_chord_keeps_button() -> None:
    plucked, _, view, _, _ = mk_plucked()
    plucked.select_chord("Am")
    plucked.select_chord("Zmaj7")
    assert view.chord_button == "Am"

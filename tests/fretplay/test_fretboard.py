"""Tests for fretboard rendering."""

import pytest

from fretplay.catalog import Chord, default_catalog, make_chord
from fretplay.fretboard import FretboardRenderer
from fretplay.view import FretMarker, MarkerState, MemoryView

CATALOG = default_catalog()


def expected_markers(chord: Chord):
    out = {}
    for pos in chord.positions:
        if pos.fret == -1:
            out[(pos.string_index, 0)] = MarkerState.Muted
        else:
            out[(pos.string_index, pos.fret)] = MarkerState.Active
    return out


@pytest.mark.parametrize("chord", list(CATALOG), ids=lambda c: c.chord_id)
def test_render_every_chord(chord: Chord) -> None:
    view = MemoryView()
    renderer = FretboardRenderer(view)
    applied = renderer.render(chord)
    assert len(applied) == 6
    assert view.markers() == expected_markers(chord)
    assert sorted(s for s, _ in view.markers()) == list(range(6))
    assert view.label == f"{chord.name} chord"


def test_render_c_updates() -> None:
    view = MemoryView()
    chord = CATALOG.lookup("C")
    assert chord is not None
    applied = FretboardRenderer(view).render(chord)
    assert applied[0] == FretMarker(5, 0, MarkerState.Active)
    assert applied[-1] == FretMarker(0, 0, MarkerState.Muted)
    assert view.marker(1, 3) == MarkerState.Active
    assert view.marker(1, 0) == MarkerState.Inactive


def test_rerender_clears_stale_markers() -> None:
    view = MemoryView()
    renderer = FretboardRenderer(view)
    for first in CATALOG:
        for second in CATALOG:
            renderer.render(first)
            renderer.render(second)
            assert view.markers() == expected_markers(second)


def test_rerender_same_chord() -> None:
    view = MemoryView()
    renderer = FretboardRenderer(view)
    chord = CATALOG.lookup("G")
    assert chord is not None
    renderer.render(chord)
    renderer.render(chord)
    assert view.markers() == expected_markers(chord)


def test_out_of_range_slot_skipped() -> None:
    view = MemoryView(num_frets=3)
    chord = CATALOG.lookup("B")
    assert chord is not None
    applied = FretboardRenderer(view).render(chord)
    # Fret 4 on strings 2-4 is beyond the rendered range
    assert [m.string_index for m in applied] == [5, 1, 0]
    assert view.markers() == {
        (5, 2): MarkerState.Active,
        (1, 0): MarkerState.Muted,
        (0, 0): MarkerState.Muted,
    }
    assert view.label == "B Major chord"


def test_high_fret_chord() -> None:
    view = MemoryView()
    chord = make_chord(
        "X", "Up High", [(0, 12), (1, 0), (2, 0), (3, 0), (4, 0), (5, 0)]
    )
    applied = FretboardRenderer(view).render(chord)
    assert len(applied) == 5
    assert (0, 12) not in view.markers()


def test_clear_and_reset() -> None:
    view = MemoryView()
    renderer = FretboardRenderer(view)
    chord = CATALOG.lookup("Am")
    assert chord is not None
    renderer.render(chord)
    renderer.clear()
    assert view.markers() == {}
    assert view.label == "A Minor chord"
    renderer.render(chord)
    renderer.reset()
    assert view.markers() == {}
    assert view.label == ""


def test_chord_button_highlight() -> None:
    view = MemoryView()
    renderer = FretboardRenderer(view)
    assert view.chord_button is None
    for chord_id in ["C", "Em", "C"]:
        chord = CATALOG.lookup(chord_id)
        assert chord is not None
        renderer.render(chord)
        assert view.chord_button == chord_id
    renderer.reset()
    assert view.chord_button is None

"""Main entry point for the fretplay application.

This module contains the main function and command-line argument handling.
It sets up logging, builds the controller around a terminal view and runs an
interactive loop that reads commands from standard input.
"""

from __future__ import annotations

import logging
import sys
from argparse import ArgumentParser, Namespace
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, TextIO

import soundfile as sf

from fretplay.audio import AudioHandle, engine_factory
from fretplay.catalog import ChordCatalog, default_catalog, load_catalog
from fretplay.config import Config, EngineKind, init_config
from fretplay.fretboard import FretboardRenderer
from fretplay.plucked import ChordEvent, MarkerEvent, Plucked, StringEvent, UserEvent
from fretplay.schedule import Scheduler, ThreadScheduler
from fretplay.synth import Synthesizer
from fretplay.view import FretboardView, TerminalView

HELP_TEXT = """commands:
  <chord>   select and strum a chord, e.g. C or Am
  s N       pluck string N at the current chord's fret
  f N M     pluck string N at fret M
  list      show the chord ids
  reset     clear the fretboard
  quit      exit"""


@dataclass(frozen=True)
class App:
    """The wired-up components of one session."""

    plucked: Plucked
    synth: Synthesizer
    audio: AudioHandle


def build_app(
    config: Config,
    catalog: ChordCatalog,
    view: FretboardView,
    scheduler: Scheduler,
    audio: Optional[AudioHandle] = None,
) -> App:
    """Wire the renderer, synthesizer and controller together.

    Args:
        config: Application configuration.
        catalog: Chords available for selection.
        view: The display to draw on.
        scheduler: Runs strum and highlight timers.
        audio: Audio handle to use; by default one is made from the config.

    Returns:
        The assembled application.
    """
    if audio is None:
        audio = AudioHandle(engine_factory(config, scheduler))
    renderer = FretboardRenderer(view)
    synth = Synthesizer(config, audio, view, scheduler)
    plucked = Plucked(catalog, renderer, synth, audio)
    return App(plucked=plucked, synth=synth, audio=audio)


def parse_command(line: str) -> Optional[UserEvent]:
    """Turn an input line into a user event.

    Args:
        line: A command such as ``"Am"``, ``"s 3"`` or ``"f 2 1"``.

    Returns:
        The event, or None if the line is blank.

    Raises:
        ValueError: If string or fret arguments are not integers or the
            argument count is wrong.
    """
    parts = line.split()
    if not parts:
        return None
    head, args = parts[0], parts[1:]
    if head == "s":
        if len(args) != 1:
            raise ValueError("usage: s STRING")
        return StringEvent(int(args[0]))
    elif head == "f":
        if len(args) != 2:
            raise ValueError("usage: f STRING FRET")
        return MarkerEvent(int(args[0]), int(args[1]))
    else:
        return ChordEvent(head)


def run_loop(
    app: App, view: TerminalView, catalog: ChordCatalog, infile: TextIO
) -> None:
    """Read commands until quit or end of input."""
    print(HELP_TEXT)
    for line in infile:
        cmd = line.strip()
        if cmd in ("quit", "exit", "q"):
            break
        elif cmd == "list":
            print(" ".join(catalog.chord_ids()))
            continue
        elif cmd == "reset":
            app.plucked.reset()
        else:
            try:
                event = parse_command(cmd)
                if event is not None:
                    app.plucked.handle_event(event)
            except ValueError as e:
                print(e)
                continue
        print(view.render_text())


def export_wav(
    app: App, catalog: ChordCatalog, chord_id: str, path: Path, rate: int
) -> None:
    """Render a strum offline and write it to a WAV file.

    Raises:
        ValueError: If the chord id is unknown.
    """
    chord = catalog.lookup(chord_id)
    if chord is None:
        raise ValueError(f"Unknown chord: {chord_id}")
    buf = app.synth.render_strum(chord)
    sf.write(str(path), buf, rate)
    logging.info("wrote %s strum to %s", chord.name, path)


def make_parser() -> ArgumentParser:
    """Create the command-line argument parser.

    Returns:
        An ArgumentParser configured with all the command-line options
        for the fretplay application.
    """
    parser = ArgumentParser(prog="fretplay")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument(
        "--engine", choices=["sound", "midi", "none"], default="sound"
    )
    parser.add_argument("--sample-rate", type=int)
    parser.add_argument("--num-frets", type=int)
    parser.add_argument("--catalog", type=Path, help="JSON chord catalog")
    parser.add_argument("--midi-port")
    parser.add_argument(
        "--export-wav",
        nargs=2,
        metavar=("PATH", "CHORD"),
        help="render a strum to a WAV file and exit",
    )
    return parser


def config_from_args(args: Namespace) -> Config:
    """Apply command-line overrides to the default configuration."""
    config = init_config()
    engines = {
        "sound": EngineKind.Sound,
        "midi": EngineKind.Midi,
        "none": EngineKind.Null,
    }
    config = replace(config, engine=engines[args.engine])
    if args.sample_rate is not None:
        config = replace(config, sample_rate=args.sample_rate)
    if args.num_frets is not None:
        config = replace(config, num_frets=args.num_frets)
    if args.midi_port is not None:
        config = replace(config, midi_port=args.midi_port)
    return config


def configure_logging(log_level: str) -> None:
    """Configure the logging system with the specified log level.

    Args:
        log_level: The logging level (e.g., 'DEBUG', 'INFO', 'WARNING').
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(filename)s:%(lineno)d -- %(message)s",
        level=log_level,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the fretplay application.

    Parses command-line arguments, configures logging, loads the catalog
    and either exports a WAV file or starts the interactive loop.
    """
    parser = make_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    config = config_from_args(args)
    catalog = load_catalog(args.catalog) if args.catalog else default_catalog()
    logging.info("loaded %d chords", len(catalog))
    view = TerminalView(config.num_frets)
    scheduler = ThreadScheduler()
    app = build_app(config, catalog, view, scheduler)
    try:
        if args.export_wav is not None:
            path, chord_id = args.export_wav
            export_wav(app, catalog, chord_id, Path(path), config.sample_rate)
        else:
            run_loop(app, view, catalog, sys.stdin)
    except KeyboardInterrupt:
        pass
    finally:
        logging.info("closing audio")
        scheduler.close()
        app.audio.close()
    logging.info("done")


if __name__ == "__main__":
    main()

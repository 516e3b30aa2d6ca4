"""Audio output engines.

An AudioEngine sounds tones. The engine is an explicitly owned resource:
an AudioHandle builds it through a factory on first use and hands the same
engine out for the rest of the session.
"""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, override

import mido
import numpy as np
from mido.frozen import FrozenMessage
from mido.ports import BaseOutput

from fretplay.base import Closeable, MatchException
from fretplay.config import Config, EngineKind
from fretplay.schedule import Schedule, Scheduler
from fretplay.tone import Array, Tone, render_tone


class AudioEngine(Closeable, metaclass=ABCMeta):
    """Sounds tones as soon as they are handed over."""

    @abstractmethod
    def play(self, tone: Tone) -> None:
        """Start a tone now.

        Tones already playing keep playing; there is no voice limit.

        Args:
            tone: The tone to sound.
        """
        raise NotImplementedError()


class RecordingEngine(AudioEngine):
    """An engine that produces no sound and remembers every tone."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._tones: List[Tone] = []

    @override
    def play(self, tone: Tone) -> None:
        with self._lock:
            self._tones.append(tone)

    @property
    def tones(self) -> List[Tone]:
        with self._lock:
            return list(self._tones)

    def close(self) -> None:
        pass


@dataclass
class Voice:
    """A rendered tone and how far it has been played."""

    samples: Array
    pos: int = 0

    @property
    def done(self) -> bool:
        return self.pos >= len(self.samples)


class SoundDeviceEngine(AudioEngine):
    """Plays tones on the default output device through sounddevice.

    Each tone becomes a voice that is summed into the output stream until it
    runs out. Voices are never stolen or ducked.
    """

    @classmethod
    def open(cls, sample_rate: int) -> SoundDeviceEngine:
        """Open and start a mono output stream.

        Args:
            sample_rate: Output sample rate in Hz.

        Returns:
            A running engine.
        """
        # PortAudio is loaded on import, so only touch it when a device is wanted
        import sounddevice as sd

        engine = cls(sample_rate)
        stream = sd.OutputStream(
            samplerate=sample_rate,
            channels=1,
            dtype="float32",
            callback=engine._callback,
        )
        engine._stream = stream
        stream.start()
        logging.info("opened audio output at %d Hz", sample_rate)
        return engine

    def __init__(self, sample_rate: int) -> None:
        self._sample_rate = sample_rate
        self._lock = Lock()
        self._voices: List[Voice] = []
        self._stream: Optional[Any] = None

    @property
    def num_voices(self) -> int:
        with self._lock:
            return len(self._voices)

    @override
    def play(self, tone: Tone) -> None:
        voice = Voice(render_tone(tone, self._sample_rate))
        with self._lock:
            self._voices.append(voice)

    def mix(self, frames: int) -> Array:
        """Sum the next block of every live voice and drop finished ones."""
        out = np.zeros(frames, dtype=np.float64)
        with self._lock:
            for voice in self._voices:
                chunk = voice.samples[voice.pos : voice.pos + frames]
                out[: len(chunk)] += chunk
                voice.pos += len(chunk)
            self._voices = [v for v in self._voices if not v.done]
        np.clip(out, -1.0, 1.0, out=out)
        return out

    def _callback(self, outdata: Any, frames: int, time: Any, status: Any) -> None:
        if status:
            logging.warning("audio stream status: %s", status)
        outdata[:, 0] = self.mix(frames)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None


class MidiEngine(AudioEngine):
    """Sends each tone as a MIDI note to an output port.

    The note-off follows after the tone's duration through the scheduler. A
    note number that is sounded again before its note-off stays on until the
    last of its tones has run its full duration.
    """

    @classmethod
    def open(
        cls,
        port_name: str,
        scheduler: Scheduler,
        channel: int,
        velocity: int,
        virtual: bool = True,
    ) -> MidiEngine:
        out_port = mido.open_output(port_name, virtual=virtual)
        logging.info("opened MIDI output port: %s", port_name)
        return cls(port_name, out_port, scheduler, channel, velocity)

    def __init__(
        self,
        port_name: str,
        out_port: BaseOutput,
        scheduler: Scheduler,
        channel: int,
        velocity: int,
    ) -> None:
        """Initialize the MIDI engine.

        Args:
            port_name: The name of the output port.
            out_port: The mido output port object.
            scheduler: Runs the delayed note-offs.
            channel: MIDI channel (1-16).
            velocity: Velocity of every note-on.
        """
        self._port_name = port_name
        self._out_port = out_port
        self._scheduler = scheduler
        self._channel = channel
        self._velocity = velocity
        self._lock = Lock()
        self._active: Dict[int, int] = {}

    def _note_msg(self, note: int, velocity: int) -> FrozenMessage:
        # mido channels are zero-based
        return FrozenMessage(
            type="note_on", channel=self._channel - 1, note=note, velocity=velocity
        )

    def send_msg(self, msg: FrozenMessage) -> None:
        logging.debug("Sending message to %s: %s", self._port_name, msg)
        self._out_port.send(msg)

    @override
    def play(self, tone: Tone) -> None:
        with self._lock:
            self._active[tone.note] = self._active.get(tone.note, 0) + 1
        self.send_msg(self._note_msg(tone.note, self._velocity))
        note_off = Schedule()
        note_off.add(round(tone.duration * 1000), lambda: self._release(tone.note))
        self._scheduler.submit(note_off)

    def _release(self, note: int) -> None:
        with self._lock:
            count = self._active.get(note, 0) - 1
            if count > 0:
                self._active[note] = count
                return
            self._active.pop(note, None)
        self.send_msg(self._note_msg(note, 0))

    def close(self) -> None:
        self._out_port.reset()
        self._out_port.close()


type EngineFactory = Callable[[], AudioEngine]


def engine_factory(config: Config, scheduler: Scheduler) -> EngineFactory:
    """Choose how the configured engine is built.

    Args:
        config: Selects the engine kind and its settings.
        scheduler: Used by engines that need delayed messages.

    Returns:
        A function that opens the engine when called.
    """
    if config.engine == EngineKind.Sound:
        return lambda: SoundDeviceEngine.open(config.sample_rate)
    elif config.engine == EngineKind.Midi:
        return lambda: MidiEngine.open(
            config.midi_port, scheduler, config.midi_channel, config.midi_velocity
        )
    elif config.engine == EngineKind.Null:
        return RecordingEngine
    else:
        raise MatchException(config.engine)


class AudioHandle(Closeable):
    """Owns the audio engine and builds it once, on first use.

    Once closed, the handle never builds another engine.
    """

    def __init__(self, factory: EngineFactory) -> None:
        self._factory = factory
        self._lock = Lock()
        self._engine: Optional[AudioEngine] = None
        self._closed = False

    @property
    def ready(self) -> bool:
        return self._engine is not None

    def ensure(self) -> AudioEngine:
        """Get the engine, building it if this is the first call.

        Returns:
            The same engine on every call.

        Raises:
            RuntimeError: If the handle has been closed.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Audio engine is closed")
            if self._engine is None:
                logging.info("initializing audio engine")
                self._engine = self._factory()
            return self._engine

    def close(self) -> None:
        with self._lock:
            self._closed = True
            if self._engine is not None:
                self._engine.close()
                self._engine = None

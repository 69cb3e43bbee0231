"""Turn note and controller events into per-voice control signals for a synthesizer."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Callable, Protocol

import numpy as np

from madrona.gens import (
    FLOATS_PER_DSP_VECTOR,
    LinearGlide,
    NoiseGen,
    SampleAccurateLinearGlide,
)

_N = FLOATS_PER_DSP_VECTOR
_MASK32 = 0xFFFFFFFF

MAX_VOICES = 16
MAX_EVENTS_PER_VECTOR = 128
GLIDE_TIME_SECONDS = 0.02
DRIFT_TIME_SECONDS = 8.0
DRIFT_SCALE = 0.01


class VoiceOutput(IntEnum):
    """Rows of each voice's output signals."""

    PITCH = 0
    GATE = 1
    VOICE = 2
    X = 3
    Y = 4
    Z = 5
    MOD = 6
    ELAPSED_TIME = 7


NUM_VOICE_OUTPUT_ROWS = len(VoiceOutput)


class EventType(IntEnum):
    NULL = 0
    NOTE_ON = 1
    NOTE_RETRIG = 2
    NOTE_SUSTAIN = 3
    NOTE_OFF = 4
    SUSTAIN_PEDAL = 5
    CONTROLLER = 6
    PITCH_WHEEL = 7
    NOTE_PRESSURE = 8
    PROGRAM_CHANGE = 9


@dataclass
class Event:
    """Something that happens; ``time`` is in samples from the start of the buffer."""

    type: EventType = EventType.NULL
    channel: int = 0
    creator_id: int = 0
    time: int = 0
    value1: float = 0.0
    value2: float = 0.0
    value3: float = 0.0
    value4: float = 0.0

    def __bool__(self) -> bool:
        return self.type != EventType.NULL

    def __str__(self) -> str:
        return f"[{int(self.type)}/{self.channel}/{self.creator_id}/{self.time}]"


class Scale(Protocol):
    def note_to_log_pitch(self, note: float) -> float: ...


class EqualTemperedScale:
    """Twelve-tone equal temperament; note 69 is log pitch 0, one octave per unit."""

    def note_to_log_pitch(self, note: float) -> float:
        return (note - 69.0) / 12.0


def _clamp_time(t: int) -> int:
    return min(max(int(t), 0), _N)


class Voice:
    """One playable voice and the control signals it writes."""

    class State(IntEnum):
        OFF = 0
        ON = 1
        SUSTAIN = 2

    def __init__(self) -> None:
        self.state = Voice.State.OFF
        self.next_frame_to_process = 0

        self.current_velocity = 0.0
        self.current_pitch = 0.0
        self.current_pitch_bend = 0.0
        self.current_mod = 0.0
        self.current_x = 0.0
        self.current_y = 0.0
        self.current_z = 0.0

        self.creator_id = 0
        self.age_in_samples = 0
        self.age_step = 0

        self.pitch_glide = SampleAccurateLinearGlide()
        self.pitch_bend_glide = LinearGlide()
        self.mod_glide = LinearGlide()
        self.x_glide = LinearGlide()
        self.y_glide = LinearGlide()
        self.z_glide = LinearGlide()

        self.drift_source = NoiseGen()
        self.pitch_drift_glide = LinearGlide()
        self.drift_counter = 0
        self.current_drift_value = 0.0
        self.drift_amount = 0.0
        self.next_drift_time_in_samples = 0

        self.outputs = np.zeros((NUM_VOICE_OUTPUT_ROWS, _N), dtype=np.float32)

    def set_params(self, pitch_glide_in_seconds: float, drift: float, sr: float) -> None:
        self.pitch_glide.set_glide_time_in_samples(sr * pitch_glide_in_seconds)
        for glide in (self.pitch_bend_glide, self.mod_glide, self.x_glide,
                      self.y_glide, self.z_glide):
            glide.set_glide_time_in_samples(sr * GLIDE_TIME_SECONDS)
        self.pitch_drift_glide.set_glide_time_in_samples(sr * DRIFT_TIME_SECONDS)
        self.drift_amount = drift

    def reset(self, voice_index: int) -> None:
        """Return to the initial state, as when DSP is reset."""
        self.drift_source.set_seed(voice_index * 232)
        self.state = Voice.State.OFF
        self.next_frame_to_process = 0
        self.age_in_samples = 0
        self.age_step = 0

        self.current_velocity = 0.0
        self.current_pitch = 0.0
        self.current_pitch_bend = 0.0
        self.current_mod = 0.0
        self.current_x = 0.0
        self.current_y = 0.0
        self.current_z = 0.0

        self.creator_id = 0

        for glide in (self.pitch_bend_glide, self.mod_glide, self.x_glide,
                      self.y_glide, self.z_glide):
            glide.set_value(0.0)

    def reset_time(self) -> None:
        self.age_in_samples = 0

    def begin_process(self, sr: float) -> None:
        """Start processing a new buffer."""
        self.next_frame_to_process = 0
        self.drift_counter += _N
        if self.drift_counter >= self.next_drift_time_in_samples:
            d = self.drift_source.next_sample()
            next_time_mul = 1.0 + abs(self.drift_source.next_sample())
            self.current_drift_value = d
            self.drift_counter = 0
            self.next_drift_time_in_samples = int(sr * next_time_mul * DRIFT_TIME_SECONDS)

    def _advance_age(self, frame: int, sample_rate: float) -> None:
        self.age_in_samples = (self.age_in_samples + self.age_step) & _MASK32
        self.outputs[VoiceOutput.ELAPSED_TIME, frame] = self.age_in_samples / sample_rate

    def _write_held(self, start: int, stop: int, sample_rate: float) -> None:
        """Write the current gate and pitch over frames [start, stop)."""
        for t in range(start, stop):
            self.outputs[VoiceOutput.GATE, t] = self.current_velocity
            self.outputs[VoiceOutput.PITCH, t] = self.pitch_glide.next_sample(self.current_pitch)
            self._advance_age(t, sample_rate)

    def write_note_event(self, event: Event, scale: Scale, sample_rate: float) -> None:
        """Apply a note on, retrigger, sustain or off event to this voice."""
        kind = event.type
        if kind == EventType.NOTE_ON:
            self.state = Voice.State.ON
            self.creator_id = event.creator_id
            self.age_in_samples = 0
            self.age_step = 1
            dest = _clamp_time(event.time)
            self._write_held(self.next_frame_to_process, dest, sample_rate)
            self.current_pitch = scale.note_to_log_pitch(event.value1)
            self.current_velocity = event.value2
            self.next_frame_to_process = dest
        elif kind == EventType.NOTE_RETRIG:
            self.state = Voice.State.ON
            self.creator_id = event.creator_id
            dest = max(_clamp_time(event.time), 1)
            self._write_held(self.next_frame_to_process, dest - 1, sample_rate)
            self.outputs[VoiceOutput.GATE, dest - 1] = 0.0
            self.outputs[VoiceOutput.PITCH, dest - 1] = self.pitch_glide.next_sample(
                self.current_pitch
            )
            self.current_pitch = scale.note_to_log_pitch(event.value1)
            self.current_velocity = event.value2
            self.next_frame_to_process = dest
            self.age_in_samples = 0
        elif kind == EventType.NOTE_SUSTAIN:
            self.state = Voice.State.SUSTAIN
        elif kind == EventType.NOTE_OFF:
            self.state = Voice.State.OFF
            self.creator_id = 0
            dest = _clamp_time(event.time)
            self._write_held(self.next_frame_to_process, dest, sample_rate)
            self.current_velocity = 0.0
            self.next_frame_to_process = dest
        else:
            self.state = Voice.State.OFF

    def end_process(self, pitch_bend: float, sample_rate: float) -> None:
        """Write current values to the end of the buffer and apply glides, bend and drift."""
        self._write_held(self.next_frame_to_process, _N, sample_rate)

        bend = self.pitch_bend_glide(self.current_pitch_bend)
        drift = self.pitch_drift_glide(self.current_drift_value)
        self.outputs[VoiceOutput.MOD] = self.mod_glide(self.current_mod)
        self.outputs[VoiceOutput.X] = self.x_glide(self.current_x)
        self.outputs[VoiceOutput.Y] = self.y_glide(self.current_y)
        self.outputs[VoiceOutput.Z] = self.z_glide(self.current_z)

        self.outputs[VoiceOutput.PITCH] += bend * np.float32(pitch_bend * (1.0 / 12))
        self.outputs[VoiceOutput.PITCH] += drift * np.float32(self.drift_amount * DRIFT_SCALE)


class EventsToSignals:
    """Allocates voices for incoming events and generates their control signals."""

    def __init__(self, sr: float, scale: Scale | None = None) -> None:
        self._sample_rate = float(sr)
        self._scale: Scale = scale if scale is not None else EqualTemperedScale()
        self._events: deque[Event] = deque()
        self._polyphony = 0
        self._last_free_voice_found = -1
        self._newest_voice = -1
        self._sustain_pedal_active = False
        self._pitch_bend_semitones = 7.0
        self._pitch_glide_time_in_seconds = 0.0
        self._pitch_drift_amount = 0.0

        self.voices = [Voice() for _ in range(MAX_VOICES)]
        for i, voice in enumerate(self.voices):
            voice.set_params(self._pitch_glide_time_in_seconds, self._pitch_drift_amount,
                             self._sample_rate)
            voice.reset(i)
            voice.outputs[VoiceOutput.VOICE] = float(i)

        self._handlers: dict[EventType, Callable[[Event], None]] = {
            EventType.NOTE_ON: self._process_note_on,
            EventType.NOTE_OFF: self._process_note_off,
            EventType.CONTROLLER: self._process_controller,
            EventType.PITCH_WHEEL: self._process_pitch_wheel,
            EventType.NOTE_PRESSURE: self._process_note_pressure,
            EventType.SUSTAIN_PEDAL: self._process_sustain,
        }

    @property
    def polyphony(self) -> int:
        return self._polyphony

    @property
    def newest_voice(self) -> int:
        return self._newest_voice

    def set_polyphony(self, n: int) -> int:
        """Reset and set the number of voices in use; returns the number set."""
        self.reset()
        self._polyphony = min(n, MAX_VOICES)
        return self._polyphony

    def reset(self) -> None:
        """Clear all voices and queued events."""
        self._events.clear()
        for i, voice in enumerate(self.voices):
            voice.reset(i)
        self._last_free_voice_found = -1

    def reset_times(self) -> None:
        """Clear queued events and restart every voice's elapsed time."""
        self._events.clear()
        for voice in self.voices:
            voice.reset_time()
        self._last_free_voice_found = -1

    def add_event(self, event: Event) -> None:
        """Queue an event; it is dropped if the queue is full."""
        if len(self._events) < MAX_EVENTS_PER_VECTOR:
            self._events.append(event)

    def process(self) -> None:
        """Handle all queued events and generate one vector of output signals."""
        for voice in self.voices:
            voice.begin_process(self._sample_rate)
        while self._events:
            event = self._events.popleft()
            if event:
                self._process_event(event)
        for voice in self.voices:
            voice.end_process(self._pitch_bend_semitones, self._sample_rate)

    def set_pitch_bend_in_semitones(self, f: float) -> None:
        self._pitch_bend_semitones = f

    def set_glide_time_in_seconds(self, f: float) -> None:
        self._pitch_glide_time_in_seconds = f
        self._update_voice_params()

    def set_drift_amount(self, f: float) -> None:
        self._pitch_drift_amount = f
        self._update_voice_params()

    def dump_voices(self) -> None:
        """Print the state of each active voice."""
        names = {Voice.State.OFF: "off", Voice.State.ON: " on", Voice.State.SUSTAIN: "sus"}
        print("voices:")
        for i, voice in enumerate(self._active_voices()):
            print(f"    {i}: [i: {voice.creator_id}]{names.get(voice.state, ' ? ')}")

    def _update_voice_params(self) -> None:
        for voice in self.voices:
            voice.set_params(self._pitch_glide_time_in_seconds, self._pitch_drift_amount,
                             self._sample_rate)

    def _active_voices(self) -> list[Voice]:
        return self.voices[: self._polyphony]

    def _write(self, voice: Voice, event: Event) -> None:
        voice.write_note_event(event, self._scale, self._sample_rate)

    def _process_event(self, event: Event) -> None:
        handler = self._handlers.get(event.type)
        if handler is not None:
            handler(event)

    def _process_note_on(self, event: Event) -> None:
        v = self._find_free_voice()
        if v >= 0:
            self._write(self.voices[v], event)
        else:
            v = self._find_nearest_voice(event.creator_id)
            self._write(self.voices[v], replace(event, type=EventType.NOTE_RETRIG))
        self._newest_voice = v

    def _process_note_off(self, event: Event) -> None:
        new_type = EventType.NOTE_SUSTAIN if self._sustain_pedal_active else EventType.NOTE_OFF
        for voice in self._active_voices():
            if voice.creator_id == event.creator_id and voice.state == Voice.State.ON:
                self._write(voice, replace(event, type=new_type))

    def _process_note_pressure(self, event: Event) -> None:
        for voice in self._active_voices():
            voice.current_z = event.value1

    def _process_pitch_wheel(self, event: Event) -> None:
        for voice in self._active_voices():
            voice.current_pitch_bend = event.value1

    def _process_controller(self, event: Event) -> None:
        val = event.value1
        ctrl = int(event.value2)
        if ctrl == 120:
            if val == 0:
                self.reset()
        elif ctrl == 123:
            if val == 0:
                for voice in self._active_voices():
                    if voice.state != Voice.State.OFF:
                        self._write(voice, replace(event, type=EventType.NOTE_OFF))
        else:
            for voice in self._active_voices():
                if ctrl == 1:
                    voice.current_mod = val
                if ctrl == 73:
                    voice.current_x = val
                elif ctrl == 74:
                    voice.current_y = val

    def _process_sustain(self, event: Event) -> None:
        self._sustain_pedal_active = event.value1 > 0.5
        if not self._sustain_pedal_active:
            for voice in self._active_voices():
                if voice.state == Voice.State.SUSTAIN:
                    self._write(voice, Event(EventType.NOTE_OFF))

    def _find_free_voice(self) -> int:
        """Index of a free voice, searching round from the last one found, or -1."""
        n = self._polyphony
        t = self._last_free_voice_found
        for _ in range(n):
            t += 1
            if t >= n:
                t = 0
            if self.voices[t].state == Voice.State.OFF:
                self._last_free_voice_found = t
                return t
        return -1

    def _find_nearest_voice(self, note: int) -> int:
        """Index of the voice whose creator is nearest to ``note``; always valid."""
        best, min_dist = 0, 128
        for v, voice in enumerate(self._active_voices()):
            dist = abs(note - voice.creator_id)
            if dist < min_dist:
                best, min_dist = v, dist
        return best
# madrona

Building blocks for sound synthesis in Python. Signals are processed in
fixed-size blocks of `FLOATS_PER_DSP_VECTOR` (64) float32 samples held in
numpy arrays.

## What is inside

- `madrona.gens`: signal generators and smoothers. `PhasorGen`,
  `SineGen`, `SawGen`, `PulseGen`, `TickGen`, `ImpulseGen`, `NoiseGen`,
  `OneShotGen`, `TestSineGen`, `Interpolator1`, `LinearGlide` and
  `SampleAccurateLinearGlide`. It also has the waveshaping helpers
  `poly_blep`, `phasor_to_sine`, `phasor_to_saw` and `phasor_to_pulse`.
  Frequencies are given in cycles per sample, which is the frequency in Hz
  divided by the sample rate.
- `madrona.clock`: times in NTP-style 32:32 fixed-point form
  (`time_to_double`, `double_to_time`, `samples_at_rate_to_time`). It also
  has `Clock`, which can be started, stopped and advanced by a fixed-point
  duration.
- `madrona.path`: `Path`, a sequence of at most 15 symbols (strings) that
  addresses elements of a tree. It has an optional copy number. It comes
  with the helpers `head`, `first` … `fifth`, `nth`, `tail`, `but_last`,
  `last`, `last_n`, `substitute`, `path_to_text`, `root_path_to_text`,
  `text_to_path` and the extension helpers `get_extension_from_path`,
  `remove_extension_from_path` and `add_extension_to_path`.
- `madrona.value_change`: `ValueChange`, a record of a change to a named
  value, with the old and new value and gesture flags.
- `madrona.actor`: an abstract `Actor`. Each actor has its own bounded
  message queue and a background timer that handles queued messages. The
  module also keeps a global registry, used through `register_actor`,
  `send_message_to_actor` and `remove_actor`.
- `madrona.events`: `EventsToSignals` turns `Event`s into per-voice control
  signals. It handles note on and off, controllers, pitch wheel, note
  pressure and the sustain pedal. Each `Voice` writes the rows given by
  `VoiceOutput`: pitch, gate, voice, x, y, z, mod and elapsed time. Pitch
  comes from a scale, by default `EqualTemperedScale`, in which note 69 is
  log pitch 0 and one unit is one octave.
- `madrona.fdtd`: `FDTDModel`, a small 2D finite-difference time-domain
  membrane model, and its stepping function `fdtd_step_2d`.

## Installing

```
pip install .
```

## Examples

A sine with a smoothed gain:

```python
import numpy as np
from madrona.gens import SineGen, LinearGlide

sample_rate = 48000
sine = SineGen()
glide = LinearGlide()
glide.set_glide_time_in_samples(0.1 * sample_rate)

gain = glide(0.1)                       # one block of smoothed gain
block = sine(np.full(64, 220.0 / sample_rate)) * gain
```

Voice signals from note events:

```python
from madrona.events import Event, EventType, EventsToSignals, VoiceOutput

synth = EventsToSignals(48000)
synth.set_polyphony(4)
synth.add_event(Event(EventType.NOTE_ON, creator_id=60, time=0, value1=60, value2=0.8))
synth.process()

voice = synth.voices[synth.newest_voice]
gate = voice.outputs[VoiceOutput.GATE]
pitch = voice.outputs[VoiceOutput.PITCH]
```

## What it does not do

The package computes blocks of samples and control signals, and that is
all. It does not open audio devices, play sound in real time, read or write
audio files, or receive MIDI. To hear the output, or to feed it from an
instrument, connect these blocks to an audio or MIDI library of your
choice.

## Running the tests

```
pip install ".[test]"
pytest
```
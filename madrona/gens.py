"""Signal generators that produce fixed-size DSP vectors.

Every generator keeps some state (a phase, a seed, a glide target) and
produces one vector of ``FLOATS_PER_DSP_VECTOR`` float32 samples per call.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

FLOATS_PER_DSP_VECTOR = 64

_N = FLOATS_PER_DSP_VECTOR
_U32 = 1 << 32
_MASK32 = _U32 - 1

STEPS_PER_CYCLE = np.float32(2.0**32)
CYCLES_PER_STEP = np.float32(1.0) / STEPS_PER_CYCLE

# Ramp reaching 1.0 on the last sample of a vector.
UNITY_RAMP = ((np.arange(_N) + 1) / np.float32(_N)).astype(np.float32)


def _vector(x) -> np.ndarray:
    """Broadcast a scalar or a sequence to a float32 DSP vector."""
    return np.array(np.broadcast_to(np.asarray(x, dtype=np.float32), (_N,)))


def _array(x) -> np.ndarray:
    return np.atleast_1d(np.asarray(x, dtype=np.float32))


def _roundf(x: float) -> int:
    """Round half away from zero."""
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def _phase_to_unit(omegas: np.ndarray) -> np.ndarray:
    return omegas.astype(np.float32) * CYCLES_PER_STEP


class TickGen:
    """Single-sample ticks repeating at the input frequency in cycles per sample."""

    def __init__(self) -> None:
        self._omega = 0.0

    def __call__(self, cycles_per_sample) -> np.ndarray:
        out = np.zeros(_N, dtype=np.float32)
        for i, step in enumerate(_vector(cycles_per_sample)):
            self._omega += float(step)
            if self._omega > 1.0:
                self._omega -= 1.0
                out[i] = 1.0
        return out


_IMPULSE_TABLE_SIZE = 17


def _impulse_table() -> np.ndarray:
    n = np.arange(_N)
    x = n / (_IMPULSE_TABLE_SIZE - 1)
    blackman = 0.42 - 0.5 * np.cos(2 * np.pi * x) + 0.08 * np.cos(4 * np.pi * x)
    window = np.where(n < _IMPULSE_TABLE_SIZE, blackman, 0.0)
    centered = n - (_IMPULSE_TABLE_SIZE - 1) // 2
    pi_x = 2 * np.pi * 0.25 * centered
    safe = np.where(centered == 0, 1.0, pi_x)
    sinc = np.where(centered == 0, 1.0, np.sin(pi_x) / safe)
    table = sinc * window
    return (table / table.sum()).astype(np.float32)


class ImpulseGen:
    """Antialiased impulses repeating at the input frequency.

    The frequency cannot exceed the sample rate divided by the table size,
    and impulses are placed to the nearest sample.
    """

    table_size = _IMPULSE_TABLE_SIZE

    def __init__(self) -> None:
        self.table = _impulse_table()
        self._counter = _IMPULSE_TABLE_SIZE
        self._omega = 0.0

    def __call__(self, cycles_per_sample) -> np.ndarray:
        out = np.zeros(_N, dtype=np.float32)
        for i, step in enumerate(_vector(cycles_per_sample)):
            self._omega += float(step)
            if self._omega > 1.0:
                self._omega -= 1.0
                self._counter = 0
            if self._counter < _IMPULSE_TABLE_SIZE:
                out[i] = self.table[self._counter]
                self._counter += 1
        return out


def _seeds_to_floats(seeds: np.ndarray) -> np.ndarray:
    bits = ((seeds >> np.uint32(9)) & np.uint32(0x007FFFFF)) | np.uint32(0x3F800000)
    return bits.astype(np.uint32).view(np.float32) * np.float32(2.0) - np.float32(3.0)


class NoiseGen:
    """Linear congruential noise in [-1, 1), one value per sample."""

    def __init__(self) -> None:
        self._seed = 0

    def step(self) -> None:
        self._seed = (self._seed * 0x0019660D + 0x3C6EF35F) & _MASK32

    def set_seed(self, x: int) -> None:
        self._seed = x & _MASK32

    def next_int(self) -> int:
        self.step()
        return self._seed

    def next_sample(self) -> float:
        self.step()
        return float(_seeds_to_floats(np.array([self._seed], dtype=np.uint32))[0])

    def __call__(self) -> np.ndarray:
        seeds = np.array([self.next_int() for _ in range(_N)], dtype=np.uint32)
        return _seeds_to_floats(seeds)

    def reset(self) -> None:
        self._seed = 0


class TestSineGen:
    """Slow, accurate sine generator used as a reference."""

    __test__ = False

    def __init__(self) -> None:
        self._omega = 0.0

    def clear(self) -> None:
        self._omega = 0.0

    def __call__(self, freq) -> np.ndarray:
        out = np.empty(_N, dtype=np.float32)
        for i, f in enumerate(_vector(freq)):
            self._omega += 2 * math.pi * float(f)
            if self._omega > 2 * math.pi:
                self._omega -= 2 * math.pi
            out[i] = math.sin(self._omega)
        return out


class PhasorGen:
    """Naive sawtooth on [0, 1) driven by a 32-bit phase accumulator."""

    def __init__(self) -> None:
        self._omega = 0

    def clear(self, omega: int = 0) -> None:
        self._omega = omega & _MASK32

    def __call__(self, cycles_per_sample) -> np.ndarray:
        steps = np.rint(_vector(cycles_per_sample) * STEPS_PER_CYCLE).astype(np.int64)
        omegas = (self._omega + np.cumsum(steps)) % _U32
        self._omega = int(omegas[-1])
        return _phase_to_unit(omegas)

    def next_sample(self, cycles_per_sample: float) -> float:
        steps = _roundf(float(np.float32(cycles_per_sample) * STEPS_PER_CYCLE))
        self._omega = (self._omega + steps) % _U32
        return float(np.float32(self._omega) * CYCLES_PER_STEP)


class OneShotGen:
    """After a trigger, a single ramp from 0 to 1 that then rests at 0."""

    _START = 0

    def __init__(self) -> None:
        self._omega = self._START
        self._gate = 0
        self._previous = self._START

    def trigger(self) -> None:
        self._omega = self._previous = self._START
        self._gate = 1

    def _advance(self, steps: int) -> int:
        omega = (self._omega + steps * self._gate) % _U32
        if omega < self._previous:
            self._gate = 0
            omega = self._START
        self._omega = self._previous = omega
        return omega

    def __call__(self, cycles_per_sample) -> np.ndarray:
        steps = np.rint(_vector(cycles_per_sample) * STEPS_PER_CYCLE).astype(np.int64)
        omegas = np.array([self._advance(int(s)) for s in steps], dtype=np.int64)
        return _phase_to_unit(omegas)

    def next_sample(self, cycles_per_sample: float) -> float:
        steps = _roundf(float(np.float32(cycles_per_sample) * STEPS_PER_CYCLE))
        return float(np.float32(self._advance(steps)) * CYCLES_PER_STEP)


def poly_blep(phase, freq) -> np.ndarray:
    """Bandlimited step correction for a phasor at the given normalized frequency."""
    t, dt = np.broadcast_arrays(_array(phase), _array(freq))
    c = np.zeros(t.shape, dtype=np.float32)
    rise = t < dt
    fall = ~rise & (t > 1.0 - dt)
    r = t[rise] / dt[rise]
    c[rise] = r + r - r * r - 1.0
    f = (t[fall] - 1.0) / dt[fall]
    c[fall] = f * f + f + f + 1.0
    return c


_SQRT2 = np.float32(math.sqrt(2.0))
_SINE_DOMAIN = _SQRT2 * np.float32(4.0)
_SINE_RANGE = _SQRT2 - _SQRT2 * _SQRT2 * _SQRT2 / np.float32(6.0)


def phasor_to_sine(phasor) -> np.ndarray:
    """Taylor-series sine approximation of a phasor on (0, 1)."""
    omega = _array(phasor) * _SINE_DOMAIN - _SQRT2
    triangle = np.where(omega > _SQRT2, _SQRT2 * np.float32(2.0) - omega, omega)
    return (
        (np.float32(1.0) / _SINE_RANGE)
        * triangle
        * (np.float32(1.0) - triangle * triangle * np.float32(1.0 / 6.0))
    ).astype(np.float32)


def phasor_to_pulse(omega, freq, pulse_width) -> np.ndarray:
    """Antialiased pulse from a phasor, normalized frequency and pulse width."""
    omega = _array(omega)
    width = _array(pulse_width)
    pulse = np.where(omega >= width, np.float32(-1.0), np.float32(1.0)).astype(np.float32)
    pulse = pulse + poly_blep(omega, freq)
    down = np.modf(omega - width + np.float32(1.0))[0]
    return (pulse - poly_blep(down, freq)).astype(np.float32)


def phasor_to_saw(omega, freq) -> np.ndarray:
    """Antialiased sawtooth on (-1, 1) from a phasor and normalized frequency."""
    omega = _array(omega)
    saw = omega * np.float32(2.0) - np.float32(1.0)
    return (saw - poly_blep(omega, freq)).astype(np.float32)


class SineGen:
    """Sine approximation driven by a phasor."""

    _ZERO_PHASE = -(2 << 29)

    def __init__(self) -> None:
        self._phasor = PhasorGen()

    def clear(self) -> None:
        self._phasor.clear(self._ZERO_PHASE)

    def __call__(self, freq) -> np.ndarray:
        return phasor_to_sine(self._phasor(freq))


class PulseGen:
    """Antialiased pulse oscillator."""

    def __init__(self) -> None:
        self._phasor = PhasorGen()

    def clear(self) -> None:
        self._phasor.clear(0)

    def __call__(self, freq, width) -> np.ndarray:
        return phasor_to_pulse(self._phasor(freq), _vector(freq), _vector(width))


class SawGen:
    """Antialiased sawtooth oscillator."""

    def __init__(self) -> None:
        self._phasor = PhasorGen()

    def clear(self) -> None:
        self._phasor.clear(0)

    def __call__(self, freq) -> np.ndarray:
        return phasor_to_saw(self._phasor(freq), _vector(freq))


@dataclass
class Interpolator1:
    """Linear interpolation over one vector from the previous value to the next."""

    current_value: float = 0.0

    def __call__(self, value: float) -> np.ndarray:
        dydt = np.float32(value - self.current_value)
        out = np.float32(self.current_value) + UNITY_RAMP * dydt
        self.current_value = value
        return out.astype(np.float32)


class LinearGlide:
    """Scalar input to a vector with linear slew; glide time is quantized to vectors."""

    def __init__(self) -> None:
        self._current = np.zeros(_N, dtype=np.float32)
        self._step = np.zeros(_N, dtype=np.float32)
        self._target = 0.0
        self._dy_per_vector = 1.0 / 32
        self._vectors_per_glide = 32
        self._remaining = -1

    def set_glide_time_in_samples(self, t: float) -> None:
        self._vectors_per_glide = max(int(t / _N), 1)
        self._dy_per_vector = 1.0 / self._vectors_per_glide

    def set_value(self, f: float) -> None:
        """Jump to the given value on the next call, without gliding."""
        self._target = f
        self._remaining = 0

    def __call__(self, f: float) -> np.ndarray:
        if f != self._target:
            self._target = f
            self._remaining = self._vectors_per_glide

        if self._remaining < 0:
            pass
        elif self._remaining == 0:
            self._current = np.full(_N, self._target, dtype=np.float32)
            self._step = np.zeros(_N, dtype=np.float32)
            self._remaining -= 1
        elif self._remaining == self._vectors_per_glide:
            current = float(self._current[-1])
            dydv = (self._target - current) * self._dy_per_vector
            self._step = np.full(_N, dydv, dtype=np.float32)
            self._current = (np.float32(current) + UNITY_RAMP * self._step).astype(np.float32)
            self._remaining -= 1
        else:
            self._current = self._current + self._step
            self._remaining -= 1
        return self._current.copy()

    def clear(self) -> None:
        self._current = np.zeros(_N, dtype=np.float32)
        self._step = np.zeros(_N, dtype=np.float32)
        self._target = 0.0
        self._remaining = -1


class SampleAccurateLinearGlide:
    """Scalar glide with its time measured in samples."""

    def __init__(self) -> None:
        self._current = 0.0
        self._step = 0.0
        self._target = 0.0
        self._samples_per_glide = 32
        self._dy_per_sample = 1.0 / 32
        self._remaining = -1

    def set_glide_time_in_samples(self, t: float) -> None:
        self._samples_per_glide = max(int(t), 1)
        self._dy_per_sample = 1.0 / self._samples_per_glide

    def set_value(self, f: float) -> None:
        """Jump to the given value on the next sample, without gliding."""
        self._target = f
        self._remaining = 0

    def next_sample(self, f: float) -> float:
        if f != self._target:
            self._target = f
            self._remaining = self._samples_per_glide

        if self._remaining < 0:
            pass
        elif self._remaining == 0:
            self._current = self._target
            self._step = 0.0
            self._remaining -= 1
        elif self._remaining == self._samples_per_glide:
            self._step = (self._target - self._current) * self._dy_per_sample
            self._remaining -= 1
        else:
            self._current += self._step
            self._remaining -= 1
        return self._current

    def clear(self) -> None:
        self._current = 0.0
        self._step = 0.0
        self._target = 0.0
        self._remaining = -1
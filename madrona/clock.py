"""Clock and conversions for 32:32 fixed-point (NTP/OSC style) times."""

from __future__ import annotations

import functools
import math
import time

_MASK32 = 0xFFFFFFFF
_MASK64 = (1 << 64) - 1
_FRACTION_SCALE = 2.0**32


def time_to_double(ntp_time: int) -> float:
    """Convert a 32:32 fixed-point time to seconds."""
    ntp_time &= _MASK64
    seconds = (ntp_time >> 32) & _MASK32
    fraction = ntp_time & _MASK32
    return seconds + fraction / _FRACTION_SCALE


def double_to_time(t: float) -> int:
    """Convert seconds to a fixed-point time.

    The whole seconds are shifted past the top of the 64-bit word, so only
    the fractional second survives in the result.
    """
    fraction = t - math.floor(t)
    return int(fraction * _FRACTION_SCALE) & _MASK32


def samples_at_rate_to_time(samples: int, rate: int) -> int:
    """Duration of a number of samples at a sample rate, as a fixed-point time."""
    return double_to_time(samples / rate)


def _micros(ns: int) -> int:
    return ns // 1000


@functools.lru_cache(maxsize=None)
def system_time_offset() -> int:
    """Offset in microseconds from the steady clock to system time, measured once."""
    return (_micros(time.time_ns()) - _micros(time.monotonic_ns())) & _MASK64


class Clock:
    """A clock that can be stopped, started and advanced in fixed-point time."""

    def __init__(self) -> None:
        self._offset = system_time_offset()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def now(self) -> int:
        if not self._running:
            return self._offset
        micros = (self._offset + _micros(time.monotonic_ns())) & _MASK64
        seconds = int(micros * 0.000001)
        fraction_micros = micros - seconds * 1_000_000
        lo = int(fraction_micros * (_FRACTION_SCALE * 0.000001)) & _MASK32
        return ((seconds << 32) | lo) & _MASK64

    def stop(self) -> None:
        if self._running:
            self._offset = self.now()
        self._running = False

    def start(self) -> None:
        self._running = True

    def advance(self, t: int) -> None:
        """Add a fixed-point duration to the clock's offset."""
        self._offset = (self._offset + t) & _MASK64
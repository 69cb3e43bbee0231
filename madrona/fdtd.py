"""A 2D finite-difference time-domain model of a struck membrane.

The surface is a grid of float32 values with one cell of zero padding on
every side. Each step computes the next surface from the two previous ones
using a 3x3 kernel. The model is excited at the top centre and read from two
pickups at middle left and middle right.
"""

from __future__ import annotations

import math

import numpy as np

from madrona.gens import FLOATS_PER_DSP_VECTOR

WIDTH = 16
HEIGHT = 16
PADDING = 1
SAMPLE_RATE = 48000

_EXCITE_ROW = 2
_S0 = 1.0  # frequency-independent damping
_S1 = 1.0  # frequency-dependent damping


def _check_surface(name: str, u: np.ndarray) -> None:
    if u.ndim != 2 or u.shape[0] < 3 or u.shape[1] < 3:
        raise ValueError(f"{name} must be a 2D array of at least 3x3, got shape {u.shape}")


def fdtd_step_2d(u1, u2, kc, ke, kk, kc2, ke2) -> np.ndarray:
    """One time step from the surfaces at z^-1 (``u1``) and z^-2 (``u2``).

    Both inputs are padded surfaces of the same shape; the result has that
    shape too, with its padding left at zero.
    """
    u1 = np.asarray(u1, dtype=np.float32)
    u2 = np.asarray(u2, dtype=np.float32)
    _check_surface("u1", u1)
    _check_surface("u2", u2)
    if u1.shape != u2.shape:
        raise ValueError(f"surface shapes differ: {u1.shape} and {u2.shape}")

    c1 = u1[1:-1, 1:-1]
    edges1 = u1[1:-1, :-2] + u1[:-2, 1:-1] + u1[1:-1, 2:] + u1[2:, 1:-1]
    corners1 = u1[:-2, :-2] + u1[:-2, 2:] + u1[2:, :-2] + u1[2:, 2:]
    c2 = u2[1:-1, 1:-1]
    edges2 = u2[1:-1, :-2] + u2[:-2, 1:-1] + u2[1:-1, 2:] + u2[2:, 1:-1]

    out = np.zeros_like(u1)
    out[1:-1, 1:-1] = (
        np.float32(kc) * c1
        + np.float32(ke) * edges1
        + np.float32(kk) * corners1
        + np.float32(kc2) * c2
        + np.float32(ke2) * edges2
    )
    return out


class FDTDModel:
    """Runs the membrane with a given input and fundamental frequency per sample.

    Kernel values outside the stable range (tension squared above 3/5) make
    the model blow up; no attempt is made to prevent that.
    """

    def __init__(self, width: int = WIDTH, height: int = HEIGHT,
                 sample_rate: float = SAMPLE_RATE) -> None:
        if width < 2 or height < _EXCITE_ROW + 1:
            raise ValueError("surface is too small")
        self.width = width
        self.height = height
        self.sample_rate = float(sample_rate)
        self.size = math.sqrt(float(width * width) + float(height * height))
        self.input_gain = float(width * height // 64)
        shape = (height + 2 * PADDING, width + 2 * PADDING)
        self._u1 = np.zeros(shape, dtype=np.float32)
        self._u2 = np.zeros(shape, dtype=np.float32)

    def _kernel(self, cycles_per_sample: float) -> tuple[float, float, float, float, float]:
        isr = 1.0 / self.sample_rate
        c = self.size * cycles_per_sample
        tension = 3.0 / 5.0 * c

        # equal energy criterion: 4kk + 4ke + kc = 2
        kk = tension * tension * (1.0 / 6.0)
        ke = tension * tension * (2.0 / 3.0)
        kc = 2.0 - 4.0 * (kk + ke)

        ks1 = _S1 * tension * isr
        ke += ks1
        kc += -4.0 * ks1
        ke2 = -1.0 * ks1
        kc2 = _S0 * isr + 4.0 * ks1 - 1.0

        sk = 1.0 / (1.0 + isr * _S0)
        return kc * sk, ke * sk, kk * sk, kc2 * sk, ke2 * sk

    def __call__(self, input_vec, freq) -> np.ndarray:
        """Process one vector; ``freq`` is in cycles per sample. Returns two rows (L, R)."""
        n = FLOATS_PER_DSP_VECTOR
        inputs = np.broadcast_to(np.asarray(input_vec, dtype=np.float32), (n,))
        freqs = np.broadcast_to(np.asarray(freq, dtype=np.float32), (n,))
        out = np.zeros((2, n), dtype=np.float32)

        excite = (PADDING + _EXCITE_ROW, PADDING + self.width // 2)
        pickup_row = PADDING + self.height // 2 + 1
        left = (pickup_row, PADDING + 1)
        right = (pickup_row, PADDING + self.width - 1)

        for i, (x, f) in enumerate(zip(inputs, freqs)):
            kc, ke, kk, kc2, ke2 = self._kernel(float(f))
            self._u1[excite] += x * np.float32(self.input_gain)
            u0 = fdtd_step_2d(self._u1, self._u2, kc, ke, kk, kc2, ke2)
            out[0, i] = u0[left]
            out[1, i] = u0[right]
            self._u2, self._u1 = self._u1, u0
        return out
"""Velocity quantization onto a small set of perceptually weighted bins"""

import numpy as np


class VelocityQuantizer:
    """
    Maps raw 0-127 velocities onto `bins` classes along a power curve.
    With an exponent below 1 soft velocities are spread over more bins
    than loud ones.
    """

    def __init__(self, events: int = 128, bins: int = 12, exponent: float = 0.5):
        if events < 1:
            raise ValueError(f"events must be positive, got {events}")
        if bins < 2:
            raise ValueError(f"at least two bins are required, got {bins}")
        if exponent <= 0 or exponent == 1:
            raise ValueError(f"exponent must be positive and not 1, got {exponent}")

        self.events = events
        self.bins = bins
        self.exponent = exponent
        self._table = self._build_table()

    @classmethod
    def from_settings(cls, settings) -> 'VelocityQuantizer':
        return cls(settings.velocity_events, settings.velocity_bins, settings.velocity_exp)

    def _build_table(self) -> np.ndarray:
        """Bin for every representable velocity"""
        velocities = np.arange(self.events, dtype=np.float64)
        step = self.events / (self.bins - 1)
        curve = self.events * ((np.power(self.exponent, velocities / self.events) - 1.0)
                               / (self.exponent - 1.0))
        bins = np.ceil(curve / step).astype(np.int64)
        return np.clip(bins, 0, self.bins - 1)

    def quantize(self, velocity: int) -> int:
        """Bin index for one velocity, clamped to [0, events - 1]"""
        velocity = max(0, min(int(velocity), self.events - 1))
        return int(self._table[velocity])

    __call__ = quantize

    def quantize_many(self, velocities) -> np.ndarray:
        """Vectorised quantize over an array of velocities"""
        indices = np.clip(np.asarray(velocities, dtype=np.int64), 0, self.events - 1)
        return self._table[indices]

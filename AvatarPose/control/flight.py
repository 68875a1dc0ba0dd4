"""Fly-to animation: straight ground track with a vertical half-sine arc."""

from __future__ import annotations

import math

import numpy as np


class FlightAnimator:
    """Position trajectory from ``start`` to ``end`` over ``duration`` seconds.

    X/Z and the baseline Y are linear in normalized time s = t/duration. A
    vertical offset ``max_height * sin(pi * s)`` is added on top, so it is zero
    at both ends and peaks at the midpoint. The endpoints are returned exactly.
    """

    def __init__(
        self,
        start: np.ndarray,
        end: np.ndarray,
        duration: float,
        max_height: float,
    ):
        self.start = np.asarray(start, dtype=np.float64).reshape(3).copy()
        self.end = np.asarray(end, dtype=np.float64).reshape(3).copy()
        self.duration = float(max(0.0, duration))
        self.max_height = float(max_height)
        self.elapsed = 0.0

    def position_at(self, t: float) -> np.ndarray:
        if self.duration <= 0.0 or t >= self.duration:
            return self.end.copy()
        if t <= 0.0:
            return self.start.copy()
        s = t / self.duration
        p = self.start + (self.end - self.start) * s
        p[1] += self.max_height * math.sin(math.pi * s)
        return p

    def advance(self, dt: float) -> np.ndarray:
        self.elapsed += max(0.0, float(dt))
        return self.position_at(self.elapsed)

    def over(self) -> bool:
        return self.elapsed >= self.duration

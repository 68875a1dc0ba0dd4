"""Vector helpers for the scene frame (x right, y up, camera looks along -z)."""

from __future__ import annotations

import math

import numpy as np

FRONT = np.array([0.0, 0.0, -1.0], dtype=np.float64)
UP = np.array([0.0, 1.0, 0.0], dtype=np.float64)


def norm(v: np.ndarray) -> float:
    return float(np.linalg.norm(v))


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along v; a zero-length v is returned unchanged."""
    v = np.asarray(v, dtype=np.float64)
    n2 = float(np.dot(v, v))
    if n2 < 1e-12:
        return v.copy()
    return v / math.sqrt(n2)


def horizontal(v: np.ndarray) -> np.ndarray:
    """Projection onto the ground plane (y zeroed)."""
    out = np.asarray(v, dtype=np.float64).reshape(3).copy()
    out[1] = 0.0
    return out


def heading_pitch_deg(front: np.ndarray) -> tuple[float, float]:
    """
    Heading/pitch of a view direction:
      heading: 0 = looking along -z, +90 = looking along +x
      pitch:   +90 = looking straight up
    """
    x, y, z = float(front[0]), float(front[1]), float(front[2])
    heading = math.degrees(math.atan2(x, -z))
    pitch = math.degrees(math.atan2(y, math.sqrt(x * x + z * z) + 1e-12))
    return heading, pitch

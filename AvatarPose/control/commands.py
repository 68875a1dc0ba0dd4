"""Input commands consumed by the pose controller.

UI surfaces (Tk panel, UDP bridge) never call into the controller directly for
discrete actions; they push ``Command`` values into a ``CommandQueue`` that
the controller drains once per frame. Touch transitions are a separate,
payload-free signal.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from dataclasses import dataclass
from typing import Iterator, Optional, Union

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RotateDrag:
    """Rocker/drag input: direction in radians, magnitude in [0, 1]."""

    angle: float
    progress: float


@dataclass(frozen=True)
class ModeSwitch:
    manual: bool


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class FlyTo:
    position: tuple[float, float, float]

    def target(self) -> np.ndarray:
        return np.asarray(self.position, dtype=np.float64).reshape(3)


Command = Union[RotateDrag, ModeSwitch, Reset, FlyTo]


class TouchEvent(enum.Enum):
    DOWN = "down"
    UP = "up"
    CANCEL = "cancel"


class CommandQueue:
    """FIFO of pending commands, filled by UI callbacks and drained per frame."""

    def __init__(self, maxlen: int = 256):
        self._items: deque = deque(maxlen=maxlen)

    def put(self, command) -> None:
        if len(self._items) == self._items.maxlen:
            logger.warning("[INPUT] command queue full, dropping oldest command")
        self._items.append(command)

    def drain(self) -> Iterator:
        while self._items:
            yield self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)


def _finite_float(value) -> Optional[float]:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if np.isfinite(f) else None


def parse_command_payload(payload: dict) -> Optional[Union[Command, TouchEvent]]:
    """Map a bridge JSON object to a command or touch event.

    Accepted shapes:
      {"command": "rotate", "angle": rad, "progress": p}
      {"command": "mode", "manual": bool}
      {"command": "reset"}
      {"command": "fly_to", "position": [x, y, z]}
      {"touch": "down" | "up" | "cancel"}
    Returns None for anything else.
    """
    if not isinstance(payload, dict):
        return None

    touch = payload.get("touch")
    if touch is not None:
        try:
            return TouchEvent(str(touch).lower())
        except ValueError:
            return None

    kind = payload.get("command")
    if kind == "rotate":
        angle = _finite_float(payload.get("angle"))
        progress = _finite_float(payload.get("progress"))
        if angle is None or progress is None:
            return None
        return RotateDrag(angle=angle, progress=progress)
    if kind == "mode":
        manual = payload.get("manual")
        if not isinstance(manual, bool):
            return None
        return ModeSwitch(manual=manual)
    if kind == "reset":
        return Reset()
    if kind == "fly_to":
        raw = payload.get("position")
        if not isinstance(raw, (list, tuple)) or len(raw) != 3:
            return None
        xyz = [_finite_float(v) for v in raw]
        if any(v is None for v in xyz):
            return None
        return FlyTo(position=(xyz[0], xyz[1], xyz[2]))
    return None

"""Orientation source interface for device attitude."""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np

from ..math3d.quaternion import q_identity, q_normalize

logger = logging.getLogger(__name__)


class OrientationSource:
    """Base interface for device orientation sources.

    Implementations may be UI-based (Tk sliders) or fed by a real device
    (UDP sensor bridge). Subclasses call ``_publish_sample`` for every new
    reading; the first one is forwarded to ``on_first_sample`` callbacks.
    """

    name: str = "base"

    def __init__(self) -> None:
        self._q_current = q_identity()
        self._has_sample = False
        self._first_sample_callbacks: list[Callable[[np.ndarray], None]] = []

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass

    def current_rotation(self) -> np.ndarray:
        """Latest orientation [w, x, y, z]; identity before the first sample."""
        return self._q_current.copy()

    def has_sample(self) -> bool:
        return self._has_sample

    def on_first_sample(self, callback: Callable[[np.ndarray], None]) -> None:
        """Register a one-shot callback for the first (calibration) sample.

        Late registrations fire immediately with the current reading.
        """
        if self._has_sample:
            callback(self.current_rotation())
            return
        self._first_sample_callbacks.append(callback)

    def _publish_sample(self, q: np.ndarray) -> None:
        self._q_current = q_normalize(q)
        if self._has_sample:
            return
        self._has_sample = True
        logger.info("[SENSOR] first orientation sample from %s", self.name)
        callbacks, self._first_sample_callbacks = self._first_sample_callbacks, []
        for cb in callbacks:
            cb(self.current_rotation())

    def set_status(self, text: str) -> None:
        # Optional UI hook.
        pass

    def run(self, on_tick: Callable[[], None]) -> None:
        """Run the source's event loop and call on_tick once per frame."""
        raise NotImplementedError

    def close(self) -> None:
        self.stop()

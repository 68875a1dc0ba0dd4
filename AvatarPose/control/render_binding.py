"""Camera bindings receiving the per-frame look-at."""

from __future__ import annotations

import numpy as np

from .pose import CameraPose


class CameraBinding:
    """Renderer camera handle. The controller only ever calls ``set_look_at``."""

    def set_look_at(
        self,
        eye_x: float,
        eye_y: float,
        eye_z: float,
        target_x: float,
        target_y: float,
        target_z: float,
        up_x: float,
        up_y: float,
        up_z: float,
    ) -> None:
        raise NotImplementedError


class LookAtRecorder(CameraBinding):
    """Keeps the latest look-at; used when no renderer is attached."""

    def __init__(self) -> None:
        self.last: CameraPose | None = None
        self.calls = 0

    def set_look_at(
        self,
        eye_x: float,
        eye_y: float,
        eye_z: float,
        target_x: float,
        target_y: float,
        target_z: float,
        up_x: float,
        up_y: float,
        up_z: float,
    ) -> None:
        self.last = CameraPose(
            eye=np.array([eye_x, eye_y, eye_z], dtype=np.float64),
            target=np.array([target_x, target_y, target_z], dtype=np.float64),
            up=np.array([up_x, up_y, up_z], dtype=np.float64),
        )
        self.calls += 1

"""Pose controller: fuses sensor, manual and command input into a frame pose."""

from __future__ import annotations

import enum
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ..math3d.coords import FRONT, UP, horizontal, norm, normalize
from ..math3d.quaternion import (
    q_identity,
    q_inverse,
    q_mul,
    q_normalize,
    q_to_rotmat,
)
from .commands import (
    CommandQueue,
    FlyTo,
    ModeSwitch,
    Reset,
    RotateDrag,
    TouchEvent,
)
from .flight import FlightAnimator
from .orientation_source import OrientationSource
from .pose import ObjectPose
from .render_binding import CameraBinding

logger = logging.getLogger(__name__)


class RotationMode(enum.Enum):
    SENSOR = "sensor"
    MANUAL = "manual"


@dataclass(frozen=True)
class ControllerConfig:
    move_speed: float = 5.0
    flight_duration: float = 2.0
    flight_max_height: float = 5.0
    angular_step_per_unit: float = math.pi / 90.0
    fly_near_threshold: float = 2.0
    camera_notify_every: int = 10
    calibration_warn_s: float = 2.0


class PoseController:
    """Owns rotation state, position and the active flight.

    Effective rotation is ``base * stream`` where the stream is the live
    sensor quaternion (SENSOR mode) or the accumulated pan rotation (MANUAL
    mode). Until the orientation source delivers its first sample the
    effective rotation is identity.
    """

    def __init__(
        self,
        orientation_source: OrientationSource,
        camera: Optional[CameraBinding] = None,
        on_pose: Optional[Callable[[np.ndarray], None]] = None,
        on_camera_moved: Optional[Callable[[np.ndarray], None]] = None,
        config: Optional[ControllerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        initial_position: Optional[np.ndarray] = None,
    ):
        self.source = orientation_source
        self.camera = camera
        self.on_pose = on_pose
        self.on_camera_moved = on_camera_moved
        self.config = config or ControllerConfig()
        self._clock = clock
        self.commands = CommandQueue()

        self._mode = RotationMode.SENSOR
        self._calibrated = False
        self._base = q_identity()
        self._pan = q_identity()
        self._pan_delta = q_identity()
        self._last_sensor = q_identity()
        self._rotation = q_identity()

        self._front = FRONT.copy()
        self._up = UP.copy()
        if initial_position is None:
            self._position = np.zeros(3, dtype=np.float64)
        else:
            self._position = np.asarray(initial_position, dtype=np.float64).reshape(3).copy()
        self._is_locomoting = False
        self._flight: Optional[FlightAnimator] = None

        self._last_t: Optional[float] = None
        self._first_t: Optional[float] = None
        self._warned_uncalibrated = False
        self._frame_count = 0

        # May fire immediately when the source already has a sample.
        self.source.on_first_sample(self._on_first_sample)

    # ------------------------------------------------------------------ state

    @property
    def mode(self) -> RotationMode:
        return self._mode

    @property
    def calibrated(self) -> bool:
        return self._calibrated

    @property
    def base_rotation(self) -> np.ndarray:
        return self._base.copy()

    @property
    def pan_rotation(self) -> np.ndarray:
        return self._pan.copy()

    @property
    def pan_rotation_delta(self) -> np.ndarray:
        return self._pan_delta.copy()

    @property
    def rotation(self) -> np.ndarray:
        """Effective rotation of the last update."""
        return self._rotation.copy()

    @property
    def front(self) -> np.ndarray:
        return self._front.copy()

    @property
    def up(self) -> np.ndarray:
        return self._up.copy()

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @position.setter
    def position(self, value: np.ndarray) -> None:
        self._position[:] = np.asarray(value, dtype=np.float64).reshape(3)

    @property
    def is_locomoting(self) -> bool:
        return self._is_locomoting

    @property
    def flight(self) -> Optional[FlightAnimator]:
        return self._flight

    # ------------------------------------------------------------------ frame

    def update(self, now: Optional[float] = None) -> ObjectPose:
        if now is None:
            now = self._clock()
        for command in self.commands.drain():
            self.handle(command)

        q = self._compute_rotation(now)
        rotmat = q_to_rotmat(q)
        self._front = rotmat @ FRONT
        self._up = rotmat @ UP

        self._compute_position(now)

        target = self._position + self._front
        if self.camera is not None:
            self.camera.set_look_at(
                float(self._position[0]),
                float(self._position[1]),
                float(self._position[2]),
                float(target[0]),
                float(target[1]),
                float(target[2]),
                float(self._up[0]),
                float(self._up[1]),
                float(self._up[2]),
            )

        pose = ObjectPose(quaternion=q.copy(), position=self._position.copy())
        if self.on_pose is not None:
            self.on_pose(pose.to_record())
        every = max(1, int(self.config.camera_notify_every))
        if self.on_camera_moved is not None and self._frame_count % every == 0:
            self.on_camera_moved(self._position.copy())
        self._frame_count += 1
        return pose

    def _compute_rotation(self, now: float) -> np.ndarray:
        if not self._calibrated:
            self._check_calibration_timeout(now)
            self._rotation = q_identity()
            return self._rotation
        if self._mode is RotationMode.SENSOR:
            q = q_mul(self._base, self.source.current_rotation())
        else:
            self._pan = q_normalize(q_mul(self._pan, self._pan_delta))
            q = q_mul(self._base, self._pan)
        self._rotation = q
        return q

    def _check_calibration_timeout(self, now: float) -> None:
        if self._first_t is None:
            self._first_t = now
            return
        if self._warned_uncalibrated:
            return
        if (now - self._first_t) >= self.config.calibration_warn_s:
            logger.warning(
                "[SENSOR] no orientation sample from %s after %.1fs; holding identity rotation",
                self.source.name,
                now - self._first_t,
            )
            self._warned_uncalibrated = True

    def _compute_position(self, now: float) -> None:
        first_frame = self._last_t is None
        dt = 0.0 if first_frame else max(0.0, now - self._last_t)

        flight = self._flight
        if flight is not None:
            self._position[:] = flight.advance(dt)
            if flight.over():
                logger.info(
                    "[FLY] arrived at [%.3f, %.3f, %.3f]",
                    self._position[0],
                    self._position[1],
                    self._position[2],
                )
                self._flight = None
        elif self._is_locomoting and not first_frame:
            step = normalize(horizontal(self._front))
            self._position += step * (self.config.move_speed * dt)

        self._last_t = now

    # --------------------------------------------------------------- commands

    def submit(self, command) -> None:
        """Queue a command; it is applied at the start of the next update."""
        self.commands.put(command)

    def handle(self, command) -> None:
        if isinstance(command, RotateDrag):
            self._on_rotate_drag(command.angle, command.progress)
        elif isinstance(command, ModeSwitch):
            self._on_mode_switch(command.manual)
        elif isinstance(command, Reset):
            self._on_reset()
        elif isinstance(command, FlyTo):
            self._on_fly_to(command.target())
        else:
            logger.debug("[INPUT] ignoring unsupported command %r", command)

    def on_touch(self, event: TouchEvent) -> None:
        if event is TouchEvent.DOWN:
            self._is_locomoting = True
        elif event in (TouchEvent.UP, TouchEvent.CANCEL):
            self._is_locomoting = False

    def _on_first_sample(self, q: np.ndarray) -> None:
        self._last_sensor = q_normalize(q)
        if self._mode is RotationMode.SENSOR:
            self._base = q_inverse(self._last_sensor)
        else:
            self._base = q_identity()
        self._calibrated = True
        logger.info("[SENSOR] calibrated (mode=%s)", self._mode.value)

    def _on_rotate_drag(self, angle: float, progress: float) -> None:
        if self._mode is not RotationMode.MANUAL:
            return
        axis_angle = float(angle) - math.pi / 2.0
        u = np.array([math.cos(axis_angle), math.sin(axis_angle), 0.0], dtype=np.float64)
        theta = float(progress) * self.config.angular_step_per_unit
        s = math.sin(theta / 2.0)
        self._pan_delta = np.array(
            [math.cos(theta / 2.0), u[0] * s, u[1] * s, u[2] * s],
            dtype=np.float64,
        )

    def _on_mode_switch(self, manual: bool) -> None:
        target = RotationMode.MANUAL if manual else RotationMode.SENSOR
        if target is self._mode:
            return
        sensor = self.source.current_rotation()
        if target is RotationMode.MANUAL:
            self._base = q_mul(self._base, sensor)
            self._pan = q_identity()
        else:
            self._last_sensor = sensor
            self._base = q_mul(q_mul(self._base, self._pan), q_inverse(sensor))
            self._pan_delta = q_identity()
        logger.info("[MODE] %s -> %s", self._mode.value, target.value)
        self._mode = target

    def _on_reset(self) -> None:
        if self._mode is RotationMode.SENSOR:
            sensor = self.source.current_rotation()
            self._base = q_mul(self._base, q_mul(self._last_sensor, q_inverse(sensor)))
        else:
            self._pan = q_identity()
            self._pan_delta = q_identity()
        logger.info("[MODE] reset orientation (mode=%s)", self._mode.value)

    def _on_fly_to(self, target: np.ndarray) -> None:
        if not np.isfinite(target).all():
            logger.info("[FLY] ignoring non-finite target %s", target)
            return
        delta = target - self._position
        distance = norm(delta)
        if distance <= self.config.fly_near_threshold:
            logger.info("[FLY] target %.2f away, too near to fly", distance)
            return
        end = target - delta / distance
        self._flight = FlightAnimator(
            start=self._position.copy(),
            end=end,
            duration=self.config.flight_duration,
            max_height=self.config.flight_max_height,
        )
        logger.info(
            "[FLY] flying to [%.3f, %.3f, %.3f] over %.2fs",
            end[0],
            end[1],
            end[2],
            self.config.flight_duration,
        )

    def release(self) -> None:
        self.source.stop()

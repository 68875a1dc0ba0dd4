"""Pose data structures emitted by the controller every frame."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..math3d.quaternion import q_to_xyzw

# [qx, qy, qz, qw, px, py, pz]; downstream consumers rely on this exact layout.
POSE_RECORD_SIZE = 7


@dataclass(slots=True)
class ObjectPose:
    """Avatar pose in world space.

    quaternion:
      Orientation quaternion [w, x, y, z], unit length.
    position:
      3D translation [x, y, z], scene units.
    """

    quaternion: np.ndarray
    position: np.ndarray

    def to_record(self) -> np.ndarray:
        return pack_pose_record(self.quaternion, self.position)


@dataclass(slots=True)
class CameraPose:
    eye: np.ndarray
    target: np.ndarray
    up: np.ndarray

    @property
    def front(self) -> np.ndarray:
        return self.target - self.eye


def pack_pose_record(quaternion: np.ndarray, position: np.ndarray) -> np.ndarray:
    """Pack orientation + position into the 7-float32 wire record."""
    record = np.empty(POSE_RECORD_SIZE, dtype=np.float32)
    record[:4] = q_to_xyzw(quaternion)
    record[4:] = np.asarray(position, dtype=np.float64).reshape(3)
    return record


def unpack_pose_record(record: np.ndarray) -> ObjectPose:
    """Inverse of `pack_pose_record`, for receivers of the record.

    The controller never reads records back; renderers and network peers use
    this to recover a wxyz quaternion and a position.
    """
    r = np.asarray(record, dtype=np.float64).reshape(POSE_RECORD_SIZE)
    return ObjectPose(
        quaternion=np.array([r[3], r[0], r[1], r[2]], dtype=np.float64),
        position=r[4:].copy(),
    )

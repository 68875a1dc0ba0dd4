"""Quaternion utilities for right-handed coordinates.

Quaternions are float64 arrays laid out as [w, x, y, z].

Composition convention: ``q_mul(a, b)`` is the Hamilton product and, applied
to a vector, rotates by ``b`` first and then by ``a``.
"""

from __future__ import annotations

import math

import numpy as np

_EPS = 1e-12


def q_identity() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)


def q_normalize(q: np.ndarray) -> np.ndarray:
    q = np.asarray(q, dtype=np.float64)
    n = float(np.linalg.norm(q))
    if n < _EPS:
        return q_identity()
    return q / n


def q_conj(q: np.ndarray) -> np.ndarray:
    return np.array([q[0], -q[1], -q[2], -q[3]], dtype=np.float64)


def q_inverse(q: np.ndarray) -> np.ndarray:
    """Inverse rotation. Equals the conjugate for unit quaternions."""
    q = np.asarray(q, dtype=np.float64)
    n2 = float(np.dot(q, q))
    if n2 < _EPS:
        return q_identity()
    return q_conj(q) / n2


def q_mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array(
        [
            aw * bw - ax * bx - ay * by - az * bz,
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
        ],
        dtype=np.float64,
    )


def q_to_rotmat(q: np.ndarray) -> np.ndarray:
    """3x3 rotation matrix of a quaternion (normalized first).

    Building the matrix once and applying it to several vectors is cheaper
    than repeated ``q_rotate_vec`` calls.
    """
    w, x, y, z = q_normalize(q)
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z
    return np.array(
        [
            [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
            [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
            [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
        ],
        dtype=np.float64,
    )


def q_rotate_vec(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate vector v by unit quaternion q: v' = q*(0,v)*q^{-1}."""
    q = q_normalize(q)
    vq = np.array([0.0, float(v[0]), float(v[1]), float(v[2])], dtype=np.float64)
    return q_mul(q_mul(q, vq), q_conj(q))[1:]


def axis_angle_to_q(axis: np.ndarray, angle_rad: float) -> np.ndarray:
    """Rotation by `angle_rad` about `axis`; a zero axis gives identity."""
    axis = np.asarray(axis, dtype=np.float64).reshape(3)
    n = float(np.linalg.norm(axis))
    if n < _EPS:
        return q_identity()
    half = 0.5 * float(angle_rad)
    return np.concatenate(([math.cos(half)], axis * (math.sin(half) / n)))


def q_blend(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """Normalized linear blend (nlerp), taking the short way around."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if float(np.dot(a, b)) < 0.0:
        b = -b
    t = float(max(0.0, min(1.0, t)))
    return q_normalize((1.0 - t) * a + t * b)


def q_to_xyzw(q: np.ndarray) -> np.ndarray:
    return np.array([q[1], q[2], q[3], q[0]], dtype=np.float64)


def q_from_xyzw(q: np.ndarray) -> np.ndarray:
    return np.array([q[3], q[0], q[1], q[2]], dtype=np.float64)


def euler_yaw_pitch_roll_to_q(
    yaw_deg: float, pitch_deg: float, roll_deg: float
) -> np.ndarray:
    """
    Right-handed coordinates:
      x: right, y: up, z: back (camera looks along -z)
    Euler:
      yaw around +y, pitch around +x, roll around -z (the view axis)
    Composition: q = q_yaw * q_pitch * q_roll
    """
    yaw = math.radians(yaw_deg)
    pitch = math.radians(pitch_deg)
    roll = math.radians(roll_deg)
    q_yaw = axis_angle_to_q(np.array([0.0, 1.0, 0.0]), yaw)
    q_pitch = axis_angle_to_q(np.array([1.0, 0.0, 0.0]), pitch)
    q_roll = axis_angle_to_q(np.array([0.0, 0.0, -1.0]), roll)
    return q_normalize(q_mul(q_mul(q_yaw, q_pitch), q_roll))


def rotmat_to_q(R: np.ndarray) -> np.ndarray:
    """Convert 3x3 rotation matrix to unit quaternion [w, x, y, z]."""
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        raise ValueError(f"Expected 3x3 rotation matrix, got {R.shape}")

    trace = float(R[0, 0] + R[1, 1] + R[2, 2])
    if trace > 0.0:
        s = math.sqrt(trace + 1.0) * 2.0
        qw = 0.25 * s
        qx = (R[2, 1] - R[1, 2]) / s
        qy = (R[0, 2] - R[2, 0]) / s
        qz = (R[1, 0] - R[0, 1]) / s
    elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
        s = math.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2]) * 2.0
        qw = (R[2, 1] - R[1, 2]) / s
        qx = 0.25 * s
        qy = (R[0, 1] + R[1, 0]) / s
        qz = (R[0, 2] + R[2, 0]) / s
    elif R[1, 1] > R[2, 2]:
        s = math.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2]) * 2.0
        qw = (R[0, 2] - R[2, 0]) / s
        qx = (R[0, 1] + R[1, 0]) / s
        qy = 0.25 * s
        qz = (R[1, 2] + R[2, 1]) / s
    else:
        s = math.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1]) * 2.0
        qw = (R[1, 0] - R[0, 1]) / s
        qx = (R[0, 2] + R[2, 0]) / s
        qy = (R[1, 2] + R[2, 1]) / s
        qz = 0.25 * s

    q = q_normalize(np.array([qw, qx, qy, qz], dtype=np.float64))
    # scalar-non-negative hemisphere so repeated packets do not flip sign
    return -q if q[0] < 0.0 else q

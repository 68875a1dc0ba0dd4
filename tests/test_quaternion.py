import math

import numpy as np

from AvatarPose.math3d.quaternion import (
    axis_angle_to_q,
    euler_yaw_pitch_roll_to_q,
    q_blend,
    q_from_xyzw,
    q_identity,
    q_inverse,
    q_mul,
    q_normalize,
    q_rotate_vec,
    q_to_rotmat,
    q_to_xyzw,
    rotmat_to_q,
)


def test_q_normalize_zero_returns_identity():
    q = q_normalize(np.zeros(4, dtype=np.float64))
    np.testing.assert_allclose(q, np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64))


def test_q_inverse_zero_returns_identity():
    np.testing.assert_allclose(q_inverse(np.zeros(4, dtype=np.float64)), q_identity())


def test_q_inverse_cancels_rotation():
    q = euler_yaw_pitch_roll_to_q(35.0, -20.0, 10.0)
    np.testing.assert_allclose(q_mul(q, q_inverse(q)), q_identity(), atol=1e-12)
    np.testing.assert_allclose(q_mul(q_inverse(q), q), q_identity(), atol=1e-12)


def test_yaw_90_turns_front_to_left():
    q = euler_yaw_pitch_roll_to_q(90.0, 0.0, 0.0)
    v = q_rotate_vec(q, np.array([0.0, 0.0, -1.0], dtype=np.float64))
    np.testing.assert_allclose(v, np.array([-1.0, 0.0, 0.0], dtype=np.float64), atol=1e-6)


def test_mul_applies_right_operand_first():
    a = axis_angle_to_q(np.array([0.0, 1.0, 0.0]), math.pi / 2)
    b = axis_angle_to_q(np.array([1.0, 0.0, 0.0]), math.pi / 2)
    v = np.array([0.0, 0.0, -1.0], dtype=np.float64)
    np.testing.assert_allclose(
        q_rotate_vec(q_mul(a, b), v),
        q_rotate_vec(a, q_rotate_vec(b, v)),
        atol=1e-12,
    )


def test_rotmat_matches_rotate_vec():
    q = euler_yaw_pitch_roll_to_q(-60.0, 25.0, 40.0)
    R = q_to_rotmat(q)
    for v in (np.array([0.0, 0.0, -1.0]), np.array([0.0, 1.0, 0.0]), np.array([0.3, -0.2, 0.9])):
        np.testing.assert_allclose(R @ v, q_rotate_vec(q, v), atol=1e-12)


def test_rotmat_identity_to_quaternion():
    q = rotmat_to_q(np.eye(3, dtype=np.float64))
    np.testing.assert_allclose(q, np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64), atol=1e-8)


def test_rotmat_to_q_recovers_rotation():
    q = euler_yaw_pitch_roll_to_q(120.0, -10.0, 5.0)
    back = rotmat_to_q(q_to_rotmat(q))
    if float(np.dot(back, q)) < 0.0:
        back = -back
    np.testing.assert_allclose(back, q, atol=1e-9)


def test_xyzw_reorders_scalar_last():
    q = np.array([0.5, 0.1, 0.2, 0.3], dtype=np.float64)
    np.testing.assert_allclose(q_to_xyzw(q), np.array([0.1, 0.2, 0.3, 0.5]))
    np.testing.assert_allclose(q_from_xyzw(q_to_xyzw(q)), q)


def test_blend_takes_short_path_and_stays_unit():
    a = q_identity()
    b = -axis_angle_to_q(np.array([0.0, 1.0, 0.0]), 0.4)
    mid = q_blend(a, b, 0.5)
    assert abs(float(np.linalg.norm(mid)) - 1.0) < 1e-12
    assert mid[0] > 0.9


def test_axis_angle_zero_axis_is_identity():
    np.testing.assert_array_equal(axis_angle_to_q(np.zeros(3), 1.2), q_identity())


def test_axis_angle_normalizes_axis_length():
    q = axis_angle_to_q(np.array([0.0, 4.0, 0.0]), math.pi / 3)
    np.testing.assert_allclose(q, np.array([math.cos(math.pi / 6), 0.0, 0.5, 0.0]), atol=1e-12)


def test_rotmat_to_q_keeps_scalar_non_negative():
    q = axis_angle_to_q(np.array([0.3, -1.0, 0.2]), 3.0)
    back = rotmat_to_q(q_to_rotmat(-q))
    assert back[0] >= 0.0
    np.testing.assert_allclose(back, q, atol=1e-9)

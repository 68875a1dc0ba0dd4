import numpy as np

from AvatarPose.math3d.coords import heading_pitch_deg, horizontal, norm, normalize


def test_normalize_zero_vector_is_noop():
    v = np.zeros(3, dtype=np.float64)
    np.testing.assert_allclose(normalize(v), v)


def test_normalize_unit_length():
    v = normalize(np.array([3.0, 0.0, -4.0], dtype=np.float64))
    np.testing.assert_allclose(v, np.array([0.6, 0.0, -0.8]))
    assert abs(norm(v) - 1.0) < 1e-12


def test_horizontal_zeroes_y_without_mutating_input():
    v = np.array([1.0, 2.0, -3.0], dtype=np.float64)
    h = horizontal(v)
    np.testing.assert_allclose(h, np.array([1.0, 0.0, -3.0]))
    np.testing.assert_allclose(v, np.array([1.0, 2.0, -3.0]))


def test_heading_pitch_front_is_zero():
    heading, pitch = heading_pitch_deg(np.array([0.0, 0.0, -1.0], dtype=np.float64))
    assert abs(heading) < 1e-9
    assert abs(pitch) < 1e-9


def test_heading_pitch_right_and_up():
    heading, _ = heading_pitch_deg(np.array([1.0, 0.0, 0.0], dtype=np.float64))
    assert abs(heading - 90.0) < 1e-6
    _, pitch = heading_pitch_deg(np.array([0.0, 1.0, -1.0], dtype=np.float64))
    assert abs(pitch - 45.0) < 1e-6

import numpy as np

from AvatarPose.control.orientation_source import OrientationSource
from AvatarPose.math3d.quaternion import euler_yaw_pitch_roll_to_q, q_identity


class _DummySource(OrientationSource):
    name = "dummy"

    def deliver(self, q):
        self._publish_sample(q)

    def run(self, on_tick):
        raise NotImplementedError


def test_current_rotation_is_identity_before_first_sample():
    src = _DummySource()
    assert not src.has_sample()
    np.testing.assert_allclose(src.current_rotation(), q_identity())


def test_first_sample_callback_fires_once():
    src = _DummySource()
    seen = []
    src.on_first_sample(seen.append)
    q0 = euler_yaw_pitch_roll_to_q(10.0, 0.0, 0.0)
    src.deliver(q0)
    src.deliver(euler_yaw_pitch_roll_to_q(20.0, 0.0, 0.0))
    assert len(seen) == 1
    np.testing.assert_allclose(seen[0], q0)


def test_late_registration_fires_immediately_with_current_sample():
    src = _DummySource()
    src.deliver(euler_yaw_pitch_roll_to_q(10.0, 0.0, 0.0))
    q1 = euler_yaw_pitch_roll_to_q(20.0, 0.0, 0.0)
    src.deliver(q1)
    seen = []
    src.on_first_sample(seen.append)
    assert len(seen) == 1
    np.testing.assert_allclose(seen[0], q1)


def test_samples_are_normalized_and_copied():
    src = _DummySource()
    src.deliver(np.array([2.0, 0.0, 0.0, 0.0]))
    q = src.current_rotation()
    np.testing.assert_allclose(q, q_identity())
    q[0] = 0.0
    np.testing.assert_allclose(src.current_rotation(), q_identity())

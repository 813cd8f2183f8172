import numpy as np
import pytest

from quadricmap.se3 import (
    SE3Quat,
    homo_to_real,
    quat_to_euler_zyx,
    quat_to_rotation,
    real_to_homo,
    rot_to_euler_zyx,
    rotation_to_quat,
    zyx_euler_to_quat,
)

RPY = (0.3, -0.4, 1.1)


def _pose(rpy=RPY, t=(1.0, -2.0, 0.5)):
    return SE3Quat(zyx_euler_to_quat(*rpy), t)


def test_identity_euler_and_quaternion():
    np.testing.assert_allclose(zyx_euler_to_quat(0, 0, 0), [0, 0, 0, 1])
    assert quat_to_euler_zyx([0, 0, 0, 1]) == pytest.approx((0.0, 0.0, 0.0))


def test_euler_round_trips():
    q = zyx_euler_to_quat(*RPY)
    assert quat_to_euler_zyx(q) == pytest.approx(RPY)
    assert rot_to_euler_zyx(quat_to_rotation(q)) == pytest.approx(RPY)


def test_rotation_quaternion_round_trip():
    q = zyx_euler_to_quat(*RPY)
    rot = quat_to_rotation(q)
    np.testing.assert_allclose(rot @ rot.T, np.eye(3), atol=1e-12)
    np.testing.assert_allclose(rotation_to_quat(rot), q, atol=1e-12)


def test_vector_round_trip_and_sign_normalisation():
    vec = np.array([1.0, 2.0, 3.0, 0.1, -0.2, 0.3, -0.9])
    pose = SE3Quat.from_vector(vec)
    out = pose.to_vector()
    np.testing.assert_allclose(out[:3], vec[:3])
    assert out[6] >= 0
    np.testing.assert_allclose(quat_to_rotation(out[3:]), quat_to_rotation(vec[3:]), atol=1e-12)


def test_inverse_composes_to_identity():
    pose = _pose()
    ident = (pose * pose.inverse()).to_homogeneous_matrix()
    np.testing.assert_allclose(ident, np.eye(4), atol=1e-12)


def test_composition_matches_matrix_product():
    a, b = _pose(), _pose((-0.2, 0.5, 2.0), (0.0, 3.0, -1.0))
    np.testing.assert_allclose(
        (a * b).to_homogeneous_matrix(),
        a.to_homogeneous_matrix() @ b.to_homogeneous_matrix(),
        atol=1e-12,
    )


def test_exp_log_round_trip():
    xi = np.array([0.1, -0.2, 0.3, 0.5, 1.0, -0.7])
    np.testing.assert_allclose(SE3Quat.exp(xi).log(), xi, atol=1e-9)


def test_exp_of_pure_translation():
    upsilon = [0.4, -1.5, 2.0]
    pose = SE3Quat.exp([0.0, 0.0, 0.0, *upsilon])
    np.testing.assert_allclose(pose.translation, upsilon)
    np.testing.assert_allclose(pose.rotation_matrix(), np.eye(3))


def test_exp_about_z_sets_yaw():
    angle = 0.7
    pose = SE3Quat.exp([0.0, 0.0, angle, 0.0, 0.0, 0.0])
    assert pose.to_xyz_pry_vector()[5] == pytest.approx(angle)


def test_xyz_pry_vector():
    t = (1.0, -2.0, 0.5)
    vec = _pose(RPY, t).to_xyz_pry_vector()
    np.testing.assert_allclose(vec[:3], t)
    np.testing.assert_allclose(vec[3:], RPY)


def test_homogeneous_coordinates_round_trip():
    point = np.array([1.0, 2.0, 3.0])
    homo = real_to_homo(point)
    assert homo[-1] == 1.0
    np.testing.assert_allclose(homo_to_real(homo * 4.0), point)
    mat = np.arange(6.0).reshape(3, 2)
    np.testing.assert_allclose(homo_to_real(real_to_homo(mat)), mat)
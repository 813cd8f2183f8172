import math

import numpy as np
import pytest

from quadricmap.plane import Plane, line_from_center_angle, line_to_plane
from quadricmap.se3 import SE3Quat, zyx_euler_to_quat


def test_default_plane():
    p = Plane()
    assert np.allclose(p.param, [1, 0, 0, 0])
    assert np.allclose(p.color, [1, 0, 0])
    assert p.dual_dis == 0
    assert p.limited is False


def test_from_point_and_normal_contains_point():
    point = np.array([1.0, 2.0, 3.0])
    normal = np.array([0.0, 0.6, 0.8])
    p = Plane.from_point_and_normal(point, normal)
    assert p.distance_to_point(point) == pytest.approx(0.0, abs=1e-12)
    assert p.distance_to_point(point + 2.5 * normal, keep_sign=True) == pytest.approx(2.5)
    assert p.distance_to_point(point - 2.5 * normal, keep_sign=True) == pytest.approx(-2.5)
    assert p.distance_to_point(point - 2.5 * normal) == pytest.approx(2.5)


def test_from_dis_and_angle():
    p = Plane.from_dis_and_angle(1.5, 0.7)
    assert p.param[2] == 0
    assert p.param[3] == pytest.approx(-1.5)
    assert np.linalg.norm(p.param[:3]) == pytest.approx(1.0)
    assert p.dual_dis == 0
    assert p.distance_to_point([0, 0, 0], keep_sign=True) == pytest.approx(-1.5)


def test_from_dis_angle_trans_keeps_trans():
    p = Plane.from_dis_angle_trans(2.0, 0.3, 0.25)
    assert p.dual_dis == pytest.approx(0.25)
    assert p.param[3] == pytest.approx(-2.0)


def test_exp_update_zeroes_c_and_keeps_color():
    p = Plane(np.array([1.0, 2.0, 3.0, 4.0]), np.array([0.1, 0.2, 0.3]))
    q = p.exp_update([0.5, -0.5, 1.0])
    assert np.allclose(q.param, [1.5, 1.5, 0.0, 5.0])
    assert np.allclose(q.color, p.color)
    assert np.allclose(p.param, [1, 2, 3, 4])


def test_exp_update_2dof_slope_form():
    p = Plane(np.array([0.5, -1.0, 0.0, 2.0]))
    q = p.exp_update_2dof([0.25, -1.0])
    assert np.allclose(q.param, [0.75, -1.0, 0.0, 1.0])


def test_exp_update_2dof_rejects_zero_b():
    with pytest.raises(ValueError):
        Plane(np.array([1.0, 0.0, 0.0, 1.0])).exp_update_2dof([0.1, 0.1])


def test_transform_translation():
    p = Plane(np.array([0.0, 0.0, 1.0, 0.0]))
    p.transform(SE3Quat(None, [0.0, 0.0, 2.0]))
    assert p.distance_to_point([5.0, -3.0, 2.0]) == pytest.approx(0.0, abs=1e-12)


def test_transform_keeps_incidence():
    local_point = np.array([0.3, -0.2, 1.1])
    p = Plane.from_point_and_normal(local_point, [0.2, 0.3, 0.9])
    twc = SE3Quat(zyx_euler_to_quat(0.2, -0.4, 1.0), [1.0, 2.0, -0.5])
    p.transform(twc)
    world_point = twc.rotation_matrix() @ local_point + twc.translation
    assert p.distance_to_point(world_point) == pytest.approx(0.0, abs=1e-9)


def test_init_finite_plane_and_copy():
    p = Plane()
    p.init_finite_plane([1.0, 2.0, 3.0], 0.5)
    q = p.copy()
    assert q.limited is True
    assert q.size == pytest.approx(0.5)
    assert np.allclose(q.center, [1, 2, 3])
    q.param[0] = 9.0
    assert p.param[0] == 1.0


def test_line_from_center_angle_passes_through_center():
    center = np.array([1.0, -2.0])
    angle = 0.6
    line = line_from_center_angle(center, angle)
    for t in (0.0, 1.5, -3.0):
        x = center + t * np.array([math.cos(angle), math.sin(angle)])
        assert line[0] * x[0] + line[1] * x[1] + line[2] == pytest.approx(0.0, abs=1e-12)


def test_line_to_plane():
    assert np.allclose(line_to_plane([2.0, 3.0, 4.0]), [2.0, 3.0, 0.0, 4.0])
import numpy as np
import pytest

from quadricmap.geometry import (
    CameraIntrinsic,
    PointXYZRGB,
    calib_from_camera,
    get_point_cloud,
    load_points,
    point_cloud_center,
    save_point_cloud_txt,
    set_point_cloud_property,
    transform_point,
    transform_point_cloud,
    transform_point_cloud_in_place,
)
from quadricmap.se3 import SE3Quat, zyx_euler_to_quat

CAMERA = CameraIntrinsic(fx=500.0, fy=520.0, cx=0.5, cy=0.5, scale=100.0)


def _cloud():
    return [PointXYZRGB(1.0, 2.0, 3.0), PointXYZRGB(-1.0, 0.5, 4.0, 10, 20, 30, 2)]


def test_get_point_cloud_filters_range_and_colours():
    depth = np.array([[0, 1000], [20000, 500]], dtype=np.uint16)
    rgb = np.arange(12, dtype=np.uint8).reshape(2, 2, 3)
    cloud = get_point_cloud(depth, rgb, CAMERA)
    assert len(cloud) == 2
    for p, (row, col) in zip(cloud, [(0, 1), (1, 1)]):
        assert p.z == pytest.approx(depth[row, col] / CAMERA.scale)
        assert (p.b, p.g, p.r) == tuple(int(c) for c in rgb[row, col])
        assert p.x * CAMERA.fx / p.z + CAMERA.cx == pytest.approx(col)
        assert p.y * CAMERA.fy / p.z + CAMERA.cy == pytest.approx(row)


def test_get_point_cloud_rejects_mismatched_images():
    with pytest.raises(ValueError):
        get_point_cloud(np.zeros((2, 2)), np.zeros((3, 3, 3)), CAMERA)


def test_transform_point_cloud_by_translation():
    t = np.array([0.5, -1.0, 2.0])
    cloud = _cloud()
    moved = transform_point_cloud(cloud, SE3Quat(None, t))
    for src, dst in zip(cloud, moved):
        np.testing.assert_allclose([dst.x, dst.y, dst.z], np.array([src.x, src.y, src.z]) + t)
        assert (dst.r, dst.g, dst.b, dst.size) == (src.r, src.g, src.b, src.size)
    assert cloud[0].x == 1.0


def test_transform_in_place_matches_copy():
    pose = SE3Quat(zyx_euler_to_quat(0.2, 0.1, -0.3), [1.0, 2.0, 3.0])
    cloud = _cloud()
    expected = transform_point_cloud(cloud, pose)
    transform_point_cloud_in_place(cloud, pose)
    for a, b in zip(cloud, expected):
        assert (a.x, a.y, a.z) == pytest.approx((b.x, b.y, b.z))


def test_transform_point_round_trip():
    pose = SE3Quat(zyx_euler_to_quat(0.2, 0.1, -0.3), [1.0, 2.0, 3.0])
    point = np.array([0.3, -0.7, 1.2])
    there = transform_point(point, pose.to_homogeneous_matrix())
    back = transform_point(there, pose.inverse().to_homogeneous_matrix())
    np.testing.assert_allclose(back, point, atol=1e-12)


def test_load_points_defaults():
    mat = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    points = load_points(mat)
    assert [(p.x, p.y, p.z) for p in points] == [tuple(r) for r in mat]
    assert all((p.r, p.g, p.b, p.size) == (0, 255, 0, 10) for p in points)


def test_set_point_cloud_property():
    cloud = _cloud()
    set_point_cloud_property(cloud, 1, 2, 3, 4)
    assert all((p.r, p.g, p.b, p.size) == (1, 2, 3, 4) for p in cloud)


def test_calib_from_camera():
    calib = calib_from_camera(CAMERA)
    assert calib[0, 0] == CAMERA.fx and calib[1, 1] == CAMERA.fy
    assert calib[0, 2] == CAMERA.cx and calib[1, 2] == CAMERA.cy
    assert calib[2, 2] == 1.0


def test_save_point_cloud_round_trip(tmp_path):
    cloud = _cloud()
    path = tmp_path / "cloud.txt"
    save_point_cloud_txt(path, cloud)
    loaded = np.loadtxt(path)
    np.testing.assert_allclose(loaded, [[p.x, p.y, p.z] for p in cloud])


def test_point_cloud_center():
    cloud = _cloud()
    center = point_cloud_center(cloud)
    np.testing.assert_allclose(center * len(cloud), np.sum([[p.x, p.y, p.z] for p in cloud], axis=0))
    with pytest.raises(ValueError):
        point_cloud_center([])
import numpy as np
import pytest

from quadricmap.builder import DenseBuilder

CALIB = np.array([[1.0, 0, 0], [0, 1.0, 0], [0, 0, 1]])
IDENTITY_POSE = [0, 0, 0, 0, 0, 0, 1]


def _builder():
    b = DenseBuilder()
    b.set_camera_intrinsic(CALIB, 1000)
    return b


def _images():
    depth = np.array([[0, 1000], [200, 2000]], dtype=np.uint16)
    rgb = np.zeros((2, 2, 3), dtype=np.uint8)
    rgb[0, 1] = (10, 20, 30)
    rgb[1, 1] = (40, 50, 60)
    return rgb, depth


def test_uninitialized_builder_raises():
    rgb, depth = _images()
    with pytest.raises(RuntimeError):
        DenseBuilder().image_to_point_cloud(rgb, depth)


def test_image_to_point_cloud_skips_zero_and_near():
    rgb, depth = _images()
    cloud = _builder().image_to_point_cloud(rgb, depth)
    assert cloud.shape == (2, 6)
    assert np.allclose(cloud[0], [1, 0, 1, 30, 20, 10])
    assert np.allclose(cloud[1], [2, 2, 2, 60, 50, 40])


def test_depth_threshold():
    rgb, depth = _images()
    cloud = _builder().image_to_point_cloud(rgb, depth, depth_thresh=1.5)
    assert cloud.shape[0] == 1
    assert cloud[0, 2] == pytest.approx(1.0)


def test_process_frame_translates_and_accumulates():
    rgb, depth = _images()
    b = _builder()
    local = b.image_to_point_cloud(rgb, depth)
    b.process_frame(rgb, depth, [1, 2, 3, 0, 0, 0, 1])
    assert np.allclose(b.current_map[:, :3], local[:, :3] + [1, 2, 3])
    assert np.allclose(b.current_map[:, 3:], local[:, 3:])
    b.process_frame(rgb, depth, IDENTITY_POSE)
    assert b.map.shape[0] == 2 * local.shape[0]


def test_voxel_filter_merges_points_in_one_cell():
    b = _builder()
    b.map = np.array(
        [[0.1, 0.1, 0.1, 10, 20, 30], [0.3, 0.3, 0.3, 20, 40, 60], [5.0, 5.0, 5.0, 1, 1, 1]]
    )
    b.voxel_filter(1.0)
    assert b.map.shape == (2, 6)
    assert np.allclose(b.map[0], [0.2, 0.2, 0.2, 15, 30, 45])
    assert np.allclose(b.map[1], [5.0, 5.0, 5.0, 1, 1, 1])


def test_voxel_filter_rejects_bad_grid():
    with pytest.raises(ValueError):
        _builder().voxel_filter(0)


def test_save_map_header_and_points(tmp_path):
    rgb, depth = _images()
    b = _builder()
    b.process_frame(rgb, depth, IDENTITY_POSE)
    path = tmp_path / "map.pcd"
    b.save_map(path)
    lines = path.read_text().splitlines()
    assert "FIELDS x y z rgb" in lines
    assert f"POINTS {b.map.shape[0]}" in lines
    data = lines[lines.index("DATA ascii") + 1:]
    assert len(data) == b.map.shape[0]


def test_save_empty_map_writes_nothing(tmp_path):
    path = tmp_path / "map.pcd"
    _builder().save_map(path)
    assert not path.exists()
import numpy as np
import pytest

from quadricmap.frame import Frame, Observation, Observation3D


def _frame(pose=(1.0, 2.0, 3.0, 0.0, 0.0, 0.0, 1.0), obs=None, depth=None, rgb=None):
    if obs is None:
        obs = np.zeros((0, 8))
    return Frame(0.5, pose, obs, depth, rgb)


def test_pose_and_inverse():
    f = _frame()
    assert np.allclose(f.cam_pose_twc.translation, [1, 2, 3])
    assert np.allclose(f.cam_pose_tcw.translation, [-1, -2, -3])
    composed = f.cam_pose_twc * f.cam_pose_tcw
    assert np.allclose(composed.to_homogeneous_matrix(), np.eye(4))


def test_pose_uses_last_seven_values():
    f = _frame(pose=(99.0, 4.0, 5.0, 6.0, 0.0, 0.0, 0.0, 1.0))
    assert np.allclose(f.cam_pose_twc.translation, [4, 5, 6])


def test_short_pose_rejected():
    with pytest.raises(ValueError):
        _frame(pose=(1.0, 2.0, 3.0))


def test_sequence_ids_and_reset():
    Frame.reset_counter()
    a = _frame()
    b = _frame()
    assert (a.frame_seq_id, b.frame_seq_id) == (0, 1)
    Frame.reset_counter()
    assert _frame().frame_seq_id == 0


def test_observations_and_outliers():
    obs = np.array([[0, 10, 20, 30, 40, 1, 0.9, 3], [1, 50, 60, 70, 80, 2, 0.8, 4]])
    f = _frame(obs=obs)
    assert f.observations.shape == (2, 8)
    assert f.outliers == [False, False]
    assert f.local_objects == []
    assert f.has_local_object is False
    obs[0, 1] = -5
    assert f.observations[0, 1] == 10


def test_single_row_observation_becomes_matrix():
    f = _frame(obs=[0, 10, 20, 30, 40, 1, 0.9, 3])
    assert f.observations.shape == (1, 8)


def test_empty_observations():
    f = _frame(obs=[])
    assert f.observations.shape[0] == 0
    assert f.outliers == []


def test_images_are_copied():
    depth = np.ones((4, 5), dtype=np.uint16)
    rgb = np.zeros((4, 5, 3), dtype=np.uint8)
    f = _frame(depth=depth, rgb=rgb)
    depth[0, 0] = 7
    rgb[0, 0, 0] = 7
    assert f.depth[0, 0] == 1
    assert f.rgb[0, 0, 0] == 0


def test_observation_records():
    f = _frame()
    ob = Observation(2, np.array([1.0, 2.0, 3.0, 4.0]), 0.7, f)
    assert ob.instance == -1
    assert ob.frame is f
    ob3 = Observation3D(f, "obj")
    assert ob3.obj == "obj"
    assert ob3.frame is f
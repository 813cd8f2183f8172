"""Camera frames with their detections and per-object observations."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from typing import Any

import numpy as np

from .se3 import SE3Quat


def _observation_matrix(observations) -> np.ndarray:
    arr = np.array(observations, dtype=float)
    if arr.size == 0:
        cols = arr.shape[-1] if arr.ndim == 2 else 0
        return np.zeros((0, cols))
    if arr.ndim == 1:
        return arr.reshape(1, -1)
    return arr


def _copy_image(image):
    return None if image is None else np.array(image, copy=True)


class Frame:
    """One RGB-D frame with its camera pose and detection matrix.

    Each detection row is (id, x1, y1, x2, y2, label, rate, instance).
    """

    _counter = itertools.count()
    _lock = threading.Lock()

    def __init__(self, timestamp: float, pose, observations, depth, rgb) -> None:
        self.timestamp = float(timestamp)
        self.rgb = _copy_image(rgb)
        self.depth = _copy_image(depth)

        pose_vec = np.asarray(pose, dtype=float).reshape(-1)
        if pose_vec.size < 7:
            raise ValueError("pose needs at least 7 values: x y z qx qy qz qw")
        self.cam_pose_twc = SE3Quat.from_vector(pose_vec[-7:])
        self.cam_pose_tcw = self.cam_pose_twc.inverse()

        with Frame._lock:
            self.frame_seq_id = next(Frame._counter)

        self.observations = _observation_matrix(observations)
        self.outliers = [False] * self.observations.shape[0]
        self.local_objects: list[Any] = []
        self.has_local_object = False

    def __repr__(self) -> str:
        return f"Frame(id={self.frame_seq_id}, timestamp={self.timestamp})"

    @classmethod
    def reset_counter(cls) -> None:
        """Restart frame numbering from zero."""
        with Frame._lock:
            Frame._counter = itertools.count()


@dataclass
class Observation:
    """A 2D detection of an object instance in a frame."""

    label: int
    bbox: np.ndarray
    rate: float
    frame: Frame
    instance: int = -1


@dataclass
class Observation3D:
    """A single-frame ellipsoid estimate of an object, in camera coordinates."""

    frame: Frame
    obj: Any
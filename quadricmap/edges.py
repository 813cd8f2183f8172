"""Error terms linking camera poses and ellipsoids, and vertex text I/O."""

from __future__ import annotations

import numpy as np

from .ellipsoid import Ellipsoid
from .se3 import SE3Quat

# Bounding-box sides below this value are invalid measurements.
_MIN_VALID_MEASUREMENT = 5


def ellipsoid_3d_error(camera_pose_tcw: SE3Quat, e: Ellipsoid, measurement: Ellipsoid) -> np.ndarray:
    """9-vector error between a world ellipsoid and a camera-frame measurement of it."""
    twc = camera_pose_tcw.inverse()
    measured_world = measurement.transform_from(twc)
    return e.min_log_error_9dof(measured_world)


def bbox_projection(camera_pose_tcw: SE3Quat, e: Ellipsoid, calib) -> np.ndarray:
    """Box (x1, y1, x2, y2) of the ellipse the ellipsoid projects to."""
    return e.bounding_box_from_projection(camera_pose_tcw, calib)


def bbox_projection_error(camera_pose_tcw: SE3Quat, e: Ellipsoid, measurement, calib) -> np.ndarray:
    """Projected box minus measured box; sides with invalid measurements are zero."""
    meas = np.asarray(measurement, dtype=float).reshape(4)
    proj = bbox_projection(camera_pose_tcw, e, calib)
    return np.where(meas >= _MIN_VALID_MEASUREMENT, proj - meas, 0.0)


def gravity_prior_error(e: Ellipsoid, plane_param) -> np.ndarray:
    """Angle between the ellipsoid's z axis and the supporting plane normal."""
    z_axis = e.pose.rotation_matrix()[:, 2]
    normal = np.asarray(plane_param, dtype=float).reshape(-1)[:3]
    cos_angle = float(z_axis @ normal) / np.linalg.norm(z_axis) / np.linalg.norm(normal)
    if cos_angle > 1:
        cos_angle -= 0.0001
    elif cos_angle < -1:
        cos_angle += 0.0001
    with np.errstate(invalid="ignore"):
        angle = np.arccos(cos_angle)
    return np.array([angle - 0.0])


def format_ellipsoid_vertex(e: Ellipsoid) -> str:
    """The minimal vector as space-separated numbers, each followed by a space."""
    return "".join(f"{v:g} " for v in e.to_minimal_vector())


def parse_ellipsoid_vertex(text: str) -> Ellipsoid:
    """Ellipsoid from the first nine numbers of ``text``."""
    fields = text.split()
    if len(fields) < 9:
        raise ValueError(f"expected 9 numbers, got {len(fields)}")
    return Ellipsoid.from_minimal_vector([float(f) for f in fields[:9]])
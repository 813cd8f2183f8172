"""Ellipsoidal object landmarks: pose, scale, projection and overlap."""

from __future__ import annotations

import math

import numpy as np

from .polygon import Polygon, intersect_polygon
from .se3 import SE3Quat, homo_to_real, quat_to_euler_zyx, real_to_homo, zyx_euler_to_quat

# Corners of the unit cube in body coordinates, one column per corner.
_BODY_CORNERS = np.array(
    [
        [1, 1, -1, -1, 1, 1, -1, -1],
        [1, -1, -1, 1, 1, -1, -1, 1],
        [-1, -1, -1, -1, 1, 1, 1, 1],
    ],
    dtype=float,
)

# Metres per pixel used when rasterizing footprints for the XY overlap.
_XY_RESOLUTION = 0.001


class Ellipsoid:
    """An ellipsoid given by its pose in the world and its half axes."""

    def __init__(self, pose: SE3Quat | None = None, scale=None) -> None:
        self.pose = SE3Quat() if pose is None else pose
        self.scale = np.zeros(3) if scale is None else np.asarray(scale, dtype=float).reshape(3).copy()
        self.label = -1
        self.instance_id = -1
        self.prob = 1.0
        self.has_color = False
        self.color_rgba = np.zeros(4)
        self.vec_minimal = self.to_minimal_vector()

    def __repr__(self) -> str:
        return f"Ellipsoid(minimal={self.to_minimal_vector().tolist()}, instance_id={self.instance_id})"

    # ---- construction and conversion

    @classmethod
    def from_minimal_vector(cls, v) -> Ellipsoid:
        """From (x, y, z, roll, pitch, yaw, a, b, c)."""
        vec = np.asarray(v, dtype=float).reshape(9)
        pose = SE3Quat(zyx_euler_to_quat(vec[3], vec[4], vec[5]), vec[:3])
        e = cls(pose, vec[6:])
        e.vec_minimal = vec.copy()
        return e

    @classmethod
    def from_vector(cls, v) -> Ellipsoid:
        """From (x, y, z, qx, qy, qz, qw, a, b, c)."""
        vec = np.asarray(v, dtype=float).reshape(10)
        return cls(SE3Quat.from_vector(vec[:7]), vec[7:])

    def to_minimal_vector(self) -> np.ndarray:
        return np.concatenate([self.pose.to_xyz_pry_vector(), self.scale])

    def to_vector(self) -> np.ndarray:
        return np.concatenate([self.pose.to_vector(), self.scale])

    def copy_attributes_from(self, other: Ellipsoid) -> None:
        """Take label, colour, instance and probability from ``other``."""
        self.label = other.label
        self.has_color = other.has_color
        self.color_rgba = other.color_rgba.copy()
        self.instance_id = other.instance_id
        self.prob = other.prob

    def copy(self) -> Ellipsoid:
        res = Ellipsoid(SE3Quat(self.pose.quat, self.pose.translation), self.scale)
        res.vec_minimal = self.vec_minimal.copy()
        res.copy_attributes_from(self)
        return res

    def _derived(self, pose: SE3Quat, scale) -> Ellipsoid:
        res = Ellipsoid(pose, scale)
        res.copy_attributes_from(self)
        return res

    # ---- updates and errors

    def exp_update(self, update) -> Ellipsoid:
        """Apply a 9-vector update: pose by exponential map, scale additively."""
        u = np.asarray(update, dtype=float).reshape(9)
        return self._derived(self.pose * SE3Quat.exp(u[:6]), self.scale + u[6:])

    def exp_update_xyzabc(self, update) -> Ellipsoid:
        """Apply a 6-vector update of translation and scale only."""
        u = np.asarray(update, dtype=float).reshape(6)
        pose_vec = np.array([0.0, 0.0, 0.0, u[0], u[1], u[2]])
        return self._derived(self.pose * SE3Quat.exp(pose_vec), self.scale + u[3:])

    def log_error_9dof(self, other: Ellipsoid) -> np.ndarray:
        pose_diff = other.pose.inverse() * self.pose
        return np.concatenate([pose_diff.log(), self.scale - other.scale])

    def rotate(self, yaw_angle: float) -> Ellipsoid:
        """The same ellipsoid described with its body frame turned about z."""
        half = yaw_angle * 0.5
        rot = SE3Quat(np.array([0.0, 0.0, math.sin(half), math.cos(half)]), np.zeros(3))
        res = self._derived(self.pose * rot, self.scale)
        eps = 1e-6
        if (
            abs(yaw_angle - math.pi / 2) < eps
            or abs(yaw_angle + math.pi / 2) < eps
            or abs(yaw_angle - 3 * math.pi / 2) < eps
        ):
            res.scale[[0, 1]] = res.scale[[1, 0]]
        return res

    def min_log_error_9dof(self, other: Ellipsoid) -> np.ndarray:
        """Smallest error over the four yaw-equivalent descriptions of ``other``."""
        errors = [
            self.log_error_9dof(other.rotate(k * math.pi / 2.0)) for k in (-1, 0, 1, 2)
        ]
        norms = [float(np.linalg.norm(err)) for err in errors]
        return errors[int(np.argmin(norms))]

    def transform_from(self, twc: SE3Quat) -> Ellipsoid:
        """Local (camera) ellipsoid to world, given the camera pose Twc."""
        return self._derived(twc * self.pose, self.scale)

    def transform_to(self, twc: SE3Quat) -> Ellipsoid:
        """World ellipsoid to local (camera), given the camera pose Twc."""
        return self._derived(twc.inverse() * self.pose, self.scale)

    def similarity_transform(self) -> np.ndarray:
        res = self.pose.to_homogeneous_matrix()
        res[:3, :3] = res[:3, :3] @ np.diag(self.scale)
        return res

    # ---- ellipsoid projection

    def project_center(self, campose_cw: SE3Quat, calib) -> np.ndarray:
        p = projection_matrix(campose_cw, calib)
        return homo_to_real(p @ real_to_homo(self.pose.translation))

    def generate_quadric(self) -> np.ndarray:
        """Dual quadric Q* in world coordinates."""
        s = self.scale
        q_c_star = np.diag([s[0] * s[0], s[1] * s[1], s[2] * s[2], -1.0])
        h = self.pose.to_homogeneous_matrix()
        return h @ q_c_star @ h.T

    def project_onto_image_ellipse(self, campose_cw: SE3Quat, calib) -> np.ndarray:
        """Projected ellipse as (x_c, y_c, theta, axis1, axis2)."""
        q_star = self.generate_quadric()
        p = projection_matrix(campose_cw, calib)
        c = np.linalg.inv(p @ q_star @ p.T)
        c = c / c[2, 2]

        a = c[0, 0]
        b = c[0, 1] * 2
        cc = c[1, 1]
        d = c[0, 2] * 2
        e = c[2, 1] * 2

        theta = 0.5 * math.atan2(b, a - cc)
        with np.errstate(divide="ignore", invalid="ignore"):
            den = np.float64(4 * a * cc - b * b)
            x_c = (b * e - 2 * cc * d) / den
            y_c = (b * d - 2 * a * e) / den
            root = np.sqrt((a - cc) ** 2 + b * b)
            num = 2 * (a * x_c * x_c + cc * y_c * y_c + b * x_c * y_c - 1)
            axis1 = np.sqrt(num / (a + cc + root))
            axis2 = np.sqrt(num / (a + cc - root))
        return np.array([x_c, y_c, theta, axis1, axis2], dtype=float)

    def bounding_box_from_projection(self, campose_cw: SE3Quat, calib) -> np.ndarray:
        """Bounding box (x1, y1, x2, y2) of the projected ellipse."""
        return bounding_box_from_ellipse(self.project_onto_image_ellipse(campose_cw, calib))

    # ---- colour and visibility

    @property
    def color(self) -> np.ndarray:
        return self.color_rgba[:3].copy()

    def set_color(self, color, alpha: float = 1.0) -> None:
        self.has_color = True
        self.color_rgba = np.append(np.asarray(color, dtype=float).reshape(3), float(alpha))

    def is_observable(self, campose_cw: SE3Quat) -> bool:
        """False when the center lies behind the camera."""
        center = real_to_homo(self.to_minimal_vector()[:3])
        in_camera = campose_cw.to_homogeneous_matrix() @ center
        return bool(in_camera[2] >= 0)

    def miou_error(self, other: Ellipsoid) -> float:
        """1 - IoU of the bounding boxes of two ellipsoids."""
        return intersection_error(self, other)

    # ---- bounding cube

    def box_corners(self) -> np.ndarray:
        """3x8 world coordinates of the circumscribed box corners."""
        return homo_to_real(self.similarity_transform() @ real_to_homo(_BODY_CORNERS))

    def project_box_corners(self, campose_cw: SE3Quat, calib) -> np.ndarray:
        in_camera = homo_to_real(
            campose_cw.to_homogeneous_matrix() @ real_to_homo(self.box_corners())
        )
        return homo_to_real(np.asarray(calib, dtype=float) @ in_camera)

    def project_rect(self, campose_cw: SE3Quat, calib) -> np.ndarray:
        """(x1, y1, x2, y2) enclosing the projected box corners."""
        corners = self.project_box_corners(campose_cw, calib)
        top_left = corners.min(axis=1)
        bottom_right = corners.max(axis=1)
        return np.array([top_left[0], top_left[1], bottom_right[0], bottom_right[1]])

    def project_bbox(self, campose_cw: SE3Quat, calib) -> np.ndarray:
        """(center_x, center_y, width, height) of the projected box."""
        rect = self.project_rect(campose_cw, calib)
        center = (rect[2:] + rect[:2]) / 2
        size = rect[2:] - rect[:2]
        return np.array([center[0], center[1], size[0], size[1]])


def bounding_box_from_ellipse(ellipse) -> np.ndarray:
    """Axis-aligned box (x1, y1, x2, y2) of an ellipse (x, y, theta, a, b)."""
    x, y, theta, a, b = (float(v) for v in np.asarray(ellipse, dtype=float).reshape(5))
    cos2 = math.cos(theta) ** 2
    sin2 = 1 - cos2
    x_limit = math.sqrt(a * a * cos2 + b * b * sin2)
    y_limit = math.sqrt(a * a * sin2 + b * b * cos2)
    return np.array([x - x_limit, y - y_limit, x + x_limit, y + y_limit])


def projection_matrix(campose_cw: SE3Quat, calib) -> np.ndarray:
    """P = K [I | 0] Tcw."""
    ident = np.hstack([np.eye(3), np.zeros((3, 1))])
    return np.asarray(calib, dtype=float) @ ident @ campose_cw.to_homogeneous_matrix()


def box_volume(e: Ellipsoid) -> float:
    """Volume of the box circumscribing ``e``."""
    return float(e.scale[0] * e.scale[1] * e.scale[2] * 8)


def intersection_on_z(e1: Ellipsoid, e2: Ellipsoid) -> float:
    """Overlap length along the z axis of ``e1``."""
    pose_diff = e1.pose.inverse() * e2.pose
    z1 = 0.0
    z2 = float(pose_diff.translation[2])
    if z1 > z2:
        length = (z2 + e2.scale[2]) - (z1 - e1.scale[2])
    else:
        length = (z1 + e1.scale[2]) - (z2 - e2.scale[2])
    return max(float(length), 0.0)


def intersection_on_xy(e1: Ellipsoid, e2: Ellipsoid) -> float:
    """Overlap area of the two boxes projected onto the XY plane of ``e1``."""
    pose_diff = e1.pose.inverse() * e2.pose
    x2, y2 = float(pose_diff.translation[0]), float(pose_diff.translation[1])
    _, _, yaw = quat_to_euler_zyx(pose_diff.quat)

    a1, b1 = abs(float(e1.scale[0])), abs(float(e1.scale[1]))
    a2, b2 = abs(float(e2.scale[0])), abs(float(e2.scale[1]))
    res = _XY_RESOLUTION

    def pixel(x: float, y: float) -> tuple[float, float]:
        return (float(int(x / res)), float(int(y / res)))

    polygon1 = Polygon([pixel(a1, b1), pixel(-a1, b1), pixel(-a1, -b1), pixel(a1, -b1)])

    c_length = math.hypot(a2, b2)
    half = math.atan2(a2, b2)
    init_theta = math.pi / 2.0 - half
    polygon2 = Polygon(
        pixel(
            c_length * math.cos(init_theta - yaw + plus) + x2,
            c_length * math.sin(init_theta - yaw + plus) + y2,
        )
        for plus in (0.0, half * 2, math.pi, math.pi + half * 2)
    )

    inter = intersect_polygon(polygon1, polygon2)
    return inter.area() * res * res


def intersection_error(e1: Ellipsoid, e2: Ellipsoid) -> float:
    """1 - IoU of the circumscribed boxes of two ellipsoids."""
    volume_a = abs(box_volume(e1))
    volume_b = abs(box_volume(e2))
    inter = intersection_on_xy(e1, e2) * intersection_on_z(e1, e2)
    return 1 - inter / (volume_a + volume_b - inter)
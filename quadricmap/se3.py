"""Rigid transforms stored as unit quaternion and translation.

Quaternions are arrays ordered (x, y, z, w); pose vectors are
(tx, ty, tz, qx, qy, qz, qw).
"""

from __future__ import annotations

import math

import numpy as np


def _skew(v: np.ndarray) -> np.ndarray:
    return np.array(
        [[0.0, -v[2], v[1]], [v[2], 0.0, -v[0]], [-v[1], v[0], 0.0]]
    )


def _diag_sum(m: np.ndarray) -> float:
    return float(m[0, 0] + m[1, 1] + m[2, 2])


def _normalize_quat(quat) -> np.ndarray:
    q = np.asarray(quat, dtype=float).reshape(4)
    norm = np.linalg.norm(q)
    if norm == 0:
        raise ValueError("quaternion of zero length")
    q = q / norm
    return -q if q[3] < 0 else q


def _quat_mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array(
        [
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
            aw * bw - ax * bx - ay * by - az * bz,
        ]
    )


def zyx_euler_to_quat(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """Quaternion of the rotation Rz(yaw) Ry(pitch) Rx(roll)."""
    sy, cy = math.sin(yaw * 0.5), math.cos(yaw * 0.5)
    sp, cp = math.sin(pitch * 0.5), math.cos(pitch * 0.5)
    sr, cr = math.sin(roll * 0.5), math.cos(roll * 0.5)
    w = cr * cp * cy + sr * sp * sy
    x = sr * cp * cy - cr * sp * sy
    y = cr * sp * cy + sr * cp * sy
    z = cr * cp * sy - sr * sp * cy
    return np.array([x, y, z, w])


def quat_to_euler_zyx(quat) -> tuple[float, float, float]:
    """(roll, pitch, yaw) of a quaternion."""
    qx, qy, qz, qw = np.asarray(quat, dtype=float).reshape(4)
    roll = math.atan2(2 * (qw * qx + qy * qz), 1 - 2 * (qx * qx + qy * qy))
    pitch = math.asin(max(-1.0, min(1.0, 2 * (qw * qy - qz * qx))))
    yaw = math.atan2(2 * (qw * qz + qx * qy), 1 - 2 * (qy * qy + qz * qz))
    return roll, pitch, yaw


def rot_to_euler_zyx(rot) -> tuple[float, float, float]:
    """(roll, pitch, yaw) of a rotation matrix."""
    r = np.asarray(rot, dtype=float)
    pitch = math.asin(max(-1.0, min(1.0, -r[2, 0])))
    if abs(pitch - math.pi / 2) < 1.0e-3 or abs(pitch + math.pi / 2) < 1.0e-3:
        roll = 0.0
        yaw = math.atan2(r[1, 2] - r[0, 1], r[0, 2] + r[1, 1])
    else:
        roll = math.atan2(r[2, 1], r[2, 2])
        yaw = math.atan2(r[1, 0], r[0, 0])
    return roll, pitch, yaw


def quat_to_rotation(quat) -> np.ndarray:
    x, y, z, w = _normalize_quat(quat)
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ]
    )


def rotation_to_quat(rot) -> np.ndarray:
    r = np.asarray(rot, dtype=float).reshape(3, 3)
    diag = _diag_sum(r)
    if diag > 0:
        s = math.sqrt(diag + 1.0) * 2
        q = [(r[2, 1] - r[1, 2]) / s, (r[0, 2] - r[2, 0]) / s, (r[1, 0] - r[0, 1]) / s, 0.25 * s]
    elif r[0, 0] > r[1, 1] and r[0, 0] > r[2, 2]:
        s = math.sqrt(1.0 + r[0, 0] - r[1, 1] - r[2, 2]) * 2
        q = [0.25 * s, (r[0, 1] + r[1, 0]) / s, (r[0, 2] + r[2, 0]) / s, (r[2, 1] - r[1, 2]) / s]
    elif r[1, 1] > r[2, 2]:
        s = math.sqrt(1.0 + r[1, 1] - r[0, 0] - r[2, 2]) * 2
        q = [(r[0, 1] + r[1, 0]) / s, 0.25 * s, (r[1, 2] + r[2, 1]) / s, (r[0, 2] - r[2, 0]) / s]
    else:
        s = math.sqrt(1.0 + r[2, 2] - r[0, 0] - r[1, 1]) * 2
        q = [(r[0, 2] + r[2, 0]) / s, (r[1, 2] + r[2, 1]) / s, 0.25 * s, (r[1, 0] - r[0, 1]) / s]
    return _normalize_quat(q)


def real_to_homo(points) -> np.ndarray:
    """Append a homogeneous 1 to a vector, or a row of ones to a 3xN matrix."""
    arr = np.asarray(points, dtype=float)
    if arr.ndim == 1:
        return np.append(arr, 1.0)
    return np.vstack([arr, np.ones((1, arr.shape[1]))])


def homo_to_real(points) -> np.ndarray:
    """Divide by the last coordinate and drop it."""
    arr = np.asarray(points, dtype=float)
    return arr[:-1] / arr[-1]


class SE3Quat:
    """A rigid transform x -> R x + t."""

    __slots__ = ("quat", "translation")

    def __init__(self, rotation=None, translation=None) -> None:
        if rotation is None:
            self.quat = np.array([0.0, 0.0, 0.0, 1.0])
        else:
            rot = np.asarray(rotation, dtype=float)
            self.quat = rotation_to_quat(rot) if rot.shape == (3, 3) else _normalize_quat(rot)
        self.translation = (
            np.zeros(3) if translation is None else np.asarray(translation, dtype=float).reshape(3).copy()
        )

    @classmethod
    def from_vector(cls, v) -> SE3Quat:
        vec = np.asarray(v, dtype=float).reshape(7)
        return cls(vec[3:7], vec[:3])

    def to_vector(self) -> np.ndarray:
        return np.concatenate([self.translation, self.quat])

    def rotation_matrix(self) -> np.ndarray:
        return quat_to_rotation(self.quat)

    def inverse(self) -> SE3Quat:
        conj = np.array([-self.quat[0], -self.quat[1], -self.quat[2], self.quat[3]])
        return SE3Quat(conj, -(self.rotation_matrix().T @ self.translation))

    def __mul__(self, other: SE3Quat) -> SE3Quat:
        if not isinstance(other, SE3Quat):
            return NotImplemented
        return SE3Quat(
            _quat_mul(self.quat, other.quat),
            self.translation + self.rotation_matrix() @ other.translation,
        )

    def __repr__(self) -> str:
        return f"SE3Quat(quat={self.quat.tolist()}, translation={self.translation.tolist()})"

    @classmethod
    def exp(cls, update) -> SE3Quat:
        """Exponential map of (omega, upsilon)."""
        vec = np.asarray(update, dtype=float).reshape(6)
        omega, upsilon = vec[:3], vec[3:]
        theta = float(np.linalg.norm(omega))
        om = _skew(omega)
        om2 = om @ om
        ident = np.eye(3)
        if theta < 0.00001:
            rot = ident + om + om2
            v = rot
        else:
            s, c = math.sin(theta), math.cos(theta)
            rot = ident + s / theta * om + (1 - c) / theta**2 * om2
            v = ident + (1 - c) / theta**2 * om + (theta - s) / theta**3 * om2
        return cls(rotation_to_quat(rot), v @ upsilon)

    def log(self) -> np.ndarray:
        """Logarithm map, (omega, upsilon)."""
        r = self.rotation_matrix()
        d = 0.5 * (_diag_sum(r) - 1)
        dr = np.array([r[2, 1] - r[1, 2], r[0, 2] - r[2, 0], r[1, 0] - r[0, 1]])
        ident = np.eye(3)
        with np.errstate(divide="ignore", invalid="ignore"):
            if d > 0.99999:
                omega = 0.5 * dr
                om = _skew(omega)
                v_inv = ident - 0.5 * om + (1.0 / 12.0) * (om @ om)
            else:
                d = np.float64(min(1.0, max(-1.0, d)))
                theta = np.arccos(d)
                omega = theta / (2 * np.sqrt(1 - d * d)) * dr
                om = _skew(omega)
                v_inv = ident - 0.5 * om + (
                    1 - theta / (2 * np.tan(theta / 2))
                ) / (theta * theta) * (om @ om)
        return np.concatenate([omega, v_inv @ self.translation])

    def to_homogeneous_matrix(self) -> np.ndarray:
        m = np.eye(4)
        m[:3, :3] = self.rotation_matrix()
        m[:3, 3] = self.translation
        return m

    def to_xyz_pry_vector(self) -> np.ndarray:
        """(x, y, z, roll, pitch, yaw)."""
        return np.concatenate([self.translation, quat_to_euler_zyx(self.quat)])
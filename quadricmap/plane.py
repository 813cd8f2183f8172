"""Planes in 3D given by the coefficients (A, B, C, D) of Ax + By + Cz + D = 0."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .se3 import SE3Quat


def _default_param() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0])


def _default_color() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0])


@dataclass(eq=False)
class Plane:
    """A plane with a display colour and an optional finite extent."""

    param: np.ndarray = field(default_factory=_default_param)
    color: np.ndarray = field(default_factory=_default_color)
    dual_dis: float = 0.0
    limited: bool = False
    center: np.ndarray = field(default_factory=lambda: np.zeros(3))
    size: float = 0.0

    def __post_init__(self) -> None:
        self.param = np.asarray(self.param, dtype=float).reshape(4).copy()
        self.color = np.asarray(self.color, dtype=float).reshape(3).copy()
        self.center = np.asarray(self.center, dtype=float).reshape(3).copy()

    def copy(self) -> Plane:
        return Plane(
            self.param, self.color, self.dual_dis, self.limited, self.center, self.size
        )

    def exp_update(self, update) -> Plane:
        """Add (dA, dB, dD) to the coefficients; C becomes 0."""
        u = np.asarray(update, dtype=float).reshape(3)
        p = self.param
        return Plane(np.array([p[0] + u[0], p[1] + u[1], 0.0, p[3] + u[2]]), self.color)

    def exp_update_2dof(self, update) -> Plane:
        """Update the plane as the line y = kx + b by (dk, db)."""
        u = np.asarray(update, dtype=float).reshape(2)
        a, b_coef, _, d = (float(v) for v in self.param)
        if b_coef == 0:
            raise ValueError("plane has no slope form: its B coefficient is zero")
        k = -a / b_coef + u[0]
        b = -d / b_coef + u[1]
        return Plane(np.array([k, -1.0, 0.0, b]), self.color)

    @classmethod
    def from_point_and_normal(cls, point, normal) -> Plane:
        n = np.asarray(normal, dtype=float).reshape(3)
        x = np.asarray(point, dtype=float).reshape(3)
        return cls(np.append(n, -float(x @ n)))

    @classmethod
    def from_dis_and_angle(cls, dis: float, angle: float) -> Plane:
        return cls.from_dis_angle_trans(dis, angle, 0.0)

    @classmethod
    def from_dis_angle_trans(cls, dis: float, angle: float, trans: float) -> Plane:
        """Vertical plane with normal at ``angle`` and offset ``dis``."""
        param = np.array([math.sin(angle), -math.cos(angle), 0.0, -dis])
        return cls(param, dual_dis=trans)

    def distance_to_point(self, point, keep_sign: bool = False) -> float:
        x = np.asarray(point, dtype=float).reshape(3)
        p = self.param
        value = float(p[:3] @ x + p[3]) / float(np.linalg.norm(p[:3]))
        return value if keep_sign else abs(value)

    def transform(self, twc: SE3Quat) -> None:
        """Move the plane from camera to world coordinates in place."""
        t = twc.to_homogeneous_matrix()
        self.param = np.linalg.inv(t.T) @ self.param

    def init_finite_plane(self, center, size: float) -> None:
        self.center = np.asarray(center, dtype=float).reshape(3).copy()
        self.size = float(size)
        self.limited = True


def line_from_center_angle(center, angle: float) -> np.ndarray:
    """Line (A, B, C) through ``center`` with direction ``angle``."""
    c = np.asarray(center, dtype=float).reshape(2)
    s, co = math.sin(angle), math.cos(angle)
    return np.array([s, -co, co * c[1] - s * c[0]])


def line_to_plane(line) -> np.ndarray:
    """Vertical plane (A, B, 0, C) through a line (A, B, C) of the XY plane."""
    l = np.asarray(line, dtype=float).reshape(3)
    return np.array([l[0], l[1], 0.0, l[2]])
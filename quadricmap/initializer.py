"""Ellipsoid initialization from bounding boxes seen by several cameras."""

from __future__ import annotations

import numpy as np

from .ellipsoid import Ellipsoid, projection_matrix
from .se3 import SE3Quat, rot_to_euler_zyx


class InitializationError(Exception):
    """Raised when no ellipsoid can be recovered from the observations."""


def planes_to_vectors(planes) -> np.ndarray:
    """10xN quadric constraint vectors for the columns of a 4xN plane matrix."""
    pl = np.asarray(planes, dtype=float).reshape(4, -1)
    p0, p1, p2, p3 = pl
    return np.vstack(
        [
            p0 * p0,
            2 * p0 * p1,
            2 * p0 * p2,
            2 * p0 * p3,
            p1 * p1,
            2 * p1 * p2,
            2 * p1 * p3,
            p2 * p2,
            2 * p2 * p3,
            p3 * p3,
        ]
    )


def qstar_from_vectors(plane_vectors) -> np.ndarray:
    """Dual quadric solving the plane constraints in the least-squares sense."""
    a = np.asarray(plane_vectors, dtype=float).reshape(10, -1).T
    _, _, vh = np.linalg.svd(a, full_matrices=False)
    q = vh[-1]
    return np.array(
        [
            [q[0], q[1], q[2], q[3]],
            [q[1], q[4], q[5], q[6]],
            [q[2], q[5], q[7], q[8]],
            [q[3], q[6], q[8], q[9]],
        ]
    )


def ellipsoid_from_qstar(qstar) -> Ellipsoid:
    """Ellipsoid described by a dual quadric; raises if it is not an ellipsoid."""
    qstar = np.asarray(qstar, dtype=float).reshape(4, 4)
    q = np.linalg.inv(qstar) * np.cbrt(np.linalg.det(qstar))

    eigens = np.linalg.eigvalsh(q)
    num_pos = int(np.sum(eigens > 0))
    num_neg = int(np.sum(eigens < 0))
    if (num_pos, num_neg) not in ((3, 1), (1, 3)):
        raise InitializationError(
            f"not an ellipsoid: {num_pos} positive / {num_neg} negative eigenvalues"
        )

    if eigens[3] > 0:
        q = -q
        eigens = np.linalg.eigvalsh(q)

    lambdas = 1.0 / eigens[:3]
    q33 = q[:3, :3]
    k = np.linalg.det(q) / np.linalg.det(q33)
    scale = np.sqrt(np.abs(-k * lambdas))

    t = qstar[:, 3] / qstar[3, 3]
    _, rot = np.linalg.eigh(q33)
    roll, pitch, yaw = rot_to_euler_zyx(rot)

    return Ellipsoid.from_minimal_vector(
        [t[0], t[1], t[2], roll, pitch, yaw, scale[0], scale[1], scale[2]]
    )


def sort_eigen_values(eigens, vectors) -> tuple[np.ndarray, np.ndarray]:
    """Eigenvalues (by real part, descending, imaginary parts dropped) and matching vectors."""
    values = np.asarray(eigens)
    vecs = np.asarray(vectors)
    real = np.real(values)
    order = sorted(range(len(real)), key=lambda i: real[i], reverse=True)
    new_values = np.array([complex(real[i], 0.0) for i in order])
    new_vectors = np.asarray(vecs[:, order], dtype=complex)
    return new_values, new_vectors


def observations_to_matrices(observations) -> tuple[np.ndarray, np.ndarray]:
    """Pose rows (x y z qx qy qz qw) and detection rows (x1 y1 x2 y2 rate)."""
    pose_rows = [ob.frame.cam_pose_twc.to_vector() for ob in observations]
    det_rows = [
        np.append(np.asarray(ob.bbox, dtype=float).reshape(4), float(ob.rate))
        for ob in observations
    ]
    pose_mat = np.array(pose_rows, dtype=float).reshape(-1, 7)
    detection_mat = np.array(det_rows, dtype=float).reshape(-1, 5)
    return pose_mat, detection_mat


class Initializer:
    """Fits an ellipsoid to the planes tangent to it through observed box edges."""

    MIN_PLANES = 9

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = rows
        self.cols = cols

    def initialize_quadric(self, pose_mat, detection_mat, calib) -> Ellipsoid:
        planes = self.planes_homo(pose_mat, detection_mat, calib)
        if planes.shape[1] < self.MIN_PLANES:
            raise InitializationError(
                f"{planes.shape[1]} valid planes, at least {self.MIN_PLANES} are needed"
            )
        qstar = qstar_from_vectors(planes_to_vectors(planes))
        e = ellipsoid_from_qstar(qstar)
        e.set_color(np.array([0.0, 0.0, 255.0]))
        return e

    def planes_homo(self, pose_mat, detection_mat, calib) -> np.ndarray:
        """4xN back-projected planes of every valid box edge."""
        poses = np.asarray(pose_mat, dtype=float)
        detections = np.asarray(detection_mat, dtype=float)
        if poses.ndim != 2 or detections.ndim != 2 or poses.shape[0] != detections.shape[0]:
            raise ValueError("pose and detection matrices must have the same number of rows")
        if poses.shape[0] <= 2:
            raise ValueError("at least 3 measurements are required")

        blocks = [np.zeros((4, 0))]
        for pose, detection in zip(poses, detections):
            if np.all(detection[:4] < 1):
                continue
            campose_wc = SE3Quat.from_vector(pose[-7:])
            p = projection_matrix(campose_wc.inverse(), calib)
            blocks.append(p.T @ self.lines_from_detection(detection))
        return np.hstack(blocks)

    def lines_from_detection(self, detection) -> np.ndarray:
        """3xK image lines of the box edges that lie strictly inside the image."""
        x1, y1, x2, y2 = (float(v) for v in np.asarray(detection, dtype=float)[:4])
        candidates = (
            ((1.0, 0.0, -x1), 0 < x1 < self.cols - 1),
            ((0.0, 1.0, -y1), 0 < y1 < self.rows - 1),
            ((1.0, 0.0, -x2), 0 < x2 < self.cols - 1),
            ((0.0, 1.0, -y2), 0 < y2 < self.rows - 1),
        )
        lines = [line for line, valid in candidates if valid]
        if not lines:
            return np.zeros((3, 0))
        return np.array(lines, dtype=float).T

    def quadric_error_with_planes(self, pose_mat, detection_mat, calib, e: Ellipsoid) -> float:
        """Sum of squared tangency residuals of the planes against ``e``."""
        q = e.generate_quadric()
        qj_hat = np.array(
            [q[0, 0], q[0, 1], q[0, 2], q[0, 3], q[1, 1], q[1, 2], q[1, 3], q[2, 2], q[2, 3], q[3, 3]]
        )
        vectors = planes_to_vectors(self.planes_homo(pose_mat, detection_mat, calib))
        result = vectors.T @ qj_hat
        return float(result @ result)

    def initialize_from_observations(self, observations, calib) -> Ellipsoid:
        observations = list(observations)
        pose_mat, detection_mat = observations_to_matrices(observations)
        e = self.initialize_quadric(pose_mat, detection_mat, calib)
        e.label = observations[0].label
        return e
"""Point clouds from depth images and their rigid transformation."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .se3 import SE3Quat, homo_to_real, real_to_homo


@dataclass
class PointXYZRGB:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    r: int = 0
    g: int = 0
    b: int = 0
    size: int = 1


@dataclass
class CameraIntrinsic:
    fx: float
    fy: float
    cx: float
    cy: float
    scale: float


def get_point_cloud(depth, rgb, camera: CameraIntrinsic) -> list[PointXYZRGB]:
    """Back-project every depth pixel within 0.1-100 m, coloured from a BGR image."""
    depth = np.asarray(depth)
    rgb = np.asarray(rgb)
    if rgb.shape[:2] != depth.shape[:2]:
        raise ValueError("depth and rgb images differ in size")
    z = depth.astype(float) / camera.scale
    ys, xs = np.nonzero((z > 0.1) & (z <= 100))
    cloud = []
    for y, x in zip(ys.tolist(), xs.tolist()):
        zz = float(z[y, x])
        b, g, r = (int(c) for c in rgb[y, x, :3])
        cloud.append(
            PointXYZRGB(
                (x - camera.cx) * zz / camera.fx,
                (y - camera.cy) * zz / camera.fy,
                zz,
                r,
                g,
                b,
                1,
            )
        )
    return cloud


def transform_point(point, transform) -> np.ndarray:
    """Apply a 4x4 homogeneous transform to a 3D point."""
    return homo_to_real(np.asarray(transform, dtype=float) @ real_to_homo(point))


def transform_point_cloud(points, pose_wc: SE3Quat) -> list[PointXYZRGB]:
    """A transformed copy of the cloud."""
    twc = pose_wc.to_homogeneous_matrix()
    result = []
    for p in points:
        x, y, z = transform_point((p.x, p.y, p.z), twc)
        result.append(dataclasses.replace(p, x=float(x), y=float(y), z=float(z)))
    return result


def transform_point_cloud_in_place(points, pose_wc: SE3Quat) -> None:
    twc = pose_wc.to_homogeneous_matrix()
    for p in points:
        x, y, z = transform_point((p.x, p.y, p.z), twc)
        p.x, p.y, p.z = float(x), float(y), float(z)


def load_points(mat) -> list[PointXYZRGB]:
    """Points from the first three columns of each row, green and size 10."""
    rows = np.asarray(mat, dtype=float)
    return [PointXYZRGB(float(r[0]), float(r[1]), float(r[2]), 0, 255, 0, 10) for r in rows]


def set_point_cloud_property(cloud, r: int, g: int, b: int, size: int) -> None:
    if cloud is None:
        return
    for p in cloud:
        p.r, p.g, p.b, p.size = r, g, b, size


def calib_from_camera(camera: CameraIntrinsic) -> np.ndarray:
    return np.array(
        [[camera.fx, 0.0, camera.cx], [0.0, camera.fy, camera.cy], [0.0, 0.0, 1.0]]
    )


def save_point_cloud_txt(path, cloud) -> None:
    """Write one "x y z" line per point."""
    lines = (f"{p.x!r} {p.y!r} {p.z!r}\n" for p in cloud)
    Path(path).write_text("".join(lines), encoding="utf-8")


def point_cloud_center(cloud) -> np.ndarray:
    if not cloud:
        raise ValueError("center of an empty point cloud is undefined")
    return np.array([[p.x, p.y, p.z] for p in cloud], dtype=float).mean(axis=0)
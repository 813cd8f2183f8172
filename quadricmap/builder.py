"""Dense colour point clouds built from RGB-D frames and known camera poses.

Clouds are float arrays of shape (N, 6) holding x, y, z, r, g, b.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from .se3 import SE3Quat


def _empty_cloud() -> np.ndarray:
    return np.zeros((0, 6))


class DenseBuilder:
    """Accumulates back-projected frames into a global map."""

    def __init__(self) -> None:
        self.calib: np.ndarray | None = None
        self.scale = 1.0
        self.map = _empty_cloud()
        self.current_map = _empty_cloud()

    @property
    def initialized(self) -> bool:
        return self.calib is not None

    def set_camera_intrinsic(self, calib, scale: float) -> None:
        self.calib = np.asarray(calib, dtype=float).reshape(3, 3).copy()
        self.scale = float(scale)

    def image_to_point_cloud(self, rgb, depth, depth_thresh: float = 1000) -> np.ndarray:
        """Camera-frame cloud of pixels with depth in [0.5, depth_thresh] m; ``rgb`` is BGR."""
        if not self.initialized:
            raise RuntimeError("camera intrinsics are not set")
        depth = np.asarray(depth)
        rgb = np.asarray(rgb)
        if rgb.shape[:2] != depth.shape[:2]:
            raise ValueError("depth and rgb images differ in size")
        fx, fy = self.calib[0, 0], self.calib[1, 1]
        cx, cy = self.calib[0, 2], self.calib[1, 2]

        z = depth.astype(float) / self.scale
        mask = (depth != 0) & (z >= 0.5) & (z <= depth_thresh)
        rows, cols = np.nonzero(mask)
        zz = z[rows, cols]
        colors = rgb[rows, cols, :3].astype(float)
        return np.column_stack(
            [
                (cols - cx) * zz / fx,
                (rows - cy) * zz / fy,
                zz,
                colors[:, 2],
                colors[:, 1],
                colors[:, 0],
            ]
        ).reshape(-1, 6)

    def process_frame(self, rgb, depth, pose, depth_thresh: float = 1000) -> None:
        """Add a frame seen from camera pose ``pose`` (Twc as x y z qx qy qz qw)."""
        local = self.image_to_point_cloud(rgb, depth, depth_thresh)
        pose_vec = np.asarray(pose, dtype=float).reshape(-1)
        if pose_vec.size < 7:
            raise ValueError("pose needs at least 7 values: x y z qx qy qz qw")
        twc = SE3Quat.from_vector(pose_vec[-7:]).to_homogeneous_matrix()
        world = local.copy()
        world[:, :3] = local[:, :3] @ twc[:3, :3].T + twc[:3, 3]
        self.current_map = world
        self.map = np.vstack([self.map, world])

    def save_map(self, path) -> None:
        """Write the map as an ASCII PCD file; nothing is written for an empty map."""
        n = self.map.shape[0]
        if n < 1:
            return
        header = (
            "# .PCD v0.7 - Point Cloud Data file format\n"
            "VERSION 0.7\n"
            "FIELDS x y z rgb\n"
            "SIZE 4 4 4 4\n"
            "TYPE F F F U\n"
            "COUNT 1 1 1 1\n"
            f"WIDTH {n}\n"
            "HEIGHT 1\n"
            "VIEWPOINT 0 0 0 1 0 0 0\n"
            f"POINTS {n}\n"
            "DATA ascii\n"
        )
        colors = np.clip(self.map[:, 3:6], 0, 255).astype(np.uint32)
        packed = (colors[:, 0] << 16) | (colors[:, 1] << 8) | colors[:, 2]
        lines = (
            f"{x:g} {y:g} {z:g} {int(c)}\n"
            for (x, y, z), c in zip(self.map[:, :3].tolist(), packed.tolist())
        )
        Path(path).write_text(header + "".join(lines), encoding="ascii")

    def voxel_filter(self, grid_size: float) -> None:
        """Replace the points of each cubic voxel by their centroid."""
        if grid_size <= 0:
            raise ValueError("grid size must be positive")
        if self.map.shape[0] == 0:
            return
        cells = np.floor(self.map[:, :3] / grid_size).astype(np.int64)
        _, inverse, counts = np.unique(cells, axis=0, return_inverse=True, return_counts=True)
        inverse = inverse.reshape(-1)
        sums = np.zeros((counts.size, 6))
        np.add.at(sums, inverse, self.map)
        result = sums / counts[:, None]
        result[:, 3:] = np.floor(result[:, 3:])
        self.map = result
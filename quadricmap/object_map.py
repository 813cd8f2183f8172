"""The map: ellipsoids, planes, points, named point clouds and camera states."""

from __future__ import annotations

import enum
import threading
from typing import Any

from .ellipsoid import Ellipsoid
from .plane import Plane
from .se3 import SE3Quat


class CloudMerge(enum.Enum):
    """What to do when a named point cloud already exists."""

    REPLACE = 0
    APPEND = 1


class NameMatch(enum.Enum):
    """How names are matched when deleting named point clouds."""

    EXACT = 0
    PARTIAL = 1


class ObjectMap:
    """Thread-safe store of everything the system has mapped so far."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._points: dict[int, Any] = {}
        self._ellipsoids: list[Ellipsoid] = []
        self._visual: list[Ellipsoid] = []
        self._planes: dict[int, Plane] = {}
        self._camera_state: SE3Quat | None = SE3Quat()
        self._trajectory: list[SE3Quat] = []
        self._clouds: dict[str, list] = {}

    # ---- points

    def add_point(self, point) -> None:
        """Add a point; adding the same object twice keeps one copy."""
        with self._lock:
            self._points[id(point)] = point

    def add_point_cloud(self, cloud) -> None:
        with self._lock:
            for point in cloud:
                self._points[id(point)] = point

    def clear_point_cloud(self) -> None:
        with self._lock:
            self._points.clear()

    def points(self) -> list:
        with self._lock:
            return list(self._points.values())

    # ---- ellipsoids

    def add_ellipsoid(self, e: Ellipsoid) -> None:
        with self._lock:
            self._ellipsoids.append(e)

    def ellipsoids(self) -> list[Ellipsoid]:
        with self._lock:
            return list(self._ellipsoids)

    def ellipsoids_with_label(self, label: int) -> list[Ellipsoid]:
        with self._lock:
            return [e for e in self._ellipsoids if e.label == label]

    def ellipsoids_by_instance(self) -> dict[int, Ellipsoid]:
        """Ellipsoids keyed by instance id in ascending order; the first one wins."""
        with self._lock:
            result: dict[int, Ellipsoid] = {}
            for e in self._ellipsoids:
                result.setdefault(e.instance_id, e)
        return dict(sorted(result.items()))

    def add_visual_ellipsoid(self, e: Ellipsoid) -> None:
        with self._lock:
            self._visual.append(e)

    def visual_ellipsoids(self) -> list[Ellipsoid]:
        with self._lock:
            return list(self._visual)

    def clear_visual_ellipsoids(self) -> None:
        with self._lock:
            self._visual.clear()

    # ---- planes

    def add_plane(self, plane: Plane) -> None:
        with self._lock:
            self._planes[id(plane)] = plane

    def planes(self) -> list[Plane]:
        with self._lock:
            return list(self._planes.values())

    def clear_planes(self) -> None:
        with self._lock:
            self._planes.clear()

    # ---- camera

    def set_camera_state(self, state: SE3Quat | None) -> None:
        with self._lock:
            self._camera_state = state

    def camera_state(self) -> SE3Quat | None:
        with self._lock:
            return self._camera_state

    def add_camera_state_to_trajectory(self, state: SE3Quat) -> None:
        with self._lock:
            self._trajectory.append(state)

    def trajectory(self) -> list[SE3Quat]:
        with self._lock:
            return list(self._trajectory)

    # ---- named point clouds

    def add_point_cloud_list(self, name: str, cloud: list, merge: CloudMerge = CloudMerge.REPLACE) -> bool:
        """Store a named cloud; returns False if the name already existed."""
        with self._lock:
            existing = self._clouds.get(name)
            if existing is None:
                self._clouds[name] = cloud
                return True
            if merge is CloudMerge.REPLACE:
                if existing is not cloud:
                    existing.clear()
                self._clouds[name] = cloud
            else:
                existing.extend(list(cloud))
            return False

    def delete_point_cloud_list(self, name: str, match: NameMatch = NameMatch.EXACT) -> bool:
        """Delete clouds by name.

        With an exact match a missing name raises KeyError; with a partial
        match every cloud whose name contains ``name`` goes, and the result
        tells whether any did.
        """
        with self._lock:
            if match is NameMatch.EXACT:
                if name not in self._clouds:
                    raise KeyError(f"point cloud {name!r} does not exist")
                del self._clouds[name]
                return True
            doomed = [key for key in self._clouds if name in key]
            for key in doomed:
                del self._clouds[key]
            return bool(doomed)

    def clear_point_cloud_lists(self) -> None:
        with self._lock:
            self._clouds.clear()

    def point_cloud_lists(self) -> dict[str, list]:
        """The named clouds, ordered by name."""
        with self._lock:
            return dict(sorted(self._clouds.items()))
"""Association of single-frame ellipsoid estimates with objects in the map."""

from __future__ import annotations

import numpy as np

from .object_map import ObjectMap

# The smallest cost must be below this for an association to count.
DISTANCE_THRESHOLD = 1.0
_TAKEN = 999.0


class DataAssociationSolver:
    """Greedy nearest-center association; unmatched observations get new instances."""

    def __init__(self, object_map: ObjectMap) -> None:
        self.object_map = object_map
        self.instance_count = 0

    def solve(self, frame) -> list[int]:
        """One association per detection row of ``frame``; -1 where no 3D estimate exists."""
        num_obs = frame.observations.shape[0]
        objects = list(self.object_map.ellipsoids_by_instance().values())
        local = list(frame.local_objects)

        associations = [-1] * num_obs
        valid = {
            i: local[i] for i in range(num_obs) if i < len(local) and local[i] is not None
        }
        if not valid:
            return associations

        cost = np.zeros((len(valid), len(objects)))
        for row, obj in enumerate(valid.values()):
            center = obj.transform_from(frame.cam_pose_twc).pose.translation
            for col, mapped in enumerate(objects):
                cost[row, col] = np.linalg.norm(mapped.pose.translation - center)

        for index, assoc in zip(valid, self.solve_cost_matrix(cost)):
            associations[index] = assoc
        return associations

    def solve_cost_matrix(self, cost) -> list[int]:
        """Give each row its cheapest free column, or a new instance if none is close enough."""
        mat = np.array(cost, dtype=float, copy=True)
        if mat.ndim != 2:
            raise ValueError("cost matrix must be two-dimensional")
        result = []
        for row in mat:
            if row.size < 1:
                result.append(self.create_instance())
                continue
            index = int(np.argmin(row))
            if row[index] < DISTANCE_THRESHOLD:
                result.append(index)
                mat[:, index] = _TAKEN
            else:
                result.append(self.create_instance())
        return result

    def create_instance(self) -> int:
        instance = self.instance_count
        self.instance_count += 1
        return instance
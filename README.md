# quadricmap

Object-level mapping with ellipsoids. Objects in a scene are modelled as
ellipsoids (dual quadrics) and estimated from camera poses, 2D bounding-box
detections and depth images.

## Modules

- `quadricmap.se3` – rigid transforms (`SE3Quat`, with composition by `*`,
  `inverse`, `exp`/`log` maps, homogeneous matrices), quaternion and Euler
  helpers (`zyx_euler_to_quat`, `quat_to_euler_zyx`, `rot_to_euler_zyx`,
  `quat_to_rotation`, `rotation_to_quat`) and homogeneous coordinates
  (`real_to_homo`, `homo_to_real`). Quaternions are ordered (x, y, z, w);
  pose vectors are (tx, ty, tz, qx, qy, qz, qw).
- `quadricmap.ellipsoid` – the `Ellipsoid` model: minimal vector
  (x, y, z, roll, pitch, yaw, a, b, c) and full vector forms, exponential
  updates, 9-DoF log errors (including the smallest over yaw-equivalent
  descriptions), transforms between camera and world, projection into an
  image as an ellipse, a bounding box, box corners or a rectangle, and
  `intersection_error`, one minus the IoU of the circumscribed boxes.
- `quadricmap.initializer` – `Initializer` fits an ellipsoid to the planes
  back-projected from box edges in several views, solving for the dual
  quadric with SVD. It raises `InitializationError` when fewer than nine
  valid planes are available or the result is not an ellipsoid.
- `quadricmap.plane` – `Plane` (coefficients of Ax + By + Cz + D = 0) with
  construction from a point and normal or from distance and angle, point
  distance, transformation to world coordinates and a finite extent; plus
  `line_from_center_angle` and `line_to_plane`.
- `quadricmap.polygon` – a small polygon toolkit: `Polygon` (at most 64
  vertices), area, point-in-polygon, segment intersection, convex
  intersection (`intersect_polygon`) and Sutherland–Hodgman clipping
  (`intersect_polygon_shpc`).
- `quadricmap.geometry` – `PointXYZRGB` and `CameraIntrinsic`, point clouds
  from depth and BGR images, cloud transforms, centre, colouring and saving
  as "x y z" text.
- `quadricmap.frame` – `Frame` (timestamp, camera pose, detection matrix
  with rows id, x1, y1, x2, y2, label, rate, instance), `Observation` and
  `Observation3D`.
- `quadricmap.object_map` – `ObjectMap`, a thread-safe store of ellipsoids,
  visual ellipsoids, planes, points, named point clouds (`CloudMerge`,
  `NameMatch`) and camera states.
- `quadricmap.data_association` – `DataAssociationSolver`, greedy
  nearest-centre association of single-frame estimates with mapped objects;
  unmatched observations receive new instance ids.
- `quadricmap.edges` – error terms between camera poses and ellipsoids:
  3D ellipsoid observations, projected bounding boxes and a gravity prior,
  plus text formatting and parsing of an ellipsoid's minimal vector.
- `quadricmap.builder` – `DenseBuilder` accumulates coloured clouds from
  RGB-D frames with known poses, down-samples them on a voxel grid and saves
  them as ASCII PCD files.
- `quadricmap.config` – `Config` and `load_settings`: YAML settings (matrix
  nodes become numpy arrays) together with runtime numeric overrides.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Quick start

```python
import numpy as np
from quadricmap.ellipsoid import Ellipsoid
from quadricmap.se3 import SE3Quat

# x y z roll pitch yaw a b c
e = Ellipsoid.from_minimal_vector([0.0, 0.0, 3.0, 0.0, 0.0, 0.0, 0.5, 0.3, 0.2])

# camera pose as x y z qx qy qz qw
campose_cw = SE3Quat.from_vector([0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0])
calib = np.array([[500.0, 0.0, 320.0],
                  [0.0, 500.0, 240.0],
                  [0.0, 0.0, 1.0]])

if e.is_observable(campose_cw):
    x1, y1, x2, y2 = e.bounding_box_from_projection(campose_cw, calib)
```

Move an ellipsoid observed in camera coordinates into the world frame with
`Ellipsoid.transform_from(twc)`, and back with `Ellipsoid.transform_to(twc)`.

## Initialising an object from detections

```python
from quadricmap.initializer import InitializationError, Initializer

init = Initializer(rows=480, cols=640)
# pose_mat: one row per view, the last 7 columns are x y z qx qy qz qw (camera to world)
# detection_mat: one row per view, x1 y1 x2 y2 [score]
try:
    e = init.initialize_quadric(pose_mat, detection_mat, calib)
except InitializationError as err:
    print(err)
```

At least three views are required. Box edges that do not lie strictly inside
the image are dropped, and rows whose four coordinates are all below 1 are
skipped. `Initializer.initialize_from_observations` does the same from a list
of `Observation` objects and copies the first one's label.

## Polygons

```python
from quadricmap.polygon import Polygon, intersect_polygon

a = Polygon([(0, 0), (2, 0), (2, 2), (0, 2)])
b = Polygon([(1, 1), (3, 1), (3, 3), (1, 3)])

overlap = intersect_polygon(a, b)
print(overlap.area())   # 1.0
```

## Settings

Settings come from a YAML file; values set at runtime take precedence:

```python
from quadricmap.config import Config

config = Config.with_defaults()
config.set_parameter_file("settings.yaml")
config.set_value("EllipsoidExtractor_DEPTH_RANGE", 4)
depth_range = config.read_value("EllipsoidExtractor_DEPTH_RANGE", 6)   # 4.0
fx = config.get("Camera.fx")   # KeyError if the file has no such key
```

## What the package does not do

quadricmap is a library of building blocks. It has no command-line program,
no viewer or drawing of the map, and no dataset loader. It provides the error
terms for an object graph (`quadricmap.edges`) but no graph optimizer, and it
does not run a tracking loop that ties frames, association, initialization
and optimization together. Ground-plane detection and single-frame ellipsoid
extraction from depth images are not included; `Frame.local_objects` is
filled by the caller.
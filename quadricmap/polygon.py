"""Planar polygons: area, containment, ordering and intersection."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence

Point = tuple[float, float]

MAX_POINTS = 64


def _as_point(p: Sequence[float]) -> Point:
    return (float(p[0]), float(p[1]))


def _as_points(poly: Iterable[Sequence[float]]) -> list[Point]:
    return [_as_point(p) for p in poly]


def dist_point(v: Sequence[float], w: Sequence[float]) -> float:
    """Euclidean distance between two points."""
    return math.hypot(v[0] - w[0], v[1] - w[1])


def segment_intersection(p0, p1, p2, p3) -> Point | None:
    """Intersection of segments p0-p1 and p2-p3, or None if they do not meet."""
    s10_x = p1[0] - p0[0]
    s10_y = p1[1] - p0[1]
    s32_x = p3[0] - p2[0]
    s32_y = p3[1] - p2[1]
    denom = s10_x * s32_y - s32_x * s10_y
    if denom == 0:
        return None

    denom_positive = denom > 0
    s02_x = p0[0] - p2[0]
    s02_y = p0[1] - p2[1]

    s_numer = s10_x * s02_y - s10_y * s02_x
    if (s_numer < 0) == denom_positive:
        return None

    t_numer = s32_x * s02_y - s32_y * s02_x
    if (t_numer < 0) == denom_positive:
        return None

    if (s_numer > denom) == denom_positive or (t_numer > denom) == denom_positive:
        return None

    t = t_numer / denom
    return (p0[0] + t * s10_x, p0[1] + t * s10_y)


def point_in_polygon(p: Sequence[float], points: Sequence[Sequence[float]]) -> bool:
    """Crossing-number test of whether ``p`` lies inside the polygon."""
    pts = _as_points(points)
    px, py = p[0], p[1]
    inside = False
    for (xi, yi), (xj, yj) in zip(pts, pts[-1:] + pts[:-1]):
        if (yi >= py) != (yj >= py) and px <= (xj - xi) * (py - yi) / (yj - yi) + xi:
            inside = not inside
    return inside


def compute_area(points: Sequence[Sequence[float]]) -> float:
    """Absolute area enclosed by the points taken in order."""
    pts = _as_points(points)
    twice = sum(a[0] * b[1] - a[1] * b[0] for a, b in zip(pts, pts[1:] + pts[:1]))
    return 0.5 * abs(twice)


class Polygon:
    """A polygon of at most MAX_POINTS vertices; extra vertices are ignored."""

    def __init__(self, points: Iterable[Sequence[float]] = ()) -> None:
        self._points: list[Point] = []
        for p in points:
            self.add(p)

    def add(self, p: Sequence[float]) -> None:
        if len(self._points) < MAX_POINTS:
            self._points.append(_as_point(p))

    def clear(self) -> None:
        self._points.clear()

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __getitem__(self, index: int) -> Point:
        return self._points[index]

    def __repr__(self) -> str:
        return f"Polygon({self._points!r})"

    def center(self) -> Point:
        """Mean of the vertices."""
        if not self._points:
            raise ValueError("center of an empty polygon is undefined")
        n = len(self._points)
        return (
            sum(p[0] for p in self._points) / n,
            sum(p[1] for p in self._points) / n,
        )

    def order_points(self) -> None:
        """Sort the vertices by their angle around the center."""
        if not self._points:
            return
        cx, cy = self.center()
        self._points.sort(key=lambda p: math.atan2(p[1] - cy, p[0] - cx))

    def area(self) -> float:
        return compute_area(self._points)

    def contains(self, p: Sequence[float]) -> bool:
        return point_in_polygon(p, self._points)


def intersect_polygon(poly0, poly1) -> Polygon:
    """Intersection of two convex polygons, vertices ordered by angle."""
    pts0 = _as_points(poly0)
    pts1 = _as_points(poly1)
    inter = Polygon()
    for p in pts0:
        if point_in_polygon(p, pts1):
            inter.add(p)
    for p in pts1:
        if point_in_polygon(p, pts0):
            inter.add(p)
    for a, b in zip(pts0, pts0[1:] + pts0[:1]):
        for c, d in zip(pts1, pts1[1:] + pts1[:1]):
            hit = segment_intersection(a, b, c, d)
            if hit is not None:
                inter.add(hit)
    inter.order_points()
    return inter


# Sutherland-Hodgman polygon clipping, on integer-truncated cross products.

def _cross(a: Point, b: Point) -> int:
    return int(a[0] * b[1] - a[1] * b[0])


def _sub(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])


def _line_sect(x0: Point, x1: Point, y0: Point, y1: Point) -> Point | None:
    dx = _sub(x1, x0)
    dy = _sub(y1, y0)
    d = _sub(x0, y0)
    dyx = float(_cross(dy, dx))
    if not dyx:
        return None
    dyx = _cross(d, dx) / dyx
    if dyx <= 0 or dyx >= 1:
        return None
    return (float(int(y0[0] + dyx * dy[0])), float(int(y0[1] + dyx * dy[1])))


def _left_of(a: Point, b: Point, c: Point) -> int:
    x = _cross(_sub(b, a), _sub(c, b))
    return -1 if x < 0 else int(x > 0)


def _edge_clip(sub: Polygon, x0: Point, x1: Point, left: int) -> Polygon:
    res = Polygon()
    if len(sub) == 0:
        return res
    v0 = sub[-1]
    side0 = _left_of(x0, x1, v0)
    if side0 != -left:
        res.add(v0)
    last = len(sub) - 1
    for i, v1 in enumerate(sub):
        side1 = _left_of(x0, x1, v1)
        if side0 + side1 == 0 and side0:
            hit = _line_sect(x0, x1, v0, v1)
            if hit is not None:
                res.add(hit)
        if i == last:
            break
        if side1 != -left:
            res.add(v1)
        v0 = v1
        side0 = side1
    return res


def intersect_polygon_shpc(sub, clip) -> Polygon:
    """Clip ``sub`` by the convex polygon ``clip`` (Sutherland-Hodgman)."""
    sub_poly = sub if isinstance(sub, Polygon) else Polygon(sub)
    clip_pts = _as_points(clip)
    if len(clip_pts) < 3:
        raise ValueError("clip polygon needs at least three vertices")
    direction = _left_of(clip_pts[0], clip_pts[1], clip_pts[2])
    result = _edge_clip(sub_poly, clip_pts[-1], clip_pts[0], direction)
    for a, b in zip(clip_pts, clip_pts[1:]):
        if len(result) == 0:
            break
        result = _edge_clip(result, a, b, direction)
    return Polygon(result)
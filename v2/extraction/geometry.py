"""Sightline geometry for the darkness detector.

The detector asks one question many times: "does the segment from the
observer to this point cross that darkness area?" Areas come in two
shapes:

  * **Circles** (an emanation around a point). Tested in bulk with numpy:
    the squared distance from every circle centre to the segment is
    computed at once and compared against the squared radii.
  * **Polygons** (drawn templates, walls of darkness). Tested with shapely,
    which handles concave outlines and segments that start inside the
    area.

Also provides the target sample points: a token counts as reached if any
of its centre, corners or edge midpoints is, each pulled in from the
footprint edge by a small inset so that touching a neighbour's border does
not count.

Coordinates are map pixels with y pointing down.
"""

from __future__ import annotations

import numpy as np
from shapely.geometry import LineString
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon as ShapelyPolygon

from .entities import Point, Token

Vertices = list[tuple[float, float]]


def point_to_segment_distance_squared(
    px: float,
    py: float,
    x1: float,
    y1: float,
    x2: float,
    y2: float,
) -> float:
    """Squared distance from a point to a line segment.

    Projects the point onto the segment; if the projection falls outside,
    the nearer endpoint is used.
    """
    seg_len_sq = (x2 - x1) ** 2 + (y2 - y1) ** 2
    if seg_len_sq == 0:
        return (px - x1) ** 2 + (py - y1) ** 2

    t = ((px - x1) * (x2 - x1) + (py - y1) * (y2 - y1)) / seg_len_sq
    t = min(1.0, max(0.0, t))
    proj_x = x1 + t * (x2 - x1)
    proj_y = y1 + t * (y2 - y1)
    return (px - proj_x) ** 2 + (py - proj_y) ** 2


def segment_hits_circles(
    a: Point,
    b: Point,
    centers: np.ndarray,
    radii: np.ndarray,
) -> np.ndarray:
    """Boolean mask of the circles the segment ``a``-``b`` touches.

    ``centers`` is (N, 2), ``radii`` is (N,). A segment that starts or ends
    inside a circle counts as touching it.
    """
    if len(centers) == 0:
        return np.zeros(0, dtype=bool)
    dx = b.x - a.x
    dy = b.y - a.y
    seg_len_sq = dx * dx + dy * dy
    cx = centers[:, 0]
    cy = centers[:, 1]
    if seg_len_sq == 0:
        t = np.zeros(len(centers), dtype=np.float64)
    else:
        t = ((cx - a.x) * dx + (cy - a.y) * dy) / seg_len_sq
        t = np.clip(t, 0.0, 1.0)
    px = a.x + t * dx
    py = a.y + t * dy
    dist_sq = (cx - px) ** 2 + (cy - py) ** 2
    return dist_sq <= radii * radii


def segment_hits_polygon(a: Point, b: Point, vertices: Vertices) -> bool:
    """True if the segment crosses or lies inside the polygon."""
    if len(vertices) < 3:
        return False
    polygon = ShapelyPolygon(vertices)
    if not polygon.is_valid:
        polygon = polygon.buffer(0)
    if a.x == b.x and a.y == b.y:
        return polygon.covers(ShapelyPoint(a.x, a.y))
    return polygon.intersects(LineString([(a.x, a.y), (b.x, b.y)]))


def token_sample_points(token: Token, inset: float = 2.0) -> list[Point]:
    """Nine sample points: centre, four corners, four edge midpoints.

    Corners and edges are pulled in by ``inset`` pixels, clamped so a tiny
    footprint collapses onto its centre rather than inverting.
    """
    inset_x = min(inset, token.width / 2)
    inset_y = min(inset, token.height / 2)
    left = token.x + inset_x
    right = token.x + token.width - inset_x
    top = token.y + inset_y
    bottom = token.y + token.height - inset_y
    c = token.center
    z = token.elevation
    return [
        c,
        Point(left, top, z),
        Point(right, top, z),
        Point(right, bottom, z),
        Point(left, bottom, z),
        Point(c.x, top, z),
        Point(right, c.y, z),
        Point(c.x, bottom, z),
        Point(left, c.y, z),
    ]

"""Geometry bridge between geographic and Cartesian coordinates.

Coordinate convention (shared by every forward and inverse transform
in the package, change both or neither):

* ``phi = 90° - lat`` — latitude is measured from the +Y pole.
* ``theta = lng + 180°`` — longitude is offset by half a turn.
* ``x = -r sin(phi) cos(theta)``, ``y = r cos(phi)``,
  ``z = r sin(phi) sin(theta)``.

So ``(0°, 0°)`` maps to ``(r, 0, 0)`` and the north pole to ``(0, r, 0)``.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Tuple

import numpy as np

from .models import LatLng

Vec3 = Tuple[float, float, float]


def to_cartesian(lat: float, lng: float, radius: float = 1.0) -> Vec3:
    """Project ``(lat, lng)`` in degrees onto a sphere of *radius*."""
    phi = math.radians(90.0 - lat)
    theta = math.radians(lng + 180.0)
    x = -radius * math.sin(phi) * math.cos(theta)
    y = radius * math.cos(phi)
    z = radius * math.sin(phi) * math.sin(theta)
    return (x, y, z)


def wrap_longitude(lng: float) -> float:
    """Wrap *lng* into ``[-180, 180)``."""
    wrapped = (lng + 180.0) % 360.0 - 180.0
    # float modulo can land exactly on 180.0 for inputs just below -180
    return -180.0 if wrapped >= 180.0 else wrapped


def to_geographic(point: Sequence[float], radius: float = 1.0) -> LatLng:
    """Inverse of :func:`to_cartesian`.

    The point is normalised onto the unit sphere first, so the result
    does not depend on *radius* or on how far off the surface the
    point lies.  Raises ``ValueError`` for a zero-length point.
    """
    x, y, z = (float(c) for c in point)
    norm = math.sqrt(x * x + y * y + z * z)
    if norm == 0.0:
        raise ValueError("cannot convert the origin to geographic coordinates")
    nx, ny, nz = x / norm, y / norm, z / norm
    # atan2 form of 90 - acos(ny); stays accurate near the poles
    lat = math.degrees(math.atan2(ny, math.hypot(nx, nz)))
    lng = math.degrees(math.atan2(nz, -nx)) - 180.0
    return (lat, wrap_longitude(lng))


def angular_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle angle in radians between two points (law of cosines)."""
    p1 = math.radians(lat1)
    p2 = math.radians(lat2)
    dl = math.radians(lng2 - lng1)
    cos_d = math.sin(p1) * math.sin(p2) + math.cos(p1) * math.cos(p2) * math.cos(dl)
    return math.acos(max(-1.0, min(1.0, cos_d)))


def normalize(vector: Sequence[float]) -> np.ndarray:
    v = np.asarray(vector, dtype=np.float64)
    norm = np.linalg.norm(v)
    if norm == 0.0:
        raise ValueError("cannot normalise a zero-length vector")
    return v / norm


# ═══════════════════════════════════════════════════════════════════
# Vectorised helpers for mesh building
# ═══════════════════════════════════════════════════════════════════

def to_cartesian_array(latlngs: Iterable[LatLng], radius: float = 1.0) -> np.ndarray:
    """Vectorised :func:`to_cartesian`; returns an ``(N, 3)`` float array."""
    arr = np.asarray(list(latlngs), dtype=np.float64).reshape(-1, 2)
    phi = np.radians(90.0 - arr[:, 0])
    theta = np.radians(arr[:, 1] + 180.0)
    sin_phi = np.sin(phi)
    return np.column_stack((
        -radius * sin_phi * np.cos(theta),
        radius * np.cos(phi),
        radius * sin_phi * np.sin(theta),
    ))


def polygon_centroid(points: np.ndarray) -> np.ndarray:
    """Mean of the polygon vertices (not projected back onto the sphere)."""
    return np.asarray(points, dtype=np.float64).mean(axis=0)


def fan_triangles(points: np.ndarray) -> np.ndarray:
    """Fan-triangulate a convex polygon around its centroid.

    Returns a ``(3 * N, 3)`` array of triangle vertices, one triangle
    ``centre → p[i] → p[i + 1]`` per edge.
    """
    pts = np.asarray(points, dtype=np.float64)
    n = len(pts)
    if n < 3:
        raise ValueError("a polygon needs at least three vertices")
    center = polygon_centroid(pts)
    nxt = np.roll(pts, -1, axis=0)
    tris = np.empty((n, 3, 3), dtype=np.float64)
    tris[:, 0] = center
    tris[:, 1] = pts
    tris[:, 2] = nxt
    return tris.reshape(-1, 3)

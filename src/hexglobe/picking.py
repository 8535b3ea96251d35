"""Picking surface — one invisible sphere collider for the whole globe.

Pointer rays are tested against a single sphere sized just above the
highlight layers instead of one collider per visible cell, so a hit
test costs the same regardless of how many cells are on screen.  The
hit point is mapped back to a cell id through the geometry bridge and
the H3 adapter, then forwarded to the :class:`PointerInteractionMapper`.

A ray that misses the sphere yields ``None`` (no cell), which the
mapper treats as a pointer exit.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from . import h3_index
from .config import INTERACTION_MULTIPLIER
from .geometry import to_geographic
from .interactions import PointerInteractionMapper

Point = Optional[Sequence[float]]


class PickingSurface:
    """Sphere collider at ``radius * multiplier`` centred on the origin.

    Parameters
    ----------
    mapper : PointerInteractionMapper
        Receives the resolved cell ids.
    resolution : int
        H3 resolution cell ids are resolved at.
    radius : float
        Globe radius.
    multiplier : float
        Interaction-layer offset; must exceed the outline and fill
        multipliers so rays hit this surface first.
    """

    def __init__(
        self,
        mapper: PointerInteractionMapper,
        resolution: int,
        *,
        radius: float = 1.0,
        multiplier: float = INTERACTION_MULTIPLIER,
    ) -> None:
        self._mapper = mapper
        self.resolution = resolution
        self.radius = radius * multiplier

    # ── hit testing ─────────────────────────────────────────────────

    def intersect(self, origin: Sequence[float], direction: Sequence[float]) -> Optional[np.ndarray]:
        """Nearest intersection of the ray with the sphere, or *None*.

        Only hits in front of *origin* count.  If the origin is inside
        the sphere the exit point is returned.
        """
        o = np.asarray(origin, dtype=np.float64)
        d = np.asarray(direction, dtype=np.float64)
        d_norm = np.linalg.norm(d)
        if d_norm == 0.0:
            return None
        d = d / d_norm
        b = float(np.dot(o, d))
        c = float(np.dot(o, o)) - self.radius * self.radius
        disc = b * b - c
        if disc < 0.0:
            return None
        root = math.sqrt(disc)
        t = -b - root
        if t < 0.0:
            t = -b + root
        if t < 0.0:
            return None
        return o + t * d

    def cell_at(self, point: Point) -> Optional[str]:
        if point is None:
            return None
        lat, lng = to_geographic(point, self.radius)
        return h3_index.cell_index(lat, lng, self.resolution)

    # ── pointer callbacks ───────────────────────────────────────────

    def pointer_down(self, point: Point) -> Optional[str]:
        cell_id = self.cell_at(point)
        if cell_id is not None:
            self._mapper.on_select(cell_id, {"point": tuple(float(c) for c in point)})
        return cell_id

    def pointer_move(self, point: Point) -> Optional[str]:
        cell_id = self.cell_at(point)
        self._mapper.on_move(cell_id)
        return cell_id

    def pointer_leave(self) -> None:
        self._mapper.on_leave()

    def ray_down(self, origin: Sequence[float], direction: Sequence[float]) -> Optional[str]:
        return self.pointer_down(self.intersect(origin, direction))

    def ray_move(self, origin: Sequence[float], direction: Sequence[float]) -> Optional[str]:
        return self.pointer_move(self.intersect(origin, direction))

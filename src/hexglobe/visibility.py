"""Visible-region resolver — which H3 cells to materialise for a camera pose.

The camera orbits the globe and always looks at its centre, so the
point under the screen centre is the camera position projected onto
the sphere.  The cell under that point is the *centre cell*; the
visible set is every cell within enough rings of it to cover a
hemisphere plus a margin.

Recomputing is skipped while the centre cell does not change, so
sub-cell camera jitter never rebuilds geometry.

Usage
-----
>>> resolver = VisibleRegionResolver(IndexConfig())
>>> if resolver.update(camera_position, radius=1.0):
...     rebuild(resolver.visible_cells)
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from . import h3_index
from .config import IndexConfig
from .geometry import angular_distance, normalize, to_geographic
from .models import VisibleCell

log = logging.getLogger(__name__)


class DegenerateRingEstimate(RuntimeError):
    """No usable ring-1 neighbour to measure the angular step from."""


def camera_facing_point(camera_position: Sequence[float], radius: float) -> np.ndarray:
    """Point on the sphere directly between the camera and the origin."""
    return normalize(camera_position) * radius


def ring_count_for_coverage(
    step_deg: float,
    required_deg: float,
    min_rings: int,
    max_rings: int,
    min_step_deg: float,
) -> int:
    """Rings needed so ``rings * step`` covers *required_deg*, clamped.

    The step is floored at *min_step_deg* before dividing so a
    near-zero estimate cannot blow up the ring count.

    >>> ring_count_for_coverage(6.0, 98.0, 3, 40, 0.05)
    17
    """
    step = max(step_deg, min_step_deg)
    rings = math.ceil(required_deg / step)
    return max(min_rings, min(max_rings, rings))


def estimate_ring_step(center_cell_id: str) -> float:
    """Angular distance (radians) from *center_cell_id* to one neighbour.

    Raises :class:`DegenerateRingEstimate` when no neighbour can be
    found or measured.
    """
    try:
        nbrs = h3_index.neighbors(center_cell_id)
    except h3_index.InvalidIndexInput as exc:
        raise DegenerateRingEstimate(f"neighbour lookup failed for {center_cell_id}") from exc
    if not nbrs:
        raise DegenerateRingEstimate(f"{center_cell_id} has no neighbours")
    lat1, lng1 = h3_index.cell_center(center_cell_id)
    lat2, lng2 = h3_index.cell_center(nbrs[0])
    step = angular_distance(lat1, lng1, lat2, lng2)
    if not math.isfinite(step) or step <= 0.0:
        raise DegenerateRingEstimate(f"zero step between {center_cell_id} and {nbrs[0]}")
    return step


class VisibleRegionResolver:
    """Memoised camera → visible cell set resolver.

    Parameters
    ----------
    config : IndexConfig
        Grid resolution, ring clamps, hemisphere margin and step floor.
    """

    def __init__(self, config: IndexConfig) -> None:
        self._config = config
        self._center_cell_id: Optional[str] = None
        self._ring_count = 0
        self._visible: List[VisibleCell] = []

    # ── properties ──────────────────────────────────────────────────

    @property
    def config(self) -> IndexConfig:
        return self._config

    @property
    def center_cell_id(self) -> Optional[str]:
        return self._center_cell_id

    @property
    def ring_count(self) -> int:
        return self._ring_count

    @property
    def visible_cells(self) -> List[VisibleCell]:
        return list(self._visible)

    @property
    def visible_cell_ids(self) -> List[str]:
        return [cell.cell_id for cell in self._visible]

    # ── resolution ──────────────────────────────────────────────────

    def center_cell_for(self, camera_position: Sequence[float], radius: float) -> str:
        point = camera_facing_point(camera_position, radius)
        lat, lng = to_geographic(point, radius)
        return h3_index.cell_index(lat, lng, self._config.grid_resolution)

    def step_deg(self, center_cell_id: str) -> float:
        """Ring step in degrees, falling back to the resolution average."""
        try:
            step = estimate_ring_step(center_cell_id)
        except DegenerateRingEstimate as exc:
            step = h3_index.average_center_spacing_rad(self._config.grid_resolution)
            log.debug("ring step fallback for %s (%s): %.6f rad", center_cell_id, exc, step)
        return math.degrees(step)

    def update(self, camera_position: Sequence[float], radius: float) -> bool:
        """Refresh the visible set for a new camera pose.

        Returns *True* if the centre cell changed and the visible set
        was recomputed, *False* if the memoised set still applies.
        """
        center = self.center_cell_for(camera_position, radius)
        if center == self._center_cell_id:
            return False

        cfg = self._config
        rings = ring_count_for_coverage(
            self.step_deg(center),
            cfg.required_radius_deg,
            cfg.min_rings,
            cfg.max_rings,
            cfg.min_step_deg,
        )
        self._visible = [
            VisibleCell(cell_id=cid, boundary=h3_index.cell_boundary(cid))
            for cid in h3_index.disk(center, rings)
        ]
        self._center_cell_id = center
        self._ring_count = rings
        log.debug(
            "visible region: center=%s rings=%d cells=%d",
            center, rings, len(self._visible),
        )
        return True

    def reset(self) -> None:
        self._center_cell_id = None
        self._ring_count = 0
        self._visible = []

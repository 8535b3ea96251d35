"""H3 spatial index adapter.

Thin wrapper over the ``h3`` library (v4 API) that validates its
inputs and translates library failures into a single
:class:`InvalidIndexInput` error.  Everything here is pure and
deterministic; nothing retries.

Functions
---------
- :func:`cell_index` — lat/lng → cell id
- :func:`cell_boundary` — cell id → polygon vertices
- :func:`ring` / :func:`disk` — cells within *k* steps
- :func:`cell_resolution` — resolution of a cell id
- :func:`average_center_spacing_rad` — typical neighbour distance
"""

from __future__ import annotations

import math
from typing import FrozenSet, List, Tuple

import h3

from .config import H3_MAX_RESOLUTION
from .models import LatLng

# Authalic Earth radius used by H3 for its km/m metrics.
H3_EARTH_RADIUS_KM = 6371.007180918475


class InvalidIndexInput(ValueError):
    """Malformed cell id or out-of-range geographic/index argument."""


_H3_ERRORS: Tuple[type, ...] = (h3.H3BaseException, ValueError, TypeError)


def _check_resolution(resolution: int) -> None:
    if not isinstance(resolution, int) or isinstance(resolution, bool):
        raise InvalidIndexInput(f"resolution must be int, got {type(resolution).__name__}")
    if not 0 <= resolution <= H3_MAX_RESOLUTION:
        raise InvalidIndexInput(
            f"resolution must be in [0, {H3_MAX_RESOLUTION}], got {resolution}"
        )


def _check_cell(cell_id: str) -> None:
    if not is_valid_cell(cell_id):
        raise InvalidIndexInput(f"not a valid H3 cell id: {cell_id!r}")


def is_valid_cell(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return bool(h3.is_valid_cell(value))
    except _H3_ERRORS:
        return False


def cell_index(lat: float, lng: float, resolution: int) -> str:
    """Return the H3 cell containing ``(lat, lng)`` at *resolution*."""
    _check_resolution(resolution)
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidIndexInput(f"non-finite coordinates: ({lat}, {lng})")
    if not -90.0 <= lat <= 90.0:
        raise InvalidIndexInput(f"latitude out of range: {lat}")
    try:
        return h3.latlng_to_cell(lat, lng, resolution)
    except _H3_ERRORS as exc:
        raise InvalidIndexInput(f"cannot index ({lat}, {lng}) at res {resolution}") from exc


def cell_boundary(cell_id: str) -> Tuple[LatLng, ...]:
    """Polygon vertices of *cell_id* in H3 winding order.

    The first vertex is not repeated at the end.
    """
    _check_cell(cell_id)
    return tuple((float(lat), float(lng)) for lat, lng in h3.cell_to_boundary(cell_id))


def cell_center(cell_id: str) -> LatLng:
    _check_cell(cell_id)
    lat, lng = h3.cell_to_latlng(cell_id)
    return (float(lat), float(lng))


def cell_resolution(cell_id: str) -> int:
    _check_cell(cell_id)
    return int(h3.get_resolution(cell_id))


def disk(cell_id: str, k: int) -> List[str]:
    """Cells within *k* grid steps of *cell_id*, centre first.

    Order is deterministic for a given input; duplicates are dropped.
    """
    _check_cell(cell_id)
    if k < 0:
        raise InvalidIndexInput("k must be >= 0")
    if k == 0:
        return [cell_id]
    try:
        cells = h3.grid_disk(cell_id, k)
    except _H3_ERRORS as exc:
        raise InvalidIndexInput(f"grid_disk failed for {cell_id!r}, k={k}") from exc
    ordered = [cell_id]
    ordered.extend(c for c in cells if c != cell_id)
    return list(dict.fromkeys(ordered))


def ring(cell_id: str, k: int) -> FrozenSet[str]:
    """Set of all cells within *k* steps, inclusive of the centre."""
    return frozenset(disk(cell_id, k))


def neighbors(cell_id: str) -> List[str]:
    """Immediate neighbours (ring 1 without the centre)."""
    return disk(cell_id, 1)[1:]


def average_center_spacing_rad(resolution: int) -> float:
    """Mean angular distance between neighbouring cell centres.

    Neighbouring hexagon centres sit ``sqrt(3) * edge`` apart; H3
    publishes the average edge length per resolution.
    """
    _check_resolution(resolution)
    edge_km = h3.average_hexagon_edge_length(resolution, unit="km")
    return math.sqrt(3.0) * edge_km / H3_EARTH_RADIUS_KM

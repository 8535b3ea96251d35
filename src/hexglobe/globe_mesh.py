"""Cell geometry builder — outline and fill buffers for visible cells.

Converts :class:`~hexglobe.models.VisibleCell` boundaries into numpy
vertex buffers ready for a renderer:

* every visible cell gets a closed outline loop at
  ``radius * offsets.outline``;
* only highlighted cells (colour other than the palette default) get a
  fan-triangulated fill at ``radius * offsets.fill``.

Fills are the expensive part and only a handful of cells are ever
highlighted at once, so they are built on demand and cached.

Functions
---------
- :func:`resolve_cell_color` — colour precedence for one cell
- :func:`build_outline` — closed outline loop
- :func:`build_fill` — triangle-fan fill patch
- :class:`CellGeometryBuilder` — cached builder for a whole visible set
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .config import CellPalette, RenderOffsets
from .geometry import fan_triangles, to_cartesian_array
from .models import CellVisualState, LatLng, StoreSnapshot, VisibleCell


# ═══════════════════════════════════════════════════════════════════
# Colour resolution
# ═══════════════════════════════════════════════════════════════════

def resolve_cell_color(
    cell_id: str,
    snapshot: StoreSnapshot,
    palette: CellPalette,
) -> str:
    """Colour for *cell_id*, highest precedence first.

    1. the selected cell → ``palette.selected``
    2. the hovered cell → ``palette.hovered``
    3. the stored record state → matching state colour
    4. otherwise ``palette.default``
    """
    if cell_id == snapshot.selected_cell_id:
        return palette.selected
    if cell_id == snapshot.hovered_cell_id:
        return palette.hovered
    record = snapshot.cells.get(cell_id)
    if record is None:
        return palette.default
    return {
        CellVisualState.SELECTED: palette.selected,
        CellVisualState.HOVERED: palette.hovered,
        CellVisualState.OWNED: palette.owned,
        CellVisualState.FOREIGN: palette.foreign,
    }.get(record.state, palette.default)


def hex_to_rgb(colour: str) -> Tuple[float, float, float]:
    """``"#rrggbb"`` → ``(r, g, b)`` floats in ``[0, 1]``."""
    value = int(colour.lstrip("#"), 16)
    return (
        ((value >> 16) & 0xFF) / 255.0,
        ((value >> 8) & 0xFF) / 255.0,
        (value & 0xFF) / 255.0,
    )


# ═══════════════════════════════════════════════════════════════════
# Geometry
# ═══════════════════════════════════════════════════════════════════

def build_outline(boundary: Sequence[LatLng], radius: float) -> np.ndarray:
    """Closed loop ``(N + 1, 3)``: the first vertex repeated at the end."""
    pts = to_cartesian_array(boundary, radius)
    return np.vstack((pts, pts[:1]))


def build_fill(boundary: Sequence[LatLng], radius: float) -> np.ndarray:
    """Triangle list ``(3 N, 3)`` fanned from the mean of the boundary."""
    return fan_triangles(to_cartesian_array(boundary, radius))


@dataclass(frozen=True, eq=False)
class CellMesh:
    """Render-ready data for one visible cell.

    *fill* is ``None`` for cells that are not highlighted.  Meshes
    compare by identity; value equality over arrays is ambiguous.
    """

    cell_id: str
    color: str
    highlighted: bool
    outline: np.ndarray
    outline_opacity: float
    fill: Optional[np.ndarray] = None
    fill_opacity: float = 0.0


class CellGeometryBuilder:
    """Builds :class:`CellMesh` lists, caching per-cell buffers.

    Parameters
    ----------
    radius : float
        Globe radius.
    offsets : RenderOffsets
        Outline/fill radius multipliers.
    palette : CellPalette
        State colours and opacities.
    """

    def __init__(
        self,
        radius: float,
        offsets: RenderOffsets,
        palette: CellPalette,
    ) -> None:
        self.radius = radius
        self.offsets = offsets
        self.palette = palette
        self._outlines: Dict[str, np.ndarray] = {}
        self._fills: Dict[str, np.ndarray] = {}

    @property
    def cached_fill_ids(self) -> List[str]:
        return sorted(self._fills)

    @property
    def cached_outline_count(self) -> int:
        return len(self._outlines)

    def outline_for(self, cell: VisibleCell) -> np.ndarray:
        outline = self._outlines.get(cell.cell_id)
        if outline is None:
            outline = build_outline(cell.boundary, self.radius * self.offsets.outline)
            self._outlines[cell.cell_id] = outline
        return outline

    def fill_for(self, cell: VisibleCell) -> np.ndarray:
        fill = self._fills.get(cell.cell_id)
        if fill is None:
            fill = build_fill(cell.boundary, self.radius * self.offsets.fill)
            self._fills[cell.cell_id] = fill
        return fill

    def build_cell(self, cell: VisibleCell, snapshot: StoreSnapshot) -> CellMesh:
        color = resolve_cell_color(cell.cell_id, snapshot, self.palette)
        highlighted = color != self.palette.default
        return CellMesh(
            cell_id=cell.cell_id,
            color=color,
            highlighted=highlighted,
            outline=self.outline_for(cell),
            outline_opacity=(
                self.palette.highlight_opacity if highlighted else self.palette.outline_opacity
            ),
            fill=self.fill_for(cell) if highlighted else None,
            fill_opacity=self.palette.fill_opacity if highlighted else 0.0,
        )

    def build(
        self,
        cells: Iterable[VisibleCell],
        snapshot: StoreSnapshot,
    ) -> List[CellMesh]:
        return [self.build_cell(cell, snapshot) for cell in cells]

    def retain(self, cell_ids: Iterable[str]) -> None:
        """Evict cached buffers for cells not in *cell_ids*."""
        keep = set(cell_ids)
        for cache in (self._outlines, self._fills):
            for cid in [c for c in cache if c not in keep]:
                del cache[cid]

    def clear(self) -> None:
        self._outlines.clear()
        self._fills.clear()

"""Globe viewer — wires the visibility and interaction pipeline together.

One :class:`GlobeViewer` owns a resolver, a geometry builder, a picking
surface and a pointer mapper, and holds references to the shared
:class:`~hexglobe.events.EventBus` and
:class:`~hexglobe.cell_store.CellStateStore` (injected, so several
viewers or tests can share or isolate them).

Per frame the renderer calls :meth:`GlobeViewer.update_camera` and
draws :meth:`GlobeViewer.meshes`; pointer callbacks go to
:meth:`pointer_down` / :meth:`pointer_move` / :meth:`pointer_leave`.
:meth:`teardown` must be called when the scene unmounts.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from .cell_store import CellStateStore
from .config import ViewerConfig
from .events import EventBus, globe_rotated, globe_zoomed
from .globe_mesh import CellGeometryBuilder, CellMesh
from .interactions import PointerInteractionMapper
from .models import StoreSnapshot, VisibleCell
from .picking import PickingSurface
from .visibility import VisibleRegionResolver

log = logging.getLogger(__name__)

_ZOOM_EPSILON = 1e-6


class GlobeViewer:
    """Camera- and pointer-driven view over a shared cell store.

    Parameters
    ----------
    config : ViewerConfig, optional
    bus : EventBus, optional
        Created from *config* if omitted.
    store : CellStateStore, optional
        Created from *config* if omitted.
    pick_resolution : int, optional
        Resolution pointer hits are resolved at.  Defaults to the
        overlay grid resolution so highlighted cells line up with the
        drawn outlines.
    """

    def __init__(
        self,
        config: Optional[ViewerConfig] = None,
        *,
        bus: Optional[EventBus] = None,
        store: Optional[CellStateStore] = None,
        pick_resolution: Optional[int] = None,
    ) -> None:
        self.config = config or ViewerConfig()
        isolate = self.config.isolate_listener_errors
        self.bus = bus if bus is not None else EventBus(isolate_errors=isolate)
        self.store = store if store is not None else CellStateStore(isolate_errors=isolate)

        self.resolver = VisibleRegionResolver(self.config.index)
        self.builder = CellGeometryBuilder(
            self.config.radius, self.config.offsets, self.config.palette,
        )
        self.mapper = PointerInteractionMapper(self.bus, self.store)
        self.picking = PickingSurface(
            self.mapper,
            pick_resolution if pick_resolution is not None else self.config.index.grid_resolution,
            radius=self.config.radius,
            multiplier=self.config.offsets.interaction,
        )

        self._snapshot = self.store.get_state()
        self._meshes: Optional[List[CellMesh]] = None
        self._distance: Optional[float] = None
        self._unsubscribe = self.store.subscribe(self._on_store_change)

    # ── store / camera ──────────────────────────────────────────────

    def _on_store_change(self, snapshot: StoreSnapshot) -> None:
        self._snapshot = snapshot
        self._meshes = None

    @property
    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    @property
    def visible_cells(self) -> List[VisibleCell]:
        return self.resolver.visible_cells

    def update_camera(self, camera_position: Sequence[float]) -> bool:
        """Feed one frame's camera pose; returns *True* if the visible set changed."""
        distance = float(np.linalg.norm(np.asarray(camera_position, dtype=np.float64)))
        if self._distance is not None and not math.isclose(
            distance, self._distance, abs_tol=_ZOOM_EPSILON,
        ):
            self.bus.publish(globe_zoomed(distance))
        self._distance = distance

        if not self.resolver.update(camera_position, self.config.radius):
            return False
        self.builder.retain(self.resolver.visible_cell_ids)
        self._meshes = None
        self.bus.publish(globe_rotated(self.resolver.center_cell_id, self.resolver.ring_count))
        return True

    def meshes(self) -> List[CellMesh]:
        """Render-ready meshes for the current visible set and store state."""
        if self._meshes is None:
            self._meshes = self.builder.build(self.resolver.visible_cells, self._snapshot)
        return list(self._meshes)

    # ── pointer ─────────────────────────────────────────────────────

    def pointer_down(self, point: Optional[Sequence[float]]) -> Optional[str]:
        return self.picking.pointer_down(point)

    def pointer_move(self, point: Optional[Sequence[float]]) -> Optional[str]:
        return self.picking.pointer_move(point)

    def pointer_leave(self) -> None:
        self.picking.pointer_leave()

    def clear_selection(self) -> bool:
        return self.mapper.clear_selection()

    # ── lifecycle ───────────────────────────────────────────────────

    def teardown(self) -> None:
        """Release store subscription and forget per-scene state."""
        self._unsubscribe()
        self.mapper.reset()
        self.resolver.reset()
        self.builder.clear()
        self._meshes = None
        self._distance = None
        log.debug("viewer torn down")

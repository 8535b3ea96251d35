"""hexglobe — adaptive H3 hex-grid viewer and interaction pipeline for a globe.

Public API is organised into layers:

- **Core** — models, configuration, H3 adapter, geometry bridge
- **Visibility** — camera → visible cell set, cell geometry buffers
- **Interaction** — picking surface, pointer mapper, events, cell store
- **Viewer** — orchestration of the above per scene
- **Rendering** — PNG snapshots (matplotlib) and an interactive window (pyglet)
"""

# ── Core ────────────────────────────────────────────────────────────
from .models import CellRecord, CellVisualState, StoreSnapshot, VisibleCell
from .config import (
    DEFAULT_RESOLUTION,
    VISIBLE_GRID_RESOLUTION,
    MIN_GRID_RINGS,
    MAX_GRID_RINGS,
    GLOBE_RADIUS,
    CellPalette,
    IndexConfig,
    RenderOffsets,
    ViewerConfig,
    load_config,
    save_config,
)
from .h3_index import (
    InvalidIndexInput,
    cell_boundary,
    cell_center,
    cell_index,
    cell_resolution,
    disk,
    ring,
)
from .geometry import angular_distance, to_cartesian, to_geographic

# ── Visibility ──────────────────────────────────────────────────────
from .visibility import (
    DegenerateRingEstimate,
    VisibleRegionResolver,
    camera_facing_point,
    ring_count_for_coverage,
)
from .globe_mesh import CellGeometryBuilder, CellMesh, resolve_cell_color

# ── Interaction ─────────────────────────────────────────────────────
from .events import DomainEvent, EventBus, EventType
from .cell_store import CellStateStore, load_store, save_store
from .interactions import PointerAction, PointerInteractionMapper
from .picking import PickingSurface

# ── Viewer ──────────────────────────────────────────────────────────
from .viewer import GlobeViewer

# ── Rendering (requires matplotlib / pyglet, imported on use) ───────
from .render import render_view_png
from .globe_renderer import run_globe_window

__all__ = [
    # Core
    "CellRecord",
    "CellVisualState",
    "StoreSnapshot",
    "VisibleCell",
    "DEFAULT_RESOLUTION",
    "VISIBLE_GRID_RESOLUTION",
    "MIN_GRID_RINGS",
    "MAX_GRID_RINGS",
    "GLOBE_RADIUS",
    "CellPalette",
    "IndexConfig",
    "RenderOffsets",
    "ViewerConfig",
    "load_config",
    "save_config",
    "InvalidIndexInput",
    "cell_boundary",
    "cell_center",
    "cell_index",
    "cell_resolution",
    "disk",
    "ring",
    "angular_distance",
    "to_cartesian",
    "to_geographic",
    # Visibility
    "DegenerateRingEstimate",
    "VisibleRegionResolver",
    "camera_facing_point",
    "ring_count_for_coverage",
    "CellGeometryBuilder",
    "CellMesh",
    "resolve_cell_color",
    # Interaction
    "DomainEvent",
    "EventBus",
    "EventType",
    "CellStateStore",
    "load_store",
    "save_store",
    "PointerAction",
    "PointerInteractionMapper",
    "PickingSurface",
    # Viewer
    "GlobeViewer",
    # Rendering
    "render_view_png",
    "run_globe_window",
]

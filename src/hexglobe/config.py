"""Viewer configuration — index resolutions, ring clamps, render offsets.

Every tuneable number used by the visibility and interaction pipeline
lives here as a module constant and as a field on one of the
configuration dataclasses.  The constants are the build-time defaults;
a :class:`ViewerConfig` can be loaded from JSON to override them.

Usage
-----
>>> from hexglobe.config import ViewerConfig, load_config
>>> config = ViewerConfig()
>>> config.index.max_rings
40
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple, Union

PathLike = Union[str, Path]


# ═══════════════════════════════════════════════════════════════════
# Defaults
# ═══════════════════════════════════════════════════════════════════

# Resolution 12 gives ~300 m² cells, city-scale land ownership.
DEFAULT_RESOLUTION = 12

# Resolution 2 gives ~86,000 km² cells, readable at globe scale.
VISIBLE_GRID_RESOLUTION = 2

MIN_GRID_RINGS = 3
MAX_GRID_RINGS = 40

HEMISPHERE_MARGIN_DEG = 8.0
MIN_RING_STEP_DEG = 0.05

GLOBE_RADIUS = 1.0

OUTLINE_MULTIPLIER = 1.001
FILL_MULTIPLIER = 1.002
INTERACTION_MULTIPLIER = 1.003

H3_MAX_RESOLUTION = 15


def _check_resolution(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    if not 0 <= value <= H3_MAX_RESOLUTION:
        raise ValueError(f"{name} must be in [0, {H3_MAX_RESOLUTION}], got {value}")


def _check_hex_colour(name: str, value: str) -> None:
    if not (isinstance(value, str) and len(value) == 7 and value.startswith("#")):
        raise ValueError(f"{name} must be a '#rrggbb' string, got {value!r}")
    try:
        int(value[1:], 16)
    except ValueError:
        raise ValueError(f"{name} must be a '#rrggbb' string, got {value!r}") from None


# ═══════════════════════════════════════════════════════════════════
# Sections
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class IndexConfig:
    """Spatial index parameters for the visible grid.

    Attributes
    ----------
    cell_resolution : int
        Resolution of selectable land cells.
    grid_resolution : int
        Resolution of the rendered overlay grid.
    min_rings, max_rings : int
        Clamp for the ring count derived from the angular step.
    margin_deg : float
        Extra angular radius added to the visible hemisphere so no gap
        appears at the silhouette.
    min_step_deg : float
        Floor applied to the estimated ring step before dividing.
    """

    cell_resolution: int = DEFAULT_RESOLUTION
    grid_resolution: int = VISIBLE_GRID_RESOLUTION
    min_rings: int = MIN_GRID_RINGS
    max_rings: int = MAX_GRID_RINGS
    margin_deg: float = HEMISPHERE_MARGIN_DEG
    min_step_deg: float = MIN_RING_STEP_DEG

    def __post_init__(self) -> None:
        _check_resolution("cell_resolution", self.cell_resolution)
        _check_resolution("grid_resolution", self.grid_resolution)
        if self.min_rings < 0:
            raise ValueError("min_rings must be >= 0")
        if self.max_rings < self.min_rings:
            raise ValueError(
                f"max_rings ({self.max_rings}) must be >= min_rings ({self.min_rings})"
            )
        if self.margin_deg < 0:
            raise ValueError("margin_deg must be >= 0")
        if self.min_step_deg <= 0:
            raise ValueError("min_step_deg must be positive")

    @property
    def required_radius_deg(self) -> float:
        """Angular radius the visible set must cover: a hemisphere plus margin."""
        return 90.0 + self.margin_deg


@dataclass(frozen=True)
class RenderOffsets:
    """Radius multipliers for the three render layers.

    They must be strictly increasing (outline < fill < interaction) so
    layers never z-fight and pointer rays hit the picking sphere first.
    """

    outline: float = OUTLINE_MULTIPLIER
    fill: float = FILL_MULTIPLIER
    interaction: float = INTERACTION_MULTIPLIER

    def __post_init__(self) -> None:
        if not 1.0 <= self.outline < self.fill < self.interaction:
            raise ValueError(
                "render offsets must satisfy 1.0 <= outline < fill < interaction, "
                f"got {self.outline}, {self.fill}, {self.interaction}"
            )


@dataclass(frozen=True)
class CellPalette:
    """Outline/fill colours per visual state."""

    default: str = "#ffffff"
    hovered: str = "#44aaff"
    selected: str = "#00ff88"
    owned: str = "#ffaa00"
    foreign: str = "#ff5566"
    outline_opacity: float = 0.3
    highlight_opacity: float = 1.0
    fill_opacity: float = 0.4

    def __post_init__(self) -> None:
        for name in ("default", "hovered", "selected", "owned", "foreign"):
            _check_hex_colour(name, getattr(self, name))
        for name in ("outline_opacity", "highlight_opacity", "fill_opacity"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")


# ═══════════════════════════════════════════════════════════════════
# Top-level config
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ViewerConfig:
    """Everything the viewer needs, grouped by concern.

    *camera_position* is the initial orbit camera pose; *min_distance*
    and *max_distance* bound the orbit zoom.  When
    *isolate_listener_errors* is true, a raising event handler or
    store listener is logged and skipped instead of aborting the
    remaining listeners.
    """

    radius: float = GLOBE_RADIUS
    index: IndexConfig = field(default_factory=IndexConfig)
    offsets: RenderOffsets = field(default_factory=RenderOffsets)
    palette: CellPalette = field(default_factory=CellPalette)
    camera_position: Tuple[float, float, float] = (0.0, 0.0, 2.5)
    min_distance: float = 1.2
    max_distance: float = 4.0
    isolate_listener_errors: bool = False

    def __post_init__(self) -> None:
        if self.radius <= 0:
            raise ValueError("radius must be positive")
        if len(self.camera_position) != 3:
            raise ValueError("camera_position must have three components")
        object.__setattr__(
            self, "camera_position", tuple(float(c) for c in self.camera_position),
        )
        if not 0 < self.min_distance <= self.max_distance:
            raise ValueError("need 0 < min_distance <= max_distance")

    # ── serialisation ───────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["camera_position"] = list(self.camera_position)
        return data

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> ViewerConfig:
        """Build a config from a (possibly partial) dict.

        Missing keys keep their defaults; unknown keys raise
        ``TypeError`` from the dataclass constructors.
        """
        data = dict(payload)
        sections = {
            "index": IndexConfig,
            "offsets": RenderOffsets,
            "palette": CellPalette,
        }
        for key, section_cls in sections.items():
            if key in data:
                data[key] = section_cls(**data[key])
        if "camera_position" in data:
            data["camera_position"] = tuple(data["camera_position"])
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)


def load_config(path: PathLike) -> ViewerConfig:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return ViewerConfig.from_dict(data)


def save_config(config: ViewerConfig, path: PathLike) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(config.to_json(), encoding="utf-8")
    return out

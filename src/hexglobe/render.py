"""Static PNG snapshot of the globe as seen from a camera position.

Orthographic projection of the current visible cell meshes onto the
camera's image plane.  Cells on the far side of the globe are culled.
Useful for headless checks of what the viewer would draw.

Requires matplotlib; imported lazily to keep the core package light.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np

from .geometry import normalize
from .viewer import GlobeViewer

PathLike = Union[str, Path]

_BACKGROUND = "#000011"
_GLOBE_FACE = "#1b3a5c"


def _ensure_mpl():
    """Lazy-import matplotlib with the non-interactive backend."""
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from matplotlib.patches import Circle, Polygon
        return plt, Circle, Polygon
    except ImportError as exc:
        raise RuntimeError(
            "matplotlib is required for rendering. Install with `pip install matplotlib`."
        ) from exc


def view_basis(camera_position: Sequence[float]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """``(right, up, toward_camera)`` unit vectors for an orbit camera."""
    back = normalize(camera_position)
    world_up = np.array([0.0, 1.0, 0.0])
    if abs(float(np.dot(back, world_up))) > 0.999:
        world_up = np.array([0.0, 0.0, -1.0])
    right = normalize(np.cross(world_up, back))
    up = np.cross(back, right)
    return right, up, back


def render_view_png(
    viewer: GlobeViewer,
    camera_position: Sequence[float],
    output_path: PathLike,
    *,
    size_px: int = 800,
    dpi: int = 100,
    linewidth: float = 0.4,
) -> Path:
    """Update *viewer* for *camera_position* and write its view to PNG."""
    plt, Circle, Polygon = _ensure_mpl()

    viewer.update_camera(camera_position)
    right, up, back = view_basis(camera_position)

    figsize = size_px / dpi
    fig, ax = plt.subplots(1, 1, figsize=(figsize, figsize))
    fig.patch.set_facecolor(_BACKGROUND)
    ax.set_facecolor(_BACKGROUND)
    ax.set_aspect("equal")

    r = viewer.config.radius
    ax.add_patch(Circle((0.0, 0.0), r, facecolor=_GLOBE_FACE, edgecolor="none", zorder=0))

    def project(points: np.ndarray) -> np.ndarray:
        return np.column_stack((points @ right, points @ up))

    for mesh in viewer.meshes():
        # cull cells whose centre faces away from the camera
        if float(np.mean(mesh.outline[:-1], axis=0) @ back) <= 0.0:
            continue
        if mesh.fill is not None:
            for tri in mesh.fill.reshape(-1, 3, 3):
                ax.add_patch(Polygon(
                    project(tri), closed=True, facecolor=mesh.color,
                    edgecolor="none", alpha=mesh.fill_opacity, zorder=1,
                ))
        xy = project(mesh.outline)
        ax.plot(
            xy[:, 0], xy[:, 1], color=mesh.color,
            alpha=mesh.outline_opacity, linewidth=linewidth,
            zorder=3 if mesh.highlighted else 2,
        )

    pad = 0.05 * r
    ax.set_xlim(-r - pad, r + pad)
    ax.set_ylim(-r - pad, r + pad)
    ax.axis("off")
    fig.subplots_adjust(left=0, right=1, top=1, bottom=0)

    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, dpi=dpi, facecolor=fig.get_facecolor())
    plt.close(fig)
    return out

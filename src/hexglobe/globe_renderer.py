"""Interactive pyglet/OpenGL window for the hex globe viewer.

Draws the globe body, the visible cell outlines and the highlight
fills produced by :class:`~hexglobe.viewer.GlobeViewer`, with an orbit
camera (drag to rotate, scroll to zoom) and mouse picking through the
viewer's single picking sphere.

Requires ``pyglet`` 2.x and an OpenGL 3.3+ capable display.

Functions
---------
- :func:`perspective` / :func:`look_at` — camera matrices
- :func:`screen_ray` — unproject a mouse position into a world ray
- :func:`orbit_position` — camera position from yaw/pitch/distance
- :func:`run_globe_window` — open the window and run the event loop
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .geometry import to_cartesian_array
from .globe_mesh import CellMesh, hex_to_rgb
from .viewer import GlobeViewer

log = logging.getLogger(__name__)

_VERTEX_SHADER = """
#version 330 core
in vec3 position;
in vec4 colors;

uniform mat4 u_mvp;

out vec4 v_color;

void main() {
    v_color = colors;
    gl_Position = u_mvp * vec4(position, 1.0);
}
"""

_FRAGMENT_SHADER = """
#version 330 core
in vec4 v_color;

out vec4 frag_color;

void main() {
    frag_color = v_color;
}
"""

_GLOBE_RGBA = (0.08, 0.16, 0.28, 1.0)
_CLEAR_RGBA = (0.0, 0.0, 0.067, 1.0)
_FOV_Y = math.radians(45.0)
_NEAR, _FAR = 0.1, 1000.0


# ═══════════════════════════════════════════════════════════════════
# Camera maths (no OpenGL needed)
# ═══════════════════════════════════════════════════════════════════

def perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    f = 1.0 / math.tan(fovy / 2.0)
    return np.array([
        [f / aspect, 0, 0, 0],
        [0, f, 0, 0],
        [0, 0, (far + near) / (near - far), (2 * far * near) / (near - far)],
        [0, 0, -1, 0],
    ], dtype=np.float64)


def look_at(eye: Sequence[float], target: Sequence[float] = (0.0, 0.0, 0.0)) -> np.ndarray:
    eye_v = np.asarray(eye, dtype=np.float64)
    forward = np.asarray(target, dtype=np.float64) - eye_v
    forward /= np.linalg.norm(forward)
    up = np.array([0.0, 1.0, 0.0])
    if abs(float(np.dot(forward, up))) > 0.999:
        up = np.array([0.0, 0.0, -1.0])
    right = np.cross(forward, up)
    right /= np.linalg.norm(right)
    up = np.cross(right, forward)
    view = np.identity(4, dtype=np.float64)
    view[0, :3] = right
    view[1, :3] = up
    view[2, :3] = -forward
    view[:3, 3] = -view[:3, :3] @ eye_v
    return view


def orbit_position(yaw: float, pitch: float, distance: float) -> Tuple[float, float, float]:
    """Camera on a sphere of *distance*; yaw 0 / pitch 0 is the +Z axis."""
    return (
        distance * math.cos(pitch) * math.sin(yaw),
        distance * math.sin(pitch),
        distance * math.cos(pitch) * math.cos(yaw),
    )


def screen_ray(
    x: float,
    y: float,
    width: int,
    height: int,
    view_proj: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """World-space ``(origin, direction)`` under window pixel ``(x, y)``.

    Pixel origin is bottom-left, as pyglet reports it.
    """
    ndc_x = 2.0 * x / max(1, width) - 1.0
    ndc_y = 2.0 * y / max(1, height) - 1.0
    inv = np.linalg.inv(view_proj)
    near = inv @ np.array([ndc_x, ndc_y, -1.0, 1.0])
    far = inv @ np.array([ndc_x, ndc_y, 1.0, 1.0])
    near = near[:3] / near[3]
    far = far[:3] / far[3]
    direction = far - near
    return near, direction / np.linalg.norm(direction)


def globe_triangles(radius: float, stacks: int = 32, slices: int = 64) -> np.ndarray:
    """UV-sphere triangle list ``(6 * stacks * slices, 3)`` for the globe body."""
    lats = np.linspace(-90.0, 90.0, stacks + 1)
    lngs = np.linspace(-180.0, 180.0, slices + 1)
    tris: List[np.ndarray] = []
    for i in range(stacks):
        for j in range(slices):
            quad = [
                (lats[i], lngs[j]), (lats[i], lngs[j + 1]),
                (lats[i + 1], lngs[j + 1]), (lats[i + 1], lngs[j]),
            ]
            a, b, c, d = to_cartesian_array(quad, radius)
            tris.extend((a, b, c, a, c, d))
    return np.asarray(tris, dtype=np.float64)


def mesh_buffers(meshes: Sequence[CellMesh]) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Flatten cell meshes into ``GL_LINES`` and ``GL_TRIANGLES`` buffers.

    Returns ``(line_positions, line_colours, fill_positions, fill_colours)``
    with RGBA colours per vertex.
    """
    line_pos: List[np.ndarray] = []
    line_col: List[np.ndarray] = []
    fill_pos: List[np.ndarray] = []
    fill_col: List[np.ndarray] = []
    for mesh in meshes:
        rgb = hex_to_rgb(mesh.color)
        segments = np.repeat(mesh.outline, 2, axis=0)[1:-1]
        line_pos.append(segments)
        line_col.append(np.tile((*rgb, mesh.outline_opacity), (len(segments), 1)))
        if mesh.fill is not None:
            fill_pos.append(mesh.fill)
            fill_col.append(np.tile((*rgb, mesh.fill_opacity), (len(mesh.fill), 1)))

    def stack(parts: List[np.ndarray], width: int) -> np.ndarray:
        return np.vstack(parts) if parts else np.zeros((0, width))

    return stack(line_pos, 3), stack(line_col, 4), stack(fill_pos, 3), stack(fill_col, 4)


# ═══════════════════════════════════════════════════════════════════
# Window (requires pyglet)
# ═══════════════════════════════════════════════════════════════════

def run_globe_window(
    viewer: Optional[GlobeViewer] = None,
    *,
    width: int = 1024,
    height: int = 768,
    title: str = "hexglobe",
) -> None:
    """Open a pyglet window and run until it is closed."""
    try:
        import pyglet
        from pyglet import gl
        from pyglet.graphics.shader import Shader, ShaderProgram
    except ImportError as exc:
        raise ImportError(
            "pyglet is required for interactive rendering. "
            "Install with: pip install hexglobe[viewer]"
        ) from exc

    viewer = viewer or GlobeViewer()
    cfg = viewer.config

    config = pyglet.gl.Config(
        double_buffer=True, depth_size=24, major_version=3, minor_version=3,
    )
    window = pyglet.window.Window(
        width=width, height=height, caption=title, resizable=True, config=config,
    )
    program = ShaderProgram(
        Shader(_VERTEX_SHADER, "vertex"), Shader(_FRAGMENT_SHADER, "fragment"),
    )

    globe_batch = pyglet.graphics.Batch()
    body = globe_triangles(cfg.radius)
    globe_list = program.vertex_list(
        len(body), gl.GL_TRIANGLES, batch=globe_batch,
        position=("f", body.ravel().tolist()),
        colors=("f", np.tile(_GLOBE_RGBA, len(body)).tolist()),
    )

    x0, y0, z0 = cfg.camera_position
    dist0 = math.sqrt(x0 * x0 + y0 * y0 + z0 * z0)
    camera = {
        "yaw": math.atan2(x0, z0),
        "pitch": math.asin(max(-1.0, min(1.0, y0 / dist0))),
        "distance": dist0,
        "dragged": False,
    }
    cell_batch = {"batch": None, "lists": [], "meshes": None}

    def eye() -> Tuple[float, float, float]:
        return orbit_position(camera["yaw"], camera["pitch"], camera["distance"])

    def view_proj() -> np.ndarray:
        aspect = window.width / max(1, window.height)
        return perspective(_FOV_Y, aspect, _NEAR, _FAR) @ look_at(eye())

    def rebuild_cells(meshes: List[CellMesh]) -> None:
        for vlist in cell_batch["lists"]:
            vlist.delete()
        batch = pyglet.graphics.Batch()
        lists = []
        line_pos, line_col, fill_pos, fill_col = mesh_buffers(meshes)
        if len(line_pos):
            lists.append(program.vertex_list(
                len(line_pos), gl.GL_LINES, batch=batch,
                position=("f", line_pos.ravel().tolist()),
                colors=("f", line_col.ravel().tolist()),
            ))
        if len(fill_pos):
            lists.append(program.vertex_list(
                len(fill_pos), gl.GL_TRIANGLES, batch=batch,
                position=("f", fill_pos.ravel().tolist()),
                colors=("f", fill_col.ravel().tolist()),
            ))
        cell_batch.update(batch=batch, lists=lists, meshes=meshes)

    @window.event
    def on_draw():
        viewer.update_camera(eye())
        meshes = viewer.meshes()
        if meshes != cell_batch["meshes"]:
            rebuild_cells(meshes)

        gl.glClearColor(*_CLEAR_RGBA)
        window.clear()
        gl.glEnable(gl.GL_DEPTH_TEST)
        gl.glEnable(gl.GL_BLEND)
        gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)

        program.use()
        program["u_mvp"] = tuple(view_proj().T.astype(np.float32).ravel())
        globe_batch.draw()
        if cell_batch["batch"] is not None:
            cell_batch["batch"].draw()
        program.stop()

    @window.event
    def on_mouse_press(x, y, button, modifiers):
        camera["dragged"] = False

    @window.event
    def on_mouse_release(x, y, button, modifiers):
        if camera["dragged"] or button != pyglet.window.mouse.LEFT:
            return
        origin, direction = screen_ray(x, y, window.width, window.height, view_proj())
        viewer.picking.ray_down(origin, direction)

    @window.event
    def on_mouse_motion(x, y, dx, dy):
        origin, direction = screen_ray(x, y, window.width, window.height, view_proj())
        viewer.picking.ray_move(origin, direction)

    @window.event
    def on_mouse_leave(x, y):
        viewer.pointer_leave()

    @window.event
    def on_mouse_drag(x, y, dx, dy, buttons, modifiers):
        camera["dragged"] = True
        speed = 0.005 * (camera["distance"] - cfg.radius * 0.9)
        camera["yaw"] -= dx * speed
        camera["pitch"] = max(
            -math.pi / 2 + 0.01, min(math.pi / 2 - 0.01, camera["pitch"] - dy * speed),
        )

    @window.event
    def on_mouse_scroll(x, y, scroll_x, scroll_y):
        camera["distance"] = max(
            cfg.min_distance, min(cfg.max_distance, camera["distance"] - scroll_y * 0.1),
        )

    @window.event
    def on_key_press(symbol, modifiers):
        if symbol == pyglet.window.key.ESCAPE:
            viewer.clear_selection()
            return pyglet.event.EVENT_HANDLED

    @window.event
    def on_close():
        viewer.teardown()
        globe_list.delete()

    log.info("opening globe window %dx%d", width, height)
    pyglet.app.run()

"""hexglobe command-line interface."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Optional, Sequence

from . import h3_index
from .config import ViewerConfig, load_config, save_config
from .geometry import to_cartesian


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="hexglobe CLI")
    parser.add_argument("--config", dest="config_path", help="Viewer config JSON")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    sub = parser.add_subparsers(dest="command", required=True)

    def add_camera(p: argparse.ArgumentParser) -> None:
        p.add_argument("--lat", type=float, default=0.0, help="Latitude the camera faces")
        p.add_argument("--lng", type=float, default=0.0, help="Longitude the camera faces")
        p.add_argument("--distance", type=float, default=2.5, help="Camera distance from centre")

    visible = sub.add_parser("visible", help="Resolve the visible cell set for a camera")
    add_camera(visible)
    visible.add_argument("--ids", action="store_true", help="Print every visible cell id")

    pick = sub.add_parser("pick", help="Resolve a geographic point to a cell id")
    pick.add_argument("--lat", type=float, required=True)
    pick.add_argument("--lng", type=float, required=True)
    pick.add_argument("--resolution", type=int)
    pick.add_argument("--boundary", action="store_true")

    render = sub.add_parser("render", help="Render the camera view to PNG")
    add_camera(render)
    render.add_argument("--out", dest="output_path", required=True)
    render.add_argument("--select", nargs=2, type=float, metavar=("LAT", "LNG"))
    render.add_argument("--hover", nargs=2, type=float, metavar=("LAT", "LNG"))
    render.add_argument("--size", type=int, default=800)

    sub.add_parser("view", help="Open the interactive globe window")

    dump = sub.add_parser("config", help="Write the effective config as JSON")
    dump.add_argument("--out", dest="output_path")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the CLI; bad input (index, config or camera) exits with status 2."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(args.config_path) if args.config_path else ViewerConfig()
        if args.command == "visible":
            _cmd_visible(args, config)
        elif args.command == "pick":
            _cmd_pick(args, config)
        elif args.command == "render":
            _cmd_render(args, config)
        elif args.command == "view":
            from .globe_renderer import run_globe_window
            from .viewer import GlobeViewer
            run_globe_window(GlobeViewer(config))
        elif args.command == "config":
            _cmd_config(args, config)
    except (ValueError, TypeError) as exc:
        print(f"error: {exc}")
        raise SystemExit(2)


def _camera(args, config: ViewerConfig):
    return to_cartesian(args.lat, args.lng, args.distance * config.radius)


def _cmd_visible(args, config: ViewerConfig) -> None:
    from .visibility import VisibleRegionResolver

    resolver = VisibleRegionResolver(config.index)
    resolver.update(_camera(args, config), config.radius)
    print(f"center: {resolver.center_cell_id}")
    print(f"rings: {resolver.ring_count}")
    print(f"cells: {len(resolver.visible_cells)}")
    if args.ids:
        for cell_id in resolver.visible_cell_ids:
            print(cell_id)


def _cmd_pick(args, config: ViewerConfig) -> None:
    resolution = args.resolution if args.resolution is not None else config.index.cell_resolution
    cell_id = h3_index.cell_index(args.lat, args.lng, resolution)
    print(cell_id)
    if args.boundary:
        print(json.dumps([list(v) for v in h3_index.cell_boundary(cell_id)]))


def _cmd_render(args, config: ViewerConfig) -> None:
    from .render import render_view_png
    from .viewer import GlobeViewer

    viewer = GlobeViewer(config)
    grid_res = config.index.grid_resolution
    if args.select:
        viewer.mapper.on_select(h3_index.cell_index(args.select[0], args.select[1], grid_res))
    if args.hover:
        viewer.mapper.on_move(h3_index.cell_index(args.hover[0], args.hover[1], grid_res))
    out = render_view_png(viewer, _camera(args, config), args.output_path, size_px=args.size)
    viewer.teardown()
    print(f"Saved {out}")


def _cmd_config(args, config: ViewerConfig) -> None:
    if args.output_path:
        save_config(config, args.output_path)
        print(f"Saved {args.output_path}")
    else:
        print(config.to_json())


if __name__ == "__main__":
    main()

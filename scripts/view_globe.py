#!/usr/bin/env python3
"""Interactive hex globe viewer.

Usage
-----
::

    python scripts/view_globe.py
    python scripts/view_globe.py --config viewer.json --resolution 3

Drag to orbit, scroll to zoom, click a cell to select it, ESC clears
the selection.

Requires ``pyglet`` and an OpenGL 3.3+ capable display.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

# Ensure the package is importable from the scripts/ directory
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))


def main():
    parser = argparse.ArgumentParser(description="Interactive hex globe viewer")
    parser.add_argument("--config", type=str, help="Viewer config JSON")
    parser.add_argument(
        "--resolution", "-r", type=int, default=None,
        help="Override the overlay grid resolution",
    )
    parser.add_argument("--width", type=int, default=1024)
    parser.add_argument("--height", type=int, default=768)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    from hexglobe.config import ViewerConfig, load_config
    from hexglobe.globe_renderer import run_globe_window
    from hexglobe.viewer import GlobeViewer

    config = load_config(args.config) if args.config else ViewerConfig()
    if args.resolution is not None:
        config = dataclasses.replace(
            config, index=dataclasses.replace(config.index, grid_resolution=args.resolution),
        )

    run_globe_window(GlobeViewer(config), width=args.width, height=args.height)


if __name__ == "__main__":
    main()

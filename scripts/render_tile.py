#!/usr/bin/env python3
"""
Render one tile through the same pipeline the server uses and write it to disk.

Handy for checking coverage/year settings without running the server.

Examples:
  APIKEYPROD=... python scripts/render_tile.py 17 120526 78666
  python scripts/render_tile.py 17 120526 78666 --year 2019 --out tile_2019.png
  python scripts/render_tile.py 15 30131 19666 --type Dsm
"""
from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

# Add the project root to the path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.logging_setup import setup_logging
from tileserver.config import DEFAULT_CONFIG_PATH, load_config
from tileserver.coords import parse_tile_path
from tileserver.errors import CoordinateRangeError, EncodeError, PathParseError
from tileserver.server import build_compositor, encode_png
from tileserver.urls import TilesType


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Render a single z/x/y tile to a PNG file.")
    ap.add_argument("z", type=int)
    ap.add_argument("x", type=int)
    ap.add_argument("y", type=int)
    ap.add_argument("--out", default=None, help="output file (default: tile_{z}_{x}_{y}.png)")
    ap.add_argument("--year", type=int, default=None, help="capture year (>= 2000), default from config")
    ap.add_argument("--type", dest="tiles_type", default=None, choices=[t.value for t in TilesType])
    ap.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    args = ap.parse_args(argv)

    cfg = load_config(args.config)
    setup_logging(cfg.log_level)

    # Same validation as an HTTP request path
    try:
        coords = parse_tile_path(f"/{args.z}/{args.x}/{args.y}.png")
    except (PathParseError, CoordinateRangeError) as e:
        print(f"  Invalid tile: {e}", file=sys.stderr)
        return 2

    compositor = build_compositor(cfg)
    t0 = time.time()
    img = compositor.render(coords.x, coords.y, coords.z, tiles_type=args.tiles_type, year=args.year)
    try:
        body = encode_png(img)
    except EncodeError as e:
        print(f"  Failed to encode tile: {e}", file=sys.stderr)
        return 1

    out = Path(args.out or f"tile_{coords.z}_{coords.x}_{coords.y}.png")
    out.write_bytes(body)
    print(f"  Saved {out} ({len(body)} bytes, mode {img.mode}, {int((time.time() - t0) * 1000)}ms)")
    return 0


if __name__ == "__main__":
    sys.exit(main())

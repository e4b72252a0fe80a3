from __future__ import annotations

"""
Upstream tile URLs (no request performed).

- OpenStreetMap standard tiles: always-available base layer, PNG.
- Nearmap Tile API v3: aerial imagery keyed by type/z/x/y + apikey, optionally
  restricted to a single capture year with since/until.
"""

import re
from enum import Enum
from typing import Dict
from urllib.parse import urlencode


OSM_BASE_URL = "https://tile.openstreetmap.org"
NEARMAP_BASE_URL = "https://api.nearmap.com/tiles/v3"

# Years below this are treated as "no date filter".
MIN_DATED_YEAR = 2000

# `img` lets Nearmap pick JPEG for full tiles and PNG (with alpha) at coverage edges.
NEARMAP_FORMATS = ("img", "jpg", "png")


class TilesType(str, Enum):
    VERT = "Vert"  # vertical photo
    DSM = "Dsm"    # digital surface model
    DEM = "Dem"    # digital elevation model


def openstreetmap_url(x: int, y: int, z: int) -> str:
    return f"{OSM_BASE_URL}/{z}/{x}/{y}.png"


def _nearmap_path(x: int, y: int, z: int, tiles_type: str, fmt: str) -> str:
    if fmt not in NEARMAP_FORMATS:
        raise ValueError(f"unsupported Nearmap tile format {fmt!r}; expected one of {NEARMAP_FORMATS}")
    return f"{NEARMAP_BASE_URL}/{TilesType(tiles_type).value}/{z}/{x}/{y}.{fmt}"


def nearmap_tiles_url(x: int, y: int, z: int, tiles_type: str, apikey: str, fmt: str = "img") -> str:
    """Latest imagery for the tile."""
    return f"{_nearmap_path(x, y, z, tiles_type, fmt)}?{urlencode({'apikey': apikey})}"


def nearmap_tiles_dated_url(
    x: int,
    y: int,
    z: int,
    tiles_type: str,
    apikey: str,
    year: int,
    fmt: str = "img",
) -> str:
    """Imagery captured within calendar `year` (Jan 1 .. Dec 31)."""
    params: Dict[str, str] = {
        "since": f"{year:04d}-01-01",
        "until": f"{year:04d}-12-31",
        "apikey": apikey,
    }
    return f"{_nearmap_path(x, y, z, tiles_type, fmt)}?{urlencode(params)}"


def nearmap_url_for(x: int, y: int, z: int, tiles_type: str, apikey: str, year: int = 0) -> str:
    """Dated URL when `year` is a real year (>= MIN_DATED_YEAR), else latest."""
    if year >= MIN_DATED_YEAR:
        return nearmap_tiles_dated_url(x, y, z, tiles_type, apikey, year)
    return nearmap_tiles_url(x, y, z, tiles_type, apikey)


_APIKEY_RE = re.compile(r"(apikey=)[^&]*")


def redact_url(url: str) -> str:
    """Mask the apikey query value for logging."""
    return _APIKEY_RE.sub(r"\1***", url)

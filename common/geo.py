from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from tileserver.coords import TileCoords


# -------------------------
# Slippy-map tile <-> lon/lat (Web Mercator)
# https://wiki.openstreetmap.org/wiki/Slippy_map_tilenames#Lon..2Flat._to_tile_numbers_2
# -------------------------
def lonlat_to_tile(lon: float, lat: float, zoom: int) -> Tuple[int, int]:
    """
    Convert lon/lat (deg) to the slippy tile (x, y) containing it at `zoom`.

    NOTE: No clamping here; lat at or beyond +/-90 deg gives inf/NaN or raises
    from `math`. Caller should keep inputs inside the Mercator domain.
    """
    n = 2.0 ** zoom
    lat_rad = lat * math.pi / 180.0
    x = int(math.floor((lon + 180.0) / 360.0 * n))
    y = int(math.floor((1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi) / 2.0 * n))
    return x, y


def tile_to_lonlat(x: int, y: int, zoom: int) -> Tuple[float, float]:
    """Lon/lat (deg) of the top-left corner of tile (x, y) at `zoom`."""
    n = math.pi - 2.0 * math.pi * float(y) / 2.0 ** zoom
    lon = float(x) / 2.0 ** zoom * 360.0 - 180.0
    # sinh(n) written out
    lat = 180.0 / math.pi * math.atan(0.5 * (math.exp(n) - math.exp(-n)))
    return lon, lat


# -------------------------
# Normalized tile extents
# -------------------------
@dataclass(frozen=True, slots=True)
class Vector:
    x: float
    y: float

    def sub(self, other: "Vector") -> "Vector":
        return Vector(self.x - other.x, self.y - other.y)

    def scale(self, f: float) -> "Vector":
        return Vector(self.x * f, self.y * f)


@dataclass(frozen=True, slots=True)
class Extent:
    min: Vector
    max: Vector


_CENTER = Vector(0.5, 0.5)


def tile_extent(coords: "TileCoords") -> Extent:
    """
    Extent of a tile in a world square centred on the origin, side 4.

    The world (tile 0/0/0) maps to [-2, 2] x [-2, 2]; y grows southward like the
    tile scheme.
    """
    n = float(1 << coords.z)
    lo = Vector(coords.x / n, coords.y / n)
    hi = Vector((coords.x + 1) / n, (coords.y + 1) / n)
    return Extent(
        min=lo.sub(_CENTER).scale(4),
        max=hi.sub(_CENTER).scale(4),
    )

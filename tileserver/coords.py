from __future__ import annotations

import re
from dataclasses import dataclass

from tileserver.errors import CoordinateRangeError, PathParseError


# Fields are signed 64-bit ints; 1 << z must fit in one too.
MAX_INT = 2**63 - 1
MAX_ZOOM = 62

_PATH_RE = re.compile(r"/(\d+)/(\d+)/(\d+)\.png", re.ASCII)


@dataclass(frozen=True, slots=True)
class TileCoords:
    """Slippy-map tile address. Origin top-left, y grows southward."""
    z: int
    x: int
    y: int

    @property
    def zxy(self) -> tuple[int, int, int]:
        return (self.z, self.x, self.y)

    def __str__(self) -> str:
        return f"{self.z}/{self.x}/{self.y}"


def _parse_field(name: str, text: str) -> int:
    # checked before int() so hostile digit strings are never converted
    if len(text.lstrip("0")) > len(str(MAX_INT)):
        raise PathParseError(f"extracting {name}: value out of range: {text[:32]}")
    try:
        value = int(text)
    except ValueError as e:
        raise PathParseError(f"extracting {name}: {e}") from e
    if value > MAX_INT:
        raise PathParseError(f"extracting {name}: value out of range: {text}")
    return value


def parse_tile_path(path: str) -> TileCoords:
    """
    Parse `/<z>/<x>/<y>.png` into TileCoords.

    Raises:
        PathParseError: path shape does not match, or a field does not fit a signed 64-bit int.
        CoordinateRangeError: x or y not in [0, 2**z), or z > MAX_ZOOM.
    """
    m = _PATH_RE.fullmatch(path)
    if m is None:
        raise PathParseError(f"path does not match /<z>/<x>/<y>.png: {path!r}")

    z = _parse_field("z", m.group(1))
    x = _parse_field("x", m.group(2))
    y = _parse_field("y", m.group(3))

    if z > MAX_ZOOM:
        raise CoordinateRangeError(f"invalid tile coordinates: z={z} x={x} y={y} (max zoom {MAX_ZOOM})")
    n = 1 << z
    if not (0 <= x < n and 0 <= y < n):
        raise CoordinateRangeError(f"invalid tile coordinates: z={z} x={x} y={y}")
    return TileCoords(z=z, x=x, y=y)

from __future__ import annotations


class TileServerError(Exception):
    """Base class for errors raised while serving a tile."""


class PathParseError(TileServerError, ValueError):
    """Request path is not /<z>/<x>/<y>.png or a field is not an integer."""


class CoordinateRangeError(TileServerError, ValueError):
    """x or y (or the zoom itself) is outside the tile grid."""


class FetchError(TileServerError):
    """
    Transport failure or non-200 status from an upstream provider.

    Both causes are reported the same way so the fallback logic stays uniform.
    """


class DecodeError(TileServerError):
    """Body was fetched but could not be decoded as an image."""


class EncodeError(TileServerError):
    """Final raster could not be serialized to PNG."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from PIL import Image

from common.geo import tile_to_lonlat
from tileserver.errors import DecodeError, FetchError
from tileserver.fetcher import ImageFetcher
from tileserver.urls import TilesType, nearmap_url_for, openstreetmap_url, redact_url


log = logging.getLogger(__name__)

TILE_SIZE = 256

# Colour models carrying an alpha band. Anything else is treated as fully covering
# the tile, unless the decoder reported a transparent palette/colour key.
ALPHA_MODES = frozenset({"RGBA", "RGBa", "LA", "La", "PA"})


def is_opaque(img: Image.Image) -> bool:
    """Colour-model check only; pixels are never inspected."""
    # a palette or colour key with a transparent entry counts as alpha-bearing, unlike a bare palette
    return img.mode not in ALPHA_MODES and "transparency" not in img.info


def blank_tile() -> Image.Image:
    return Image.new("RGBA", (TILE_SIZE, TILE_SIZE), (0, 0, 0, 0))


def _as_layer(img: Image.Image) -> Image.Image:
    # RGBA, clipped/padded (transparent) to the tile rect anchored at (0, 0)
    layer = img.convert("RGBA")
    if layer.size != (TILE_SIZE, TILE_SIZE):
        layer = layer.crop((0, 0, TILE_SIZE, TILE_SIZE))
    return layer


class TileCompositor:
    """
    Nearmap imagery over OpenStreetMap.

    Fetch order per tile:
      1) Nearmap (dated when `year` >= 2000). Opaque result -> returned as is.
      2) OpenStreetMap, only when Nearmap failed or came back with alpha.
    Then: both failed -> blank tile; one failed -> the other one; both ok ->
    OSM below, Nearmap composited "over" it.
    """

    def __init__(
        self,
        fetcher: Optional[ImageFetcher] = None,
        api_key: Optional[str] = None,
        tiles_type: str = TilesType.VERT,
        year: int = 0,
        *,
        require_api_key: bool = False,
    ):
        self.fetcher = fetcher or ImageFetcher()
        self.api_key = api_key or ""
        self.tiles_type = TilesType(tiles_type)
        self.year = int(year)
        if not self.api_key:
            if require_api_key:
                raise ValueError(
                    "Nearmap API key is required. "
                    "Set APIKEYPROD environment variable or nearmap.api_key in the config."
                )
            log.warning(
                "no Nearmap API key configured; Nearmap requests will fail, "
                "OpenStreetMap fallback will be served"
            )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def render(
        self,
        x: int,
        y: int,
        z: int,
        tiles_type: Optional[str] = None,
        year: Optional[int] = None,
    ) -> Image.Image:
        """Render tile (x, y, z). Never raises for upstream problems and never returns None."""
        tiles_type = self.tiles_type if tiles_type is None else TilesType(tiles_type)
        year = self.year if year is None else int(year)
        lon, lat = tile_to_lonlat(x, y, z)

        url = nearmap_url_for(x, y, z, tiles_type, self.api_key, year)
        self._log_attempt("fetching", x, y, z, lon, lat, url)
        nm, err_nm = self._try_fetch(url)
        if nm is not None and is_opaque(nm):
            # Full coverage; the basemap would be hidden anyway.
            return nm

        url2 = openstreetmap_url(x, y, z)
        self._log_attempt("fallback", x, y, z, lon, lat, url2)
        osm, err_osm = self._try_fetch(url2)

        if nm is None and osm is None:
            log.warning("no imagery for z=%d x=%d y=%d: nearmap: %s; osm: %s", z, x, y, err_nm, err_osm)
            return blank_tile()
        if osm is None:
            return nm  # type: ignore[return-value]
        if nm is None:
            return osm

        tile = blank_tile()
        tile = Image.alpha_composite(tile, _as_layer(osm))
        tile = Image.alpha_composite(tile, _as_layer(nm))
        return tile

    # -------- internals --------

    def _try_fetch(self, url: str) -> Tuple[Optional[Image.Image], Optional[Exception]]:
        try:
            return self.fetcher.fetch(url), None
        except (FetchError, DecodeError) as e:
            log.debug("%s: %s", redact_url(url), e)
            return None, e

    @staticmethod
    def _log_attempt(what: str, x: int, y: int, z: int, lon: float, lat: float, url: str) -> None:
        safe_url = redact_url(url)
        log.info(
            "%s z=%d x=%d y=%d lon,lat=%f %f %s",
            what, z, x, y, lon, lat, safe_url,
            extra={"extra": {"z": z, "x": x, "y": y, "lon": lon, "lat": lat, "url": safe_url}},
        )

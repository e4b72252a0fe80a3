"""
Tile Server — aerial imagery over an OpenStreetMap basemap

- Serves GET /{z}/{x}/{y}.png as 256x256 PNG tiles
- Primary: Nearmap Tile API v3 (needs an API key)
- Fallback/base layer: tile.openstreetmap.org
- Optional endpoint: /health

Entry point:
    python -m tileserver.server --listen-addr :8080
"""
from .compositor import TileCompositor
from .coords import TileCoords, parse_tile_path

__all__ = ["TileCompositor", "TileCoords", "parse_tile_path"]

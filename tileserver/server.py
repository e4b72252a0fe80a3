from __future__ import annotations

import argparse
import io
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from PIL import Image

from common.logging_setup import setup_logging
from tileserver.compositor import TileCompositor
from tileserver.config import DEFAULT_CONFIG_PATH, ServerConfig, load_config
from tileserver.coords import parse_tile_path
from tileserver.errors import CoordinateRangeError, EncodeError, PathParseError
from tileserver.fetcher import ImageFetcher


log = logging.getLogger(__name__)


# Modes the PNG writer rejects, mapped to what they are stored as.
_PNG_CONVERT = {
    "CMYK": "RGB",
    "YCbCr": "RGB",
    "LAB": "RGB",
    "HSV": "RGB",
    "F": "L",
    "RGBa": "RGBA",
    "La": "LA",
}


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    try:
        mode = _PNG_CONVERT.get(img.mode)
        if mode is not None:
            img = img.convert(mode)
        img.save(buf, format="PNG")
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(str(e)) from e
    return buf.getvalue()


def build_compositor(cfg: ServerConfig) -> TileCompositor:
    fetcher = ImageFetcher(timeout=cfg.fetch_timeout_s, user_agent=cfg.user_agent)
    return TileCompositor(
        fetcher=fetcher,
        api_key=cfg.api_key,
        tiles_type=cfg.tiles_type,
        year=cfg.year,
        require_api_key=cfg.require_api_key,
    )


def create_app(cfg: Optional[ServerConfig] = None, compositor: Optional[TileCompositor] = None) -> FastAPI:
    cfg = cfg or load_config()
    compositor = compositor or build_compositor(cfg)

    app = FastAPI(title="Aerial Tile Server", version="0.1.0")
    app.state.config = cfg
    app.state.compositor = compositor

    if cfg.cors_allow_origins:
        # Web map clients load tiles cross-origin
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cfg.cors_allow_origins,
            allow_methods=["GET"],
            allow_headers=["*"],
        )

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "api_key": compositor.has_api_key,
            "tiles_type": compositor.tiles_type.value,
            "year": compositor.year,
        }

    # Catch-all so malformed paths reach the validator and get a 400, not a 404.
    @app.get("/{tile_path:path}")
    def tile(request: Request, tile_path: str):
        """
        Return the PNG tile for /{z}/{x}/{y}.png.

        Plain `def`: runs in FastAPI's threadpool, upstream fetches block only this request.
        """
        try:
            coords = parse_tile_path(request.url.path)
        except (PathParseError, CoordinateRangeError) as e:
            log.warning("bad tile request %s: %s", request.url.path, e)
            return PlainTextResponse("bad request", status_code=400)

        img = compositor.render(coords.x, coords.y, coords.z)
        try:
            body = encode_png(img)
        except EncodeError as e:
            log.error("encoding tile %s: %s", coords, e)
            return PlainTextResponse(f"internal server error: {e}", status_code=500)
        return Response(content=body, media_type="image/png")

    return app


setup_logging()
app = create_app()


def main(argv: Optional[list] = None) -> None:
    ap = argparse.ArgumentParser(description="Serve Nearmap-over-OpenStreetMap PNG tiles.")
    ap.add_argument("--listen-addr", default=None, help="address to listen for tile requests on (default :8080)")
    ap.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="YAML config file")
    ap.add_argument("--log-level", default=None, help="DEBUG/INFO/WARNING/ERROR")
    args = ap.parse_args(argv)

    cfg = load_config(args.config)
    if args.listen_addr:
        cfg.listen_addr = args.listen_addr
    setup_logging(args.log_level or cfg.log_level, force=True)

    host, port = cfg.host_port
    log.info("listening on %s:%d", host, port)
    uvicorn.run(create_app(cfg), host=host, port=port, log_config=None)


# -------- local dev entrypoint --------
if __name__ == "__main__":
    main()

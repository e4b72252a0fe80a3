"""Test doubles shared by unit and integration tests."""
import io
import struct
import zlib
from typing import Dict, List, Union

from PIL import Image

from tileserver.errors import FetchError


NEARMAP = "https://api.nearmap.com/"
OSM = "https://tile.openstreetmap.org/"


class FakeFetcher:
    """
    Stands in for ImageFetcher. Responses are keyed by URL prefix; unknown URLs
    raise FetchError. Every call is recorded in `calls`.
    """

    def __init__(self, responses: Dict[str, Union[Image.Image, Exception]]):
        self.responses = responses
        self.calls: List[str] = []

    def fetch(self, url: str) -> Image.Image:
        self.calls.append(url)
        for prefix, result in self.responses.items():
            if url.startswith(prefix):
                if isinstance(result, Exception):
                    raise result
                return result
        raise FetchError("error fetching image")


def encode(img: Image.Image, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


def oversized_png(width: int = 100000, height: int = 100000) -> bytes:
    """A PNG whose header declares `width` x `height` pixels; the pixel data is empty."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", ihdr)
        + _png_chunk(b"IDAT", zlib.compress(b""))
        + _png_chunk(b"IEND", b"")
    )

from __future__ import annotations

import io
import logging
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from tileserver.errors import DecodeError, FetchError
from tileserver.urls import redact_url


log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "aerial-tileserver/0.1"


class ImageFetcher:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """
        HTTP GET + image decode for upstream tiles.

        Params:
            session: optional requests.Session for connection reuse
            timeout: seconds; None keeps the requests default (wait indefinitely)
            user_agent: sent on every request (tile.openstreetmap.org refuses anonymous clients)
        """
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user_agent = user_agent

    def fetch(self, url: str) -> Image.Image:
        """
        Fetch `url` and decode the body (JPEG, PNG, ... auto-detected).

        Raises:
            FetchError: transport error or status != 200 (not distinguished).
            DecodeError: body is not a decodable image.
        """
        try:
            with self.session.get(url, timeout=self.timeout, headers={"User-Agent": self.user_agent}) as r:
                if r.status_code != 200:
                    log.debug("fetch failed: status %s for %s", r.status_code, redact_url(url))
                    raise FetchError("error fetching image")
                body = r.content
        except requests.RequestException as e:
            log.debug("fetch failed: %s for %s", type(e).__name__, redact_url(url))
            raise FetchError("error fetching image") from e

        try:
            img = Image.open(io.BytesIO(body))
            img.load()  # decode now; Image.open is lazy
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DecodeError(f"decoding image: {e}") from e
        return img

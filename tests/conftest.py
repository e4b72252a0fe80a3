import os
import sys

import pytest
from PIL import Image

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(project_root)

from tileserver.errors import DecodeError, FetchError


@pytest.fixture
def opaque_rgb():
    return Image.new("RGB", (256, 256), (10, 120, 30))


@pytest.fixture
def half_transparent_rgba():
    return Image.new("RGBA", (256, 256), (200, 40, 0, 128))


@pytest.fixture
def osm_rgb():
    return Image.new("RGB", (256, 256), (0, 60, 220))


@pytest.fixture
def fetch_failed():
    return FetchError("error fetching image")


@pytest.fixture
def decode_failed():
    return DecodeError("decoding image: cannot identify image file")

import numpy as np
import pytest
from PIL import Image

from lensing_config import LensingConfig
from outcome_table import Outcome, OutcomeTable
from texture import Texture

SKY_RGBA = (10, 20, 30, 255)
SPHERE_RGBA = (200, 100, 50, 255)


@pytest.fixture
def sky():
    return Texture.solid(SKY_RGBA)


@pytest.fixture
def sphere():
    return Texture.solid(SPHERE_RGBA)


@pytest.fixture
def serial_config():
    return LensingConfig(workers=1)


@pytest.fixture
def escaped_table():
    return OutcomeTable.uniform(64, 0.0, Outcome.ESCAPED)


@pytest.fixture
def gradient_sky():
    """8x4 texture whose red channel rises along u and green along v."""
    texels = np.zeros((4, 8, 4), dtype=np.uint8)
    texels[..., 0] = np.arange(8, dtype=np.uint8)[None, :] * 30
    texels[..., 1] = np.arange(4, dtype=np.uint8)[:, None] * 60
    texels[..., 2] = 90
    texels[..., 3] = 255
    return Texture(texels)


@pytest.fixture
def sky_file(tmp_path):
    path = tmp_path / "sky.png"
    Image.new("RGBA", (4, 2), SKY_RGBA).save(path)
    return str(path)


@pytest.fixture
def surface_file(tmp_path):
    path = tmp_path / "surface.png"
    Image.new("RGB", (2, 2), SPHERE_RGBA[:3]).save(path)
    return str(path)

import numpy as np
import pytest
from PIL import Image

from texture import Texture


def red_ramp():
    """2x1 texture: red 0 on the left texel, 200 on the right."""
    texels = np.zeros((1, 2, 4), dtype=np.uint8)
    texels[0, 1, 0] = 200
    texels[..., 3] = 255
    return Texture(texels)


def test_solid_sample_is_argb(sky):
    np.testing.assert_array_equal(sky.sample(0.3, 0.7), [255, 10, 20, 30])


def test_texel_centres_are_exact():
    tex = red_ramp()
    assert tex.sample(0.25, 0.5)[1] == 0
    assert tex.sample(0.75, 0.5)[1] == 200


def test_bilinear_between_centres():
    tex = red_ramp()
    assert tex.sample(0.5, 0.5)[1] == 100
    assert tex.sample(0.625, 0.5)[1] == 150


def test_edges_blend_with_the_opposite_side():
    tex = red_ramp()
    # u = 0 sits halfway between the last texel (wrapped) and the first
    assert tex.sample(0.0, 0.5)[1] == 100
    assert tex.sample(1.0, 0.5)[1] == 100


@pytest.mark.parametrize("shift", [-2.0, -1.0, 1.0, 3.0])
def test_coordinates_wrap(gradient_sky, shift):
    u = np.array([0.125, 0.375, 0.8125], dtype=np.float32)
    v = np.array([0.25, 0.5, 0.875], dtype=np.float32)
    np.testing.assert_array_equal(gradient_sky.sample(u + shift, v - shift),
                                  gradient_sky.sample(u, v))


def test_array_sampling_keeps_shape(gradient_sky):
    u = np.zeros((3, 5), dtype=np.float32)
    assert gradient_sky.sample(u, u).shape == (3, 5, 4)


def test_nan_coordinates_do_not_raise(gradient_sky):
    sample = gradient_sky.sample(np.float32("nan"), 0.5)
    assert sample.dtype == np.uint8


def test_normalized_float_input_is_scaled_and_truncated():
    tex = Texture(np.full((1, 1, 4), 0.5, dtype=np.float32))
    np.testing.assert_array_equal(tex.sample(0.0, 0.0), [127, 127, 127, 127])


def test_rgb_input_gets_opaque_alpha():
    tex = Texture(np.full((2, 2, 3), 40, dtype=np.uint8))
    np.testing.assert_array_equal(tex.sample(0.1, 0.9), [255, 40, 40, 40])


def test_black_is_transparent():
    np.testing.assert_array_equal(Texture.black().sample(0.4, 0.4), [0, 0, 0, 0])


@pytest.mark.parametrize("shape", [(4, 4), (4, 4, 2), (0, 4, 4)])
def test_rejects_bad_shapes(shape):
    with pytest.raises(TypeError):
        Texture(np.zeros(shape, dtype=np.uint8))


def test_from_file(tmp_path):
    path = tmp_path / "tex.png"
    Image.new("RGBA", (3, 3), (1, 2, 3, 4)).save(path)
    tex = Texture.from_file(str(path))
    assert (tex.width, tex.height) == (3, 3)
    np.testing.assert_array_equal(tex.sample(0.5, 0.5), [4, 1, 2, 3])


def test_missing_file_raises_runtime_error(tmp_path):
    with pytest.raises(RuntimeError, match="Cannot open"):
        Texture.from_file(str(tmp_path / "missing.png"))

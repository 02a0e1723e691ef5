import logging
import threading

import numpy as np
import pytest

from utilities import ImageUtils, MathUtils, ParallelUtils, SystemUtils


def test_lerp():
    assert MathUtils.lerp(10.0, 20.0, 0.25) == pytest.approx(12.5)
    assert MathUtils.lerp(10.0, 20.0, 0.0) == 10.0
    assert MathUtils.lerp(10.0, 20.0, 1.0) == 20.0


def test_clamp_to_byte_truncates_and_clamps():
    values = MathUtils.clamp_to_byte([-3.0, 12.9, 255.7, float("nan")])
    assert values.dtype == np.uint8
    assert values.tolist() == [0, 12, 255, 0]


@pytest.mark.parametrize("count, chunks", [(10, 3), (10, 1), (3, 8), (512, 4)])
def test_chunk_ranges_cover_everything_once(count, chunks):
    ranges = ParallelUtils.chunk_ranges(count, chunks)
    assert len(ranges) == min(count, chunks)
    assert ranges[0][0] == 0
    assert ranges[-1][1] == count
    for (_, stop), (start, _) in zip(ranges, ranges[1:]):
        assert stop == start
    assert all(stop > start for start, stop in ranges)


def test_chunk_ranges_of_nothing():
    assert ParallelUtils.chunk_ranges(0, 4) == []


def test_parallel_map_keeps_order():
    def square(x):
        return x * x

    assert ParallelUtils.parallel_map(square, range(20), workers=4) == [x * x for x in range(20)]
    assert ParallelUtils.parallel_map(square, [3], workers=4) == [9]


def test_parallel_map_runs_inline_with_one_worker():
    threads = []
    ParallelUtils.parallel_map(lambda _: threads.append(threading.get_ident()), range(5), workers=1)
    assert set(threads) == {threading.get_ident()}


def test_image_round_trip(tmp_path):
    pixels = np.zeros((2, 3, 3), dtype=np.uint8)
    pixels[1, 2] = (7, 8, 9)
    path = str(tmp_path / "img.png")
    ImageUtils.save_rgb(path, pixels)
    rgba = ImageUtils.load_rgba(path)
    assert rgba.shape == (2, 3, 4)
    assert rgba[1, 2].tolist() == [7, 8, 9, 255]


def test_load_rejects_non_images(tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("not an image")
    with pytest.raises(RuntimeError, match="Cannot open"):
        ImageUtils.load_rgba(str(path))


def test_dependency_versions():
    versions = SystemUtils.get_dependency_versions()
    assert versions["numpy"] == np.__version__
    assert set(versions) == {"numpy", "Pillow", "OpenGL"}


def test_configure_logging_accepts_level():
    SystemUtils.configure_logging(logging.DEBUG)

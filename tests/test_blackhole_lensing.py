import pytest
from PIL import Image

import lensing_scene
from outcome_table import Outcome, OutcomeTable

# Needs the GLFW and OpenGL shared libraries to import
blackhole_lensing = pytest.importorskip("blackhole_lensing")


@pytest.fixture
def fast_table(monkeypatch):
    monkeypatch.setattr(
        lensing_scene, "compute_outcomes",
        lambda ray_min, ray_max, num, start_r, config: OutcomeTable.uniform(num, 0.0, Outcome.ESCAPED),
    )


def test_output_renders_one_frame(fast_table, sky_file, tmp_path):
    output = tmp_path / "frame.png"
    status = blackhole_lensing.main([
        "--sky-file", sky_file, "--width", "16", "--height", "12",
        "--aa", "1", "--outcomes", "16", "--output", str(output),
    ])
    assert status == 0
    with Image.open(output) as img:
        assert img.size == (16, 12)
        assert img.getpixel((8, 6)) == (10, 20, 30)


def test_missing_sky_file_fails(fast_table, tmp_path):
    status = blackhole_lensing.main([
        "--sky-file", str(tmp_path / "missing.png"), "--output", str(tmp_path / "out.png"),
    ])
    assert status == 1
    assert not (tmp_path / "out.png").exists()


def test_mouse_moves_a_quarter_of_the_way_each_frame():
    engine = blackhole_lensing.Engine.__new__(blackhole_lensing.Engine)
    engine.mouse_smoothing = 0.25
    engine.mouse_x, engine.mouse_y = 0.0, 100.0
    engine.on_cursor_pos(None, 100.0, 0.0)

    engine.update_mouse()
    assert (engine.mouse_x, engine.mouse_y) == pytest.approx((25.0, 75.0))

    engine.update_mouse()
    assert (engine.mouse_x, engine.mouse_y) == pytest.approx((43.75, 56.25))

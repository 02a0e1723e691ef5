import numpy as np
import pytest

from outcome_table import Outcome, OutcomeTable

C, E = Outcome.CAPTURED, Outcome.ESCAPED


@pytest.fixture
def table():
    return OutcomeTable(
        angles=[0.1, 0.7, -0.3, 2.0, 2.5],
        outcomes=[E, E, C, C, C],
    )


def test_integer_positions_are_exact(table):
    for i in range(table.num - 1):
        angle, outcome = table.lookup(i)
        assert angle == table.angles[i]
        assert outcome == table.outcomes[i]


def test_blends_between_matching_outcomes(table):
    angle, outcome = table.lookup(0.25)
    assert angle == pytest.approx(0.75 * 0.1 + 0.25 * 0.7, rel=1e-6)
    assert outcome is E

    angle, outcome = table.lookup(2.5)
    assert angle == pytest.approx(0.85, rel=1e-6)
    assert outcome is C


def test_no_blending_across_capture_boundary(table):
    angle, outcome = table.lookup(1.5)
    assert angle == table.angles[1]
    assert outcome is E


def test_out_of_range_positions_are_clamped(table):
    assert table.lookup(-4.0) == table.lookup(0)
    assert table.lookup(1e6) == table.lookup(table.num - 2)
    assert table.lookup(float("nan")) == table.lookup(0)


def test_array_lookup_is_lane_wise(table):
    pos = np.array([[0.0, 0.25], [1.5, 2.5]], dtype=np.float32)
    angles, outcomes = table.lookup(pos)
    assert angles.shape == (2, 2)
    assert angles.dtype == np.float32
    for idx in np.ndindex(pos.shape):
        angle, outcome = table.lookup(float(pos[idx]))
        assert angles[idx] == pytest.approx(angle)
        assert outcomes[idx] == outcome


def test_table_is_read_only(table):
    with pytest.raises(ValueError):
        table.angles[0] = 1.0
    with pytest.raises(ValueError):
        table.outcomes[0] = C


def test_table_copies_its_inputs():
    angles = np.array([0.0, 1.0], dtype=np.float32)
    table = OutcomeTable(angles, [E, E])
    angles[0] = 5.0
    assert table.angles[0] == 0.0


def test_uniform():
    table = OutcomeTable.uniform(4, 0.5, C)
    assert len(table) == 4
    np.testing.assert_array_equal(table.angles, 0.5)
    np.testing.assert_array_equal(table.outcomes, C)


@pytest.mark.parametrize("angles, outcomes", [
    ([0.0, 1.0], [E]),
    ([0.0], [E]),
    ([0.0, 1.0], [E, 2]),
])
def test_invalid_tables_are_rejected(angles, outcomes):
    with pytest.raises(ValueError):
        OutcomeTable(angles, outcomes)

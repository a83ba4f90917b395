"""
Tests for tolerance evaluation.
"""

import pytest
from po_reconciliation.engine.tolerance import evaluate
from po_reconciliation.errors import InvalidInputError


@pytest.mark.parametrize("expected, actual", [(None, 5.0), (5.0, None), (None, None)])
def test_missing_value_is_within_tolerance(expected, actual):
    """No basis for a deviation claim when a side is missing."""
    verdict = evaluate(expected, actual, 0.0)
    assert verdict.within_tolerance is True
    assert verdict.absolute_deviation is None
    assert verdict.percent_deviation is None
    assert verdict.evaluable is False


def test_percent_deviation_formula():
    verdict = evaluate(100.0, 95.0, 10.0)
    assert verdict.absolute_deviation == pytest.approx(-5.0)
    assert verdict.percent_deviation == pytest.approx(-5.0)
    assert verdict.within_tolerance is True
    assert verdict.evaluable is True


def test_sign_is_preserved_but_magnitude_checked():
    """A 20% drop is as far out of a 10% band as a 20% rise."""
    assert evaluate(10.0, 8.0, 10.0).within_tolerance is False
    assert evaluate(10.0, 12.0, 10.0).within_tolerance is False
    assert evaluate(10.0, 8.0, 10.0).percent_deviation == pytest.approx(-20.0)


def test_price_out_of_tolerance():
    verdict = evaluate(10.00, 12.00, 5.0)
    assert verdict.percent_deviation == pytest.approx(20.0)
    assert verdict.within_tolerance is False


def test_boundary_is_inclusive():
    verdict = evaluate(200.0, 210.0, 5.0)
    assert verdict.percent_deviation == pytest.approx(5.0)
    assert verdict.within_tolerance is True


def test_zero_expected_has_no_percent():
    """Division by zero is guarded: the percent is absent, not zero."""
    verdict = evaluate(0.0, 7.0, 1.0)
    assert verdict.absolute_deviation == pytest.approx(7.0)
    assert verdict.percent_deviation is None
    assert verdict.within_tolerance is True
    assert verdict.evaluable is False


@pytest.mark.parametrize("expected, actual", [
    (7.0, 8.0),
    (3.0, 1.0),
    (9.99, 10.49),
    (0.3, 0.1),
    (123.45, 118.2),
])
def test_percent_matches_formula_exactly(expected, actual):
    """Percent is (actual - expected) / expected * 100, computed in that order."""
    verdict = evaluate(expected, actual, 5.0)
    assert verdict.percent_deviation == (actual - expected) / expected * 100


def test_equal_values():
    verdict = evaluate(42.0, 42.0, 0.0)
    assert verdict.absolute_deviation == 0.0
    assert verdict.percent_deviation == 0.0
    assert verdict.within_tolerance is True


def test_negative_threshold_rejected():
    with pytest.raises(InvalidInputError):
        evaluate(1.0, 2.0, -1.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

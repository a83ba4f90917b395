"""
Tolerance evaluation for numeric order/confirmation pairs.
"""

from typing import Optional
from pydantic import BaseModel

from po_reconciliation.errors import InvalidInputError


class ToleranceVerdict(BaseModel):
    """Deviation of an actual value from an expected one."""
    absolute_deviation: Optional[float] = None
    percent_deviation: Optional[float] = None
    within_tolerance: bool = True
    evaluable: bool = True


def evaluate(
    expected: Optional[float],
    actual: Optional[float],
    threshold_percent: float,
) -> ToleranceVerdict:
    """
    Compare an actual value against the expected one.

    Args:
        expected: Value from the purchase order
        actual: Value from the confirmation
        threshold_percent: Maximum accepted absolute deviation, in percent

    Returns:
        ToleranceVerdict. The absolute deviation is signed (actual - expected).
        The percent deviation is None when expected is 0. Whenever no percent
        can be computed (missing input or zero expected value) the verdict
        is within tolerance with evaluable=False.
    """
    if threshold_percent is None or threshold_percent < 0:
        raise InvalidInputError(f"Tolerance threshold must be >= 0, got {threshold_percent}")

    if expected is None or actual is None:
        return ToleranceVerdict(within_tolerance=True, evaluable=False)

    absolute = actual - expected

    if expected == 0:
        return ToleranceVerdict(absolute_deviation=absolute, within_tolerance=True, evaluable=False)

    percent = absolute / expected * 100

    return ToleranceVerdict(
        absolute_deviation=absolute,
        percent_deviation=percent,
        within_tolerance=abs(percent) <= threshold_percent,
    )

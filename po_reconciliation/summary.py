"""
Aggregate statistics over reconciliation results.
"""

from typing import Dict, Iterable, Optional
from statistics import mean
from pydantic import BaseModel, Field

from po_reconciliation.schemas.result import DeviationType, ReconciliationResult
from po_reconciliation.schemas.review import WorkflowStatus


class ReconciliationSummary(BaseModel):
    """Counts and averages across a set of reconciliation results."""
    total: int = 0
    open: int = 0  # open or in review
    with_deviations: int = 0
    in_review: int = 0
    approved: int = 0
    rejected: int = 0
    critical: int = 0
    mean_price_deviation_percent: Optional[float] = None
    mean_quantity_deviation_percent: Optional[float] = None
    deviation_type_counts: Dict[DeviationType, int] = Field(default_factory=dict)
    within_all_tolerances: int = 0
    outside_any_tolerance: int = 0


def is_critical(result: ReconciliationResult) -> bool:
    """Quantity or price out of tolerance with a computed percent deviation."""
    return (
        (not result.within_quantity_tolerance and result.quantity_deviation_percent is not None)
        or (not result.within_price_tolerance and result.price_deviation_percent is not None)
    )


def summarize(results: Iterable[ReconciliationResult]) -> ReconciliationSummary:
    results = list(results)
    by_status = {s: 0 for s in WorkflowStatus}
    for r in results:
        by_status[r.status] += 1

    price_percents = [abs(r.price_deviation_percent) for r in results if r.price_deviation_percent is not None]
    quantity_percents = [abs(r.quantity_deviation_percent) for r in results if r.quantity_deviation_percent is not None]

    type_counts = {t: 0 for t in DeviationType}
    for r in results:
        for tag in r.deviation_types:
            type_counts[tag] += 1

    return ReconciliationSummary(
        total=len(results),
        open=by_status[WorkflowStatus.OPEN] + by_status[WorkflowStatus.IN_REVIEW],
        with_deviations=sum(1 for r in results if r.deviations_present),
        in_review=by_status[WorkflowStatus.IN_REVIEW],
        approved=by_status[WorkflowStatus.APPROVED],
        rejected=by_status[WorkflowStatus.REJECTED],
        critical=sum(1 for r in results if is_critical(r)),
        mean_price_deviation_percent=mean(price_percents) if price_percents else None,
        mean_quantity_deviation_percent=mean(quantity_percents) if quantity_percents else None,
        deviation_type_counts={t: n for t, n in type_counts.items() if n > 0},
        within_all_tolerances=sum(
            1 for r in results if r.within_quantity_tolerance and r.within_price_tolerance
        ),
        outside_any_tolerance=sum(
            1 for r in results if not (r.within_quantity_tolerance and r.within_price_tolerance)
        ),
    )

"""
Reconciliation Engine
Turns one (purchase order, confirmation) pair into a ReconciliationResult.

ORDER OF WORK:
1. Classify raw field differences
2. Evaluate quantity and price against their tolerance bands
3. Derive deviation tags and the deviation flag
4. Emit the result with status "open"

Article number and delivery date deviations are binary: they are tagged
whenever they differ. Quantity and price are tagged when they differ and the
difference is outside tolerance or cannot be measured as a percentage (the
ordered value is 0, or the units of measure differ).
"""

from datetime import date
from typing import Optional, Set

from po_reconciliation.errors import InvalidInputError
from po_reconciliation.engine.classifier import classify
from po_reconciliation.engine.tolerance import evaluate, ToleranceVerdict
from po_reconciliation.schemas.order import PurchaseOrder
from po_reconciliation.schemas.confirmation import OrderConfirmation
from po_reconciliation.schemas.result import DeviationType, ReconciliationResult, ToleranceConfig
from po_reconciliation.schemas.review import WorkflowStatus


def validate_pair(order: PurchaseOrder, confirmation: OrderConfirmation) -> None:
    """Raise InvalidInputError unless the confirmation belongs to the order."""
    if order is None:
        raise InvalidInputError("Purchase order is missing")
    if confirmation is None:
        raise InvalidInputError("Order confirmation is missing")
    if not order.id:
        raise InvalidInputError("Purchase order has no id")
    if not confirmation.id:
        raise InvalidInputError("Order confirmation has no id")
    if confirmation.order_id != order.id:
        raise InvalidInputError(
            f"Confirmation {confirmation.id} references order {confirmation.order_id}, "
            f"not {order.id}"
        )


def _outside_band(verdict: ToleranceVerdict) -> bool:
    """A difference escapes tagging only if it was measured and found within tolerance."""
    return not verdict.within_tolerance or not verdict.evaluable


def reconcile(
    order: PurchaseOrder,
    confirmation: OrderConfirmation,
    config: ToleranceConfig,
    reconciliation_date: Optional[date] = None,
) -> ReconciliationResult:
    """
    Reconcile a purchase order against its confirmation.

    Args:
        order: The purchase order
        confirmation: The confirmation referencing that order
        config: Quantity and price tolerance thresholds in percent
        reconciliation_date: Date stamped on the result (defaults to today)

    Returns:
        An unsaved ReconciliationResult (no id, status "open").

    Raises:
        InvalidInputError: missing input or confirmation of another order
    """
    validate_pair(order, confirmation)
    if config is None:
        raise InvalidInputError("Tolerance configuration is missing")

    facts = classify(order, confirmation)

    if facts.unit_mismatch:
        # Quantities in different units are not comparable
        quantity = ToleranceVerdict(within_tolerance=False, evaluable=False)
    else:
        quantity = evaluate(
            facts.quantity.expected,
            facts.quantity.actual,
            config.quantity_tolerance_percent,
        )
    price = evaluate(facts.price.expected, facts.price.actual, config.price_tolerance_percent)

    deviation_types: Set[DeviationType] = set()
    if facts.quantity.differs and _outside_band(quantity):
        deviation_types.add(DeviationType.QUANTITY)
    if facts.price.differs and _outside_band(price):
        deviation_types.add(DeviationType.PRICE)
    if facts.article_number.differs:
        deviation_types.add(DeviationType.ARTICLE_NUMBER)
    if facts.delivery_date.differs:
        deviation_types.add(DeviationType.DELIVERY_DATE)

    result = ReconciliationResult(
        order_id=order.id,
        confirmation_id=confirmation.id,
        reconciliation_date=reconciliation_date or date.today(),
        deviations_present=bool(deviation_types),
        deviation_types=deviation_types,
        quantity_deviation=quantity.absolute_deviation,
        quantity_deviation_percent=quantity.percent_deviation,
        price_deviation=price.absolute_deviation,
        price_deviation_percent=price.percent_deviation,
        article_number_order=facts.article_number.expected,
        article_number_confirmation=facts.article_number.actual,
        quantity_tolerance_percent=config.quantity_tolerance_percent,
        price_tolerance_percent=config.price_tolerance_percent,
        within_quantity_tolerance=quantity.within_tolerance,
        within_price_tolerance=price.within_tolerance,
        quantity_evaluable=quantity.evaluable,
        price_evaluable=price.evaluable,
        unit_mismatch=facts.unit_mismatch,
        status=WorkflowStatus.OPEN,
    )

    return result

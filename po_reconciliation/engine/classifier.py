"""
Deviation classification.
Compares a purchase order against its confirmation field by field.

RULES:
- A side that is missing never produces a deviation claim
- Article numbers compare trimmed and case-insensitive
- Delivery dates compare as calendar dates
- Differing units of measure make quantities incomparable, which is
  itself a quantity deviation
"""

from typing import Any, Optional, Set
from pydantic import BaseModel

from po_reconciliation.schemas.order import PurchaseOrder
from po_reconciliation.schemas.confirmation import OrderConfirmation
from po_reconciliation.schemas.result import DeviationType


class DimensionFacts(BaseModel):
    """Ordered vs confirmed value for one dimension."""
    expected: Any = None
    actual: Any = None
    differs: bool = False


class DeviationFacts(BaseModel):
    """Raw per-dimension comparison of an order and its confirmation."""
    quantity: DimensionFacts
    price: DimensionFacts
    article_number: DimensionFacts
    delivery_date: DimensionFacts
    unit_mismatch: bool = False

    def differs_set(self) -> Set[DeviationType]:
        """Tags of all dimensions that differ."""
        dimensions = {
            DeviationType.QUANTITY: self.quantity,
            DeviationType.PRICE: self.price,
            DeviationType.ARTICLE_NUMBER: self.article_number,
            DeviationType.DELIVERY_DATE: self.delivery_date,
        }
        return {tag for tag, facts in dimensions.items() if facts.differs}


def normalize_code(value: Optional[str]) -> Optional[str]:
    """Trim and casefold an article number or unit; blank becomes None."""
    if value is None:
        return None
    cleaned = value.strip().casefold()
    return cleaned or None


def _both_present(expected, actual) -> bool:
    return expected is not None and actual is not None


def compare_quantity(order: PurchaseOrder, confirmation: OrderConfirmation) -> DimensionFacts:
    expected = order.ordered_quantity
    actual = confirmation.confirmed_quantity
    differs = _both_present(expected, actual) and expected != actual
    return DimensionFacts(expected=expected, actual=actual, differs=differs)


def units_differ(order: PurchaseOrder, confirmation: OrderConfirmation) -> bool:
    """True when both sides name a unit and the units are not the same."""
    ordered_unit = normalize_code(order.unit_of_measure)
    confirmed_unit = normalize_code(confirmation.unit_of_measure)
    return _both_present(ordered_unit, confirmed_unit) and ordered_unit != confirmed_unit


def compare_price(order: PurchaseOrder, confirmation: OrderConfirmation) -> DimensionFacts:
    expected = order.unit_price
    actual = confirmation.unit_price
    differs = _both_present(expected, actual) and expected != actual
    return DimensionFacts(expected=expected, actual=actual, differs=differs)


def compare_article_number(order: PurchaseOrder, confirmation: OrderConfirmation) -> DimensionFacts:
    expected = normalize_code(order.article_number)
    actual = normalize_code(confirmation.article_number)
    differs = _both_present(expected, actual) and expected != actual
    # Report the values as written, not normalized
    return DimensionFacts(
        expected=order.article_number,
        actual=confirmation.article_number,
        differs=differs,
    )


def compare_delivery_date(order: PurchaseOrder, confirmation: OrderConfirmation) -> DimensionFacts:
    expected = order.expected_delivery_date
    actual = confirmation.confirmed_delivery_date
    differs = _both_present(expected, actual) and expected != actual
    return DimensionFacts(expected=expected, actual=actual, differs=differs)


def classify(order: PurchaseOrder, confirmation: OrderConfirmation) -> DeviationFacts:
    """
    Compare an order with its confirmation in every dimension.

    Returns:
        DeviationFacts with the (expected, actual, differs) triple for
        quantity, price, article number and delivery date.
    """
    quantity = compare_quantity(order, confirmation)
    unit_mismatch = units_differ(order, confirmation)
    if unit_mismatch:
        quantity = quantity.model_copy(update={"differs": True})

    return DeviationFacts(
        quantity=quantity,
        price=compare_price(order, confirmation),
        article_number=compare_article_number(order, confirmation),
        delivery_date=compare_delivery_date(order, confirmation),
        unit_mismatch=unit_mismatch,
    )

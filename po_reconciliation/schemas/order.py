"""
Purchase Order schema.
Represents the buyer's original order as stored by procurement.
"""

from typing import Optional
from pydantic import ConfigDict
from datetime import date

from po_reconciliation.schemas.record import StoredRecord


class PurchaseOrder(StoredRecord):
    """A Purchase Order record. Never mutated by reconciliation."""
    model_config = ConfigDict(frozen=True)

    order_number: Optional[str] = None
    order_date: Optional[date] = None
    supplier_name: Optional[str] = None
    article_number: Optional[str] = None
    article_description: Optional[str] = None
    ordered_quantity: Optional[float] = None
    unit_of_measure: Optional[str] = None
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    expected_delivery_date: Optional[date] = None

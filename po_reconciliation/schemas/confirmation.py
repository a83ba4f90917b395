"""
Order confirmation schema.
Represents the terms a supplier confirmed, as extracted from their document.
"""

from typing import Optional
from pydantic import ConfigDict
from datetime import date

from po_reconciliation.schemas.record import StoredRecord


class OrderConfirmation(StoredRecord):
    """A supplier order confirmation, read-only input to reconciliation."""
    model_config = ConfigDict(frozen=True)

    order_id: Optional[str] = None  # id of the confirmed PurchaseOrder
    article_description: Optional[str] = None
    article_number: Optional[str] = None
    confirmed_quantity: Optional[float] = None
    unit_of_measure: Optional[str] = None
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    confirmed_delivery_date: Optional[date] = None
    supplier_name: Optional[str] = None
    supplier_order_number: Optional[str] = None
    supplier_order_date: Optional[date] = None
    extraction_date: Optional[date] = None
    document: Optional[str] = None  # locator of the ingested PDF

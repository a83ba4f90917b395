"""
Shared fixtures.
"""

import os

os.environ.setdefault("ENV", "test")

import pytest
from datetime import date

from po_reconciliation.schemas.order import PurchaseOrder
from po_reconciliation.schemas.confirmation import OrderConfirmation
from po_reconciliation.schemas.result import ToleranceConfig


ORDER_ID = "694532fe73b552902caa0001"
CONFIRMATION_ID = "69453303665fce2960970001"


@pytest.fixture
def sample_order():
    """Create a sample purchase order."""
    return PurchaseOrder(
        id=ORDER_ID,
        order_number="PO-2026-001",
        order_date=date(2026, 1, 15),
        supplier_name="Acme Corp",
        article_number="A-100",
        article_description="Widget A",
        ordered_quantity=100,
        unit_of_measure="pcs",
        unit_price=10.0,
        total_price=1000.0,
        expected_delivery_date=date(2026, 2, 1),
    )


@pytest.fixture
def matching_confirmation():
    """Create a confirmation that matches the sample order exactly."""
    return OrderConfirmation(
        id=CONFIRMATION_ID,
        order_id=ORDER_ID,
        article_description="Widget A",
        article_number="A-100",
        confirmed_quantity=100,
        unit_of_measure="pcs",
        unit_price=10.0,
        total_price=1000.0,
        confirmed_delivery_date=date(2026, 2, 1),
        supplier_name="Acme Corp",
        supplier_order_number="AB-77",
    )


@pytest.fixture
def tolerance():
    return ToleranceConfig(quantity_tolerance_percent=10.0, price_tolerance_percent=5.0)

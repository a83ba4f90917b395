"""
Reconciliation result schemas.
Defines deviation tags, tolerance settings and the stored comparison outcome.
"""

from enum import Enum
from typing import Optional, Set
from pydantic import BaseModel, Field, model_validator
from datetime import date

from po_reconciliation.schemas.record import StoredRecord
from po_reconciliation.schemas.review import WorkflowStatus


class DeviationType(str, Enum):
    """Dimension in which a confirmation deviates from its order."""
    QUANTITY = "quantity"
    PRICE = "price"
    ARTICLE_NUMBER = "article_number"
    DELIVERY_DATE = "delivery_date"


class ToleranceConfig(BaseModel):
    """Tolerance thresholds for one reconciliation call, in percent."""
    quantity_tolerance_percent: float = Field(ge=0.0)
    price_tolerance_percent: float = Field(ge=0.0)


class ReconciliationResult(StoredRecord):
    """Comparison of one purchase order against one confirmation."""
    order_id: str
    confirmation_id: str
    reconciliation_date: date

    deviations_present: bool = False
    deviation_types: Set[DeviationType] = Field(default_factory=set)

    # Signed deviation (confirmed - ordered) and percent of the ordered value
    quantity_deviation: Optional[float] = None
    quantity_deviation_percent: Optional[float] = None
    price_deviation: Optional[float] = None
    price_deviation_percent: Optional[float] = None

    article_number_order: Optional[str] = None
    article_number_confirmation: Optional[str] = None

    quantity_tolerance_percent: Optional[float] = None
    price_tolerance_percent: Optional[float] = None
    within_quantity_tolerance: bool = True
    within_price_tolerance: bool = True

    # False when a side was missing and no deviation could be computed
    quantity_evaluable: bool = True
    price_evaluable: bool = True
    unit_mismatch: bool = False

    justification: Optional[str] = None
    status: WorkflowStatus = WorkflowStatus.OPEN

    @model_validator(mode="after")
    def _check_deviation_flag(self) -> "ReconciliationResult":
        if self.deviations_present != bool(self.deviation_types):
            raise ValueError(
                "deviations_present must be true exactly when deviation_types is non-empty"
            )
        return self

    def requires_attention(self) -> bool:
        """Open or in review, with at least one deviation."""
        return self.deviations_present and self.status in (
            WorkflowStatus.OPEN,
            WorkflowStatus.IN_REVIEW,
        )

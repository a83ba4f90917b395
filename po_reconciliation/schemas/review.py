"""
Approval workflow schemas: status values, reviewer decisions.
"""

from enum import Enum
from typing import Optional
from pydantic import ConfigDict
from datetime import date

from po_reconciliation.schemas.record import StoredRecord


class WorkflowStatus(str, Enum):
    """Approval status of a reconciliation result."""
    OPEN = "open"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class Decision(str, Enum):
    """What a reviewer recorded."""
    IN_PROGRESS = "in_progress"  # reviewer has started evaluating
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_FOLLOWUP = "request_followup"


class ReviewDecision(StoredRecord):
    """
    A single reviewer action on a reconciliation result.

    Append-only: a result may accumulate several decisions over
    repeated review cycles, none of which is ever changed.
    """
    model_config = ConfigDict(frozen=True)

    result_id: str
    decision: Decision
    reviewer_first_name: Optional[str] = None
    reviewer_last_name: Optional[str] = None
    review_date: Optional[date] = None
    comment: Optional[str] = None
    corrective_action: Optional[str] = None
    follow_up_required: bool = False
    follow_up_date: Optional[date] = None

    @property
    def reviewer_name(self) -> str:
        """Full reviewer name, empty when unknown."""
        parts = [self.reviewer_first_name, self.reviewer_last_name]
        return " ".join(p for p in parts if p)

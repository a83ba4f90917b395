"""
Purchase Order / Order Confirmation Reconciliation
"""

__version__ = "1.0.0"
__description__ = "Reconciles purchase orders against supplier order confirmations"

from po_reconciliation.errors import InvalidInputError, InvalidTransitionError
from po_reconciliation.engine.tolerance import evaluate
from po_reconciliation.engine.classifier import classify
from po_reconciliation.engine.reconciliation import reconcile
from po_reconciliation.engine.workflow import transition, apply_decision
from po_reconciliation.schemas.result import ReconciliationResult, ToleranceConfig, DeviationType
from po_reconciliation.schemas.review import ReviewDecision, WorkflowStatus, Decision

__all__ = [
    "evaluate",
    "classify",
    "reconcile",
    "transition",
    "apply_decision",
    "ReconciliationResult",
    "ToleranceConfig",
    "DeviationType",
    "ReviewDecision",
    "WorkflowStatus",
    "Decision",
    "InvalidInputError",
    "InvalidTransitionError",
]

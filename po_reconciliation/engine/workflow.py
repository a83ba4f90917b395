"""
Approval workflow state machine for reconciliation results.

    open --in_progress--> in_review --approve--> approved
                              |
                              +------reject--> rejected
    rejected --in_progress/request_followup (follow-up required)--> in_review

Approved is final. The machine never touches storage: it maps a status and a
decision to the next status, and callers persist it.
"""

from typing import Dict, FrozenSet, Tuple

from po_reconciliation.errors import InvalidInputError, InvalidTransitionError
from po_reconciliation.schemas.result import ReconciliationResult
from po_reconciliation.schemas.review import Decision, ReviewDecision, WorkflowStatus


TRANSITIONS: Dict[Tuple[WorkflowStatus, Decision], WorkflowStatus] = {
    (WorkflowStatus.OPEN, Decision.IN_PROGRESS): WorkflowStatus.IN_REVIEW,
    (WorkflowStatus.IN_REVIEW, Decision.APPROVE): WorkflowStatus.APPROVED,
    (WorkflowStatus.IN_REVIEW, Decision.REJECT): WorkflowStatus.REJECTED,
    (WorkflowStatus.REJECTED, Decision.IN_PROGRESS): WorkflowStatus.IN_REVIEW,
    (WorkflowStatus.REJECTED, Decision.REQUEST_FOLLOWUP): WorkflowStatus.IN_REVIEW,
}

# Reopening a rejected result needs a submitted follow-up correction
_FOLLOW_UP_ONLY: FrozenSet[WorkflowStatus] = frozenset({WorkflowStatus.REJECTED})


def next_status(
    status: WorkflowStatus,
    decision: Decision,
    follow_up_required: bool = False,
) -> WorkflowStatus:
    """
    Status reached by applying a decision.

    Raises:
        InvalidTransitionError: the decision is not allowed from this status
    """
    status = WorkflowStatus(status)
    decision = Decision(decision)

    target = TRANSITIONS.get((status, decision))
    if target is None:
        raise InvalidTransitionError(status, decision)
    if status in _FOLLOW_UP_ONLY and not follow_up_required:
        raise InvalidTransitionError(status, decision)
    return target


def transition(status: WorkflowStatus, decision: ReviewDecision) -> WorkflowStatus:
    """Status reached by applying a recorded review decision."""
    return next_status(status, decision.decision, decision.follow_up_required)


def allowed_decisions(status: WorkflowStatus) -> FrozenSet[Decision]:
    """Decisions that have a defined transition from the given status."""
    status = WorkflowStatus(status)
    return frozenset(d for (s, d) in TRANSITIONS if s == status)


def apply_decision(result: ReconciliationResult, decision: ReviewDecision) -> ReconciliationResult:
    """
    Return a copy of the result with the decision's status applied.

    The given result is left unchanged whether or not the transition succeeds.
    """
    if result.id is not None and decision.result_id != result.id:
        raise InvalidInputError(
            f"Decision references result {decision.result_id}, not {result.id}"
        )
    new_status = transition(result.status, decision)
    return result.model_copy(update={"status": new_status})

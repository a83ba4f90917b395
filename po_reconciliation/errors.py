"""
Exceptions raised by the reconciliation core.
"""


class ReconciliationError(ValueError):
    """Base class for reconciliation errors."""


class InvalidInputError(ReconciliationError):
    """Missing or malformed order/confirmation, or a referential mismatch."""


class InvalidTransitionError(ReconciliationError):
    """A review decision that the approval workflow does not allow."""

    def __init__(self, status, decision):
        self.status = status
        self.decision = decision
        super().__init__(
            f"Decision '{getattr(decision, 'value', decision)}' is not allowed "
            f"from status '{getattr(status, 'value', status)}'"
        )

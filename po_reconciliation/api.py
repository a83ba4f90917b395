"""
Optional FastAPI REST endpoint for order confirmation reconciliation.
Can be run with: uvicorn po_reconciliation.api:app --reload

Stateless: callers send already-fetched records and persist what comes back.
"""

from typing import List, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from po_reconciliation import __version__
from po_reconciliation.config import get_config
from po_reconciliation.engine.reconciliation import reconcile
from po_reconciliation.engine.workflow import allowed_decisions, transition
from po_reconciliation.errors import InvalidInputError, InvalidTransitionError
from po_reconciliation.schemas.order import PurchaseOrder
from po_reconciliation.schemas.confirmation import OrderConfirmation
from po_reconciliation.schemas.result import ReconciliationResult, ToleranceConfig
from po_reconciliation.schemas.review import ReviewDecision, WorkflowStatus
from po_reconciliation.summary import summarize
from po_reconciliation.utils.logging import setup_logging

app = FastAPI(
    title="Order Confirmation Reconciliation API",
    description="Reconciles purchase orders against supplier confirmations",
    version=__version__,
)

config = get_config()
logger = setup_logging(__name__)


class ReconcileRequest(BaseModel):
    order: PurchaseOrder
    confirmation: OrderConfirmation
    tolerance: Optional[ToleranceConfig] = None


class TransitionRequest(BaseModel):
    status: WorkflowStatus
    decision: ReviewDecision


def _error(status_code: int, error: Exception, message: str) -> JSONResponse:
    return JSONResponse(
        content={
            "error": str(error),
            "message": message,
        },
        status_code=status_code,
    )


@app.post("/reconcile")
async def reconcile_endpoint(request: ReconcileRequest):
    """
    Reconcile one purchase order against its confirmation.

    Uses the configured default tolerances when none are given.
    """
    try:
        result = reconcile(
            request.order,
            request.confirmation,
            request.tolerance or config.tolerance_config(),
        )
    except InvalidInputError as e:
        logger.warning(f"Rejected reconciliation request: {e}")
        return _error(422, e, "Invalid reconciliation input")

    return JSONResponse(content=result.model_dump(mode="json"), status_code=200)


@app.post("/transition")
async def transition_endpoint(request: TransitionRequest):
    """Compute the status a review decision leads to."""
    try:
        new_status = transition(request.status, request.decision)
    except InvalidTransitionError as e:
        return _error(409, e, "Transition not allowed")

    return {
        "result_id": request.decision.result_id,
        "previous_status": request.status.value,
        "status": new_status.value,
        "allowed_decisions": sorted(d.value for d in allowed_decisions(new_status)),
    }


@app.post("/summary")
async def summary_endpoint(results: List[ReconciliationResult]):
    """Aggregate statistics over a list of reconciliation results."""
    return summarize(results).model_dump(mode="json")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/config")
async def get_config_endpoint():
    """Default tolerance thresholds."""
    return {
        "quantity_tolerance_percent": config.QUANTITY_TOLERANCE_PERCENT,
        "price_tolerance_percent": config.PRICE_TOLERANCE_PERCENT,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=config.API_HOST,
        port=config.API_PORT,
        log_level=config.LOG_LEVEL.lower(),
    )

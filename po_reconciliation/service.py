"""
Reconciliation service.
Connects the pure engine to an external record store: fetches records,
runs reconciliation or review transitions, and persists the outcome.
"""

import threading
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional

from po_reconciliation.config import get_config
from po_reconciliation.errors import InvalidInputError
from po_reconciliation.engine.reconciliation import reconcile
from po_reconciliation.engine.workflow import transition
from po_reconciliation.records import (
    Collection,
    RecordStore,
    decode_confirmation,
    decode_purchase_order,
    decode_result,
    decode_review_decision,
    encode_result,
    encode_review_decision,
    encode_status,
)
from po_reconciliation.schemas.result import ReconciliationResult, ToleranceConfig
from po_reconciliation.schemas.review import ReviewDecision
from po_reconciliation.utils.logging import setup_logging, log_deviation, log_transition


logger = setup_logging(__name__)
config = get_config()


class ReconciliationService:
    """Reconciles stored confirmations and records review decisions."""

    def __init__(self, store: RecordStore, tolerance: Optional[ToleranceConfig] = None):
        self.store = store
        self.tolerance = tolerance or config.tolerance_config()
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _lock_for(self, result_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[result_id]

    def reconcile_confirmation(
        self,
        confirmation_id: str,
        tolerance: Optional[ToleranceConfig] = None,
        reconciliation_date: Optional[date] = None,
    ) -> ReconciliationResult:
        """
        Reconcile a stored confirmation against the order it references
        and store the result.

        Returns:
            The stored ReconciliationResult, carrying its assigned id.
        """
        confirmation = decode_confirmation(
            self.store.get_record(Collection.CONFIRMATIONS, confirmation_id)
        )
        if not confirmation.order_id:
            raise InvalidInputError(f"Confirmation {confirmation_id} references no purchase order")

        order = decode_purchase_order(
            self.store.get_record(Collection.PURCHASE_ORDERS, confirmation.order_id)
        )

        result = reconcile(
            order,
            confirmation,
            tolerance or self.tolerance,
            reconciliation_date=reconciliation_date,
        )
        logger.debug(
            f"[ReconciliationService] order={order.id} confirmation={confirmation.id} "
            f"deviations={sorted(t.value for t in result.deviation_types)}"
        )

        stored = decode_result(
            self.store.create_record(Collection.RECONCILIATION_RESULTS, encode_result(result))
        )
        # Flags the wire format does not carry come from the computed result
        stored = stored.model_copy(update={
            "quantity_evaluable": result.quantity_evaluable,
            "price_evaluable": result.price_evaluable,
            "unit_mismatch": result.unit_mismatch,
        })

        if stored.deviations_present:
            log_deviation(
                logger,
                stored.id,
                list(stored.deviation_types),
                stored.within_quantity_tolerance,
                stored.within_price_tolerance,
            )
        else:
            logger.info(f"Confirmation {confirmation_id} matches order {order.id}; result {stored.id}")

        return stored

    def reconcile_all(self, tolerance: Optional[ToleranceConfig] = None) -> List[ReconciliationResult]:
        """Reconcile every stored confirmation that references an order."""
        results = []
        records = self.store.list_records(Collection.CONFIRMATIONS)

        for idx, record in enumerate(records, 1):
            logger.info(f"Reconciling confirmation {idx}/{len(records)}")
            try:
                results.append(self.reconcile_confirmation(record["id"], tolerance))
            except (InvalidInputError, KeyError) as e:
                logger.error(f"Skipping confirmation {record.get('id')}: {e}")
                continue

        logger.info(f"Reconciled {len(results)}/{len(records)} confirmations")
        return results

    def get_result(self, result_id: str) -> ReconciliationResult:
        return decode_result(self.store.get_record(Collection.RECONCILIATION_RESULTS, result_id))

    def record_review(self, decision: ReviewDecision) -> ReconciliationResult:
        """
        Apply a reviewer decision to its reconciliation result.

        The decision is appended to the decision history and the result's
        status updated. If the transition is not allowed, nothing is written.

        Raises:
            InvalidTransitionError: decision not allowed from the current status
        """
        with self._lock_for(decision.result_id):
            record = self.store.get_record(Collection.RECONCILIATION_RESULTS, decision.result_id)
            current = decode_result(record)
            new_status = transition(current.status, decision)

            self.store.create_record(Collection.REVIEW_DECISIONS, encode_review_decision(decision))
            updated = self.store.update_record(
                Collection.RECONCILIATION_RESULTS,
                decision.result_id,
                {"freigabestatus": encode_status(new_status)},
            )

        log_transition(
            logger,
            decision.result_id,
            current.status.value,
            new_status.value,
            reviewer=decision.reviewer_name or None,
        )
        return decode_result(updated)

    def decisions_for(self, result_id: str) -> List[ReviewDecision]:
        """Decision history of a result, in store order."""
        decisions = [
            decode_review_decision(r)
            for r in self.store.list_records(Collection.REVIEW_DECISIONS)
        ]
        return [d for d in decisions if d.result_id == result_id]

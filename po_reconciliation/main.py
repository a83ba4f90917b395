"""
Command line entry point: reconcile exported record-store data.

Usage: python -m po_reconciliation.main <orders.json> <confirmations.json>
"""

import json
from typing import Any, Dict, List, Optional

from po_reconciliation.records import Collection, InMemoryRecordStore
from po_reconciliation.schemas.result import ReconciliationResult, ToleranceConfig
from po_reconciliation.service import ReconciliationService
from po_reconciliation.summary import summarize
from po_reconciliation.utils.logging import setup_logging
from po_reconciliation.utils import dict_to_json_string
from po_reconciliation.config import get_config


logger = setup_logging(__name__)
config = get_config()


def load_records_from_file(path: str) -> List[Dict[str, Any]]:
    """
    Load exported records from a JSON file.

    Accepts a list of records, or the record store's listing format
    (an object keyed by record id).
    """
    with open(path, 'r') as f:
        data = json.load(f)

    if isinstance(data, dict):
        records = [dict(rec, id=record_id) for record_id, rec in data.items()]
    elif isinstance(data, list):
        records = data
    else:
        raise ValueError(f"Unsupported record file layout in {path}")

    logger.info(f"Loaded {len(records)} records from {path}")
    return records


def reconcile_files(
    orders_path: str,
    confirmations_path: str,
    tolerance: Optional[ToleranceConfig] = None,
) -> List[ReconciliationResult]:
    """Reconcile every confirmation in a file against the orders in another."""
    store = InMemoryRecordStore({
        Collection.PURCHASE_ORDERS: load_records_from_file(orders_path),
        Collection.CONFIRMATIONS: load_records_from_file(confirmations_path),
    })
    service = ReconciliationService(store, tolerance or config.tolerance_config())
    return service.reconcile_all()


def format_output_json(results: List[ReconciliationResult]) -> str:
    """Format results and their summary as a JSON string."""
    return dict_to_json_string({
        "results": [r.model_dump(mode="json") for r in results],
        "summary": summarize(results).model_dump(mode="json"),
    })


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 2:
        results = reconcile_files(sys.argv[1], sys.argv[2])
        print(format_output_json(results))
    else:
        print("Usage: python -m po_reconciliation.main <orders.json> <confirmations.json>")

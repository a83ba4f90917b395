"""
Tests for the command line entry point.
"""

import json
import pytest

from po_reconciliation.main import format_output_json, load_records_from_file, reconcile_files
from po_reconciliation.records import Collection, record_url


ORDER_ID = "694532fe73b552902caa0001"


@pytest.fixture
def export_files(tmp_path):
    orders = tmp_path / "orders.json"
    confirmations = tmp_path / "confirmations.json"
    # Listing format: object keyed by record id
    orders.write_text(json.dumps({
        ORDER_ID: {
            "createdat": "2026-01-15T08:00:00",
            "updatedat": None,
            "fields": {"artikelnummer": "A-100", "bestellte_menge": 100, "einzelpreis": 10.0},
        }
    }))
    confirmations.write_text(json.dumps([
        {
            "id": "69453303665fce2960970001",
            "fields": {
                "bestellung": record_url(Collection.PURCHASE_ORDERS, ORDER_ID),
                "ab_artikelnummer": "A-100",
                "ab_menge": 100,
                "ab_einzelpreis": 10.5,
            },
        }
    ]))
    return str(orders), str(confirmations)


def test_load_records_listing_format(export_files):
    records = load_records_from_file(export_files[0])
    assert records[0]["id"] == ORDER_ID


def test_load_records_rejects_other_layouts(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("42")
    with pytest.raises(ValueError):
        load_records_from_file(str(path))


def test_reconcile_files(export_files):
    results = reconcile_files(*export_files)
    assert len(results) == 1
    # 5% price increase exceeds the default 2% price tolerance
    assert results[0].price_deviation_percent == pytest.approx(5.0)

    output = json.loads(format_output_json(results))
    assert output["summary"]["total"] == 1
    assert output["results"][0]["order_id"] == ORDER_ID


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Tests for deviation classification.
"""

import pytest
from datetime import date

from po_reconciliation.engine.classifier import classify, normalize_code
from po_reconciliation.schemas.result import DeviationType


def test_perfect_match_has_no_differences(sample_order, matching_confirmation):
    facts = classify(sample_order, matching_confirmation)
    assert facts.differs_set() == set()
    assert facts.unit_mismatch is False


def test_quantity_difference(sample_order, matching_confirmation):
    confirmation = matching_confirmation.model_copy(update={"confirmed_quantity": 95})
    facts = classify(sample_order, confirmation)
    assert facts.quantity.differs is True
    assert facts.quantity.expected == 100
    assert facts.quantity.actual == 95
    assert facts.differs_set() == {DeviationType.QUANTITY}


def test_price_difference(sample_order, matching_confirmation):
    confirmation = matching_confirmation.model_copy(update={"unit_price": 12.0})
    facts = classify(sample_order, confirmation)
    assert facts.differs_set() == {DeviationType.PRICE}


def test_article_number_case_and_whitespace_ignored(sample_order, matching_confirmation):
    confirmation = matching_confirmation.model_copy(update={"article_number": "  a-100 "})
    facts = classify(sample_order, confirmation)
    assert facts.article_number.differs is False
    # Values are reported as written
    assert facts.article_number.actual == "  a-100 "


def test_article_number_difference(sample_order, matching_confirmation):
    confirmation = matching_confirmation.model_copy(update={"article_number": "A-101"})
    facts = classify(sample_order, confirmation)
    assert facts.differs_set() == {DeviationType.ARTICLE_NUMBER}


def test_delivery_date_difference(sample_order, matching_confirmation):
    confirmation = matching_confirmation.model_copy(
        update={"confirmed_delivery_date": date(2026, 2, 8)}
    )
    facts = classify(sample_order, confirmation)
    assert facts.differs_set() == {DeviationType.DELIVERY_DATE}


def test_missing_side_is_not_a_difference(sample_order, matching_confirmation):
    confirmation = matching_confirmation.model_copy(update={
        "confirmed_quantity": None,
        "unit_price": None,
        "article_number": None,
        "confirmed_delivery_date": None,
    })
    facts = classify(sample_order, confirmation)
    assert facts.differs_set() == set()


def test_unit_mismatch_is_a_quantity_difference(sample_order, matching_confirmation):
    """Same number, different unit: not comparable, so flagged."""
    confirmation = matching_confirmation.model_copy(update={"unit_of_measure": "boxes"})
    facts = classify(sample_order, confirmation)
    assert facts.unit_mismatch is True
    assert facts.quantity.differs is True


def test_unit_compare_is_normalized(sample_order, matching_confirmation):
    confirmation = matching_confirmation.model_copy(update={"unit_of_measure": " PCS"})
    assert classify(sample_order, confirmation).unit_mismatch is False


def test_all_dimensions_differ(sample_order, matching_confirmation):
    confirmation = matching_confirmation.model_copy(update={
        "confirmed_quantity": 80,
        "unit_price": 11.0,
        "article_number": "B-200",
        "confirmed_delivery_date": date(2026, 3, 1),
    })
    assert classify(sample_order, confirmation).differs_set() == set(DeviationType)


def test_normalize_code():
    assert normalize_code(" A-100 ") == "a-100"
    assert normalize_code("   ") is None
    assert normalize_code(None) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Record store boundary.

The external record store keeps four collections of records shaped as
``{"id", "createdat", "updatedat", "fields": {...}}`` with German field
names. This module converts those records to and from the typed schemas,
and defines the store contract the service layer talks to.
"""

import re
import secrets
from enum import Enum
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel, ValidationError

from po_reconciliation.errors import InvalidInputError
from po_reconciliation.schemas.order import PurchaseOrder
from po_reconciliation.schemas.confirmation import OrderConfirmation
from po_reconciliation.schemas.result import DeviationType, ReconciliationResult
from po_reconciliation.schemas.review import Decision, ReviewDecision, WorkflowStatus


RECORD_BASE_URL = "https://my.living-apps.de/rest"

_RECORD_ID_PATTERN = re.compile(r"([a-f0-9]{24})$", re.IGNORECASE)


class Collection(str, Enum):
    """Record collections, valued by their app id in the record store."""
    PURCHASE_ORDERS = "694532fe73b552902caa58ed"
    CONFIRMATIONS = "69453303665fce2960971eb7"
    RECONCILIATION_RESULTS = "694533049c70094c80005f30"
    REVIEW_DECISIONS = "69453305f1dda178412288b8"


class RecordStore(Protocol):
    """CRUD contract of the external record store."""

    def list_records(self, collection: Collection) -> List[Dict[str, Any]]: ...

    def get_record(self, collection: Collection, record_id: str) -> Dict[str, Any]: ...

    def create_record(self, collection: Collection, fields: Dict[str, Any]) -> Dict[str, Any]: ...

    def update_record(self, collection: Collection, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]: ...

    def delete_record(self, collection: Collection, record_id: str) -> bool: ...


# --- Cross references ---

def id_of(locator: Optional[str]) -> Optional[str]:
    """Extract the trailing 24-hex-digit record id from a record URL or id."""
    if not locator:
        return None
    match = _RECORD_ID_PATTERN.search(locator.strip())
    return match.group(1) if match else None


def record_url(collection: Collection, record_id: str) -> str:
    """Locator string the record store uses for cross references."""
    return f"{RECORD_BASE_URL}/apps/{Collection(collection).value}/records/{record_id}"


# --- Wire vocabularies ---

DEVIATION_TAGS = {
    DeviationType.QUANTITY: "mengenabweichung",
    DeviationType.PRICE: "preisabweichung",
    DeviationType.ARTICLE_NUMBER: "artikelnummernabweichung",
    DeviationType.DELIVERY_DATE: "lieferterminabweichung",
}

STATUS_VALUES = {
    WorkflowStatus.OPEN: "offen",
    WorkflowStatus.IN_REVIEW: "in_pruefung",
    WorkflowStatus.APPROVED: "freigegeben",
    WorkflowStatus.REJECTED: "abgelehnt",
}

DECISION_VALUES = {
    Decision.IN_PROGRESS: "in_pruefung",
    Decision.APPROVE: "freigegeben",
    Decision.REJECT: "abgelehnt",
    Decision.REQUEST_FOLLOWUP: "nachverfolgung",
}


def _reverse(mapping: Dict[Enum, str]) -> Dict[str, Enum]:
    return {wire: member for member, wire in mapping.items()}


def encode_deviation_types(tags: Iterable[DeviationType]) -> str:
    """Comma-joined wire tags, in a stable order."""
    return ",".join(sorted(DEVIATION_TAGS[DeviationType(t)] for t in tags))


def decode_deviation_types(value: Any) -> set:
    """Read deviation tags from a comma-joined string or a list."""
    if not value:
        return set()
    items = value.split(",") if isinstance(value, str) else list(value)
    lookup = _reverse(DEVIATION_TAGS)
    tags = set()
    for item in items:
        key = str(item).strip().lower()
        if not key:
            continue
        if key in lookup:
            tags.add(lookup[key])
        else:
            try:
                tags.add(DeviationType(key))
            except ValueError:
                raise InvalidInputError(f"Unknown deviation type: {item!r}")
    return tags


def _decode_enum(value: Any, mapping: Dict[Enum, str], enum_cls: Type[Enum], default=None):
    if value is None or value == "":
        return default
    lookup = _reverse(mapping)
    if value in lookup:
        return lookup[value]
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidInputError(f"Unknown {enum_cls.__name__} value: {value!r}")


# --- Dates ---

def parse_date(value: Any) -> Optional[date]:
    """Accept YYYY-MM-DD or a full ISO timestamp; keep the calendar date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if len(text) > 10:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        raise InvalidInputError(f"Invalid date: {value!r}")


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise InvalidInputError(f"Invalid timestamp: {value!r}")


def _format_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


# --- Decoding ---

M = TypeVar("M", bound=BaseModel)


def _envelope(record: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(record, dict):
        raise InvalidInputError(f"Record must be a mapping, got {type(record).__name__}")
    fields = record.get("fields")
    if fields is None:
        fields = {}
    if not isinstance(fields, dict):
        raise InvalidInputError("Record 'fields' must be a mapping")
    return {
        "id": record.get("id") or record.get("record_id"),
        "created_at": parse_timestamp(record.get("createdat")),
        "updated_at": parse_timestamp(record.get("updatedat")),
    }


def _build(model: Type[M], data: Dict[str, Any]) -> M:
    try:
        return model(**data)
    except ValidationError as e:
        raise InvalidInputError(f"Malformed {model.__name__} record: {e}") from e


def decode_purchase_order(record: Dict[str, Any]) -> PurchaseOrder:
    data = _envelope(record)
    fields = record.get("fields") or {}
    data.update(
        order_number=fields.get("bestellnummer"),
        order_date=parse_date(fields.get("bestelldatum")),
        supplier_name=fields.get("lieferant"),
        article_number=fields.get("artikelnummer"),
        article_description=fields.get("artikelbezeichnung"),
        ordered_quantity=fields.get("bestellte_menge"),
        unit_of_measure=fields.get("mengeneinheit"),
        unit_price=fields.get("einzelpreis"),
        total_price=fields.get("gesamtpreis"),
        expected_delivery_date=parse_date(fields.get("erwartetes_lieferdatum")),
    )
    return _build(PurchaseOrder, data)


def decode_confirmation(record: Dict[str, Any]) -> OrderConfirmation:
    data = _envelope(record)
    fields = record.get("fields") or {}
    data.update(
        order_id=id_of(fields.get("bestellung")),
        article_description=fields.get("ab_artikelbezeichnung"),
        article_number=fields.get("ab_artikelnummer"),
        confirmed_quantity=fields.get("ab_menge"),
        unit_of_measure=fields.get("ab_mengeneinheit"),
        unit_price=fields.get("ab_einzelpreis"),
        total_price=fields.get("ab_gesamtpreis"),
        confirmed_delivery_date=parse_date(fields.get("ab_liefertermin")),
        supplier_name=fields.get("lieferant_name"),
        supplier_order_number=fields.get("auftragsnummer"),
        supplier_order_date=parse_date(fields.get("auftragsdatum")),
        extraction_date=parse_date(fields.get("extraktionsdatum")),
        document=fields.get("pdf_dokument"),
    )
    return _build(OrderConfirmation, data)


def decode_result(record: Dict[str, Any]) -> ReconciliationResult:
    data = _envelope(record)
    fields = record.get("fields") or {}
    tags = decode_deviation_types(fields.get("abweichungstyp"))
    data.update(
        order_id=id_of(fields.get("bestellung")),
        confirmation_id=id_of(fields.get("auftragsbestaetigung")),
        reconciliation_date=parse_date(fields.get("abgleichsdatum")),
        deviations_present=bool(tags),
        deviation_types=tags,
        quantity_deviation=fields.get("mengenabweichung_wert"),
        quantity_deviation_percent=fields.get("mengenabweichung_prozent"),
        price_deviation=fields.get("preisabweichung_wert"),
        price_deviation_percent=fields.get("preisabweichung_prozent"),
        article_number_order=fields.get("artikelnummer_bestellung"),
        article_number_confirmation=fields.get("artikelnummer_ab"),
        quantity_tolerance_percent=fields.get("mengentoleranzschwelle"),
        price_tolerance_percent=fields.get("preistoleranz_schwelle"),
        within_quantity_tolerance=fields.get("innerhalb_mengentoleran") is not False,
        within_price_tolerance=fields.get("innerhalb_preistoleranz") is not False,
        justification=fields.get("abweichungsbegruendung"),
        # Not stored; a missing percent means no percent could be computed
        quantity_evaluable=fields.get("mengenabweichung_prozent") is not None,
        price_evaluable=fields.get("preisabweichung_prozent") is not None,
        unit_mismatch=(
            DeviationType.QUANTITY in tags
            and fields.get("mengenabweichung_prozent") is None
            and fields.get("mengenabweichung_wert") is None
        ),
        status=_decode_enum(
            fields.get("freigabestatus"), STATUS_VALUES, WorkflowStatus, WorkflowStatus.OPEN
        ),
    )
    flag = fields.get("abweichungen_vorhanden")
    if flag is not None and bool(flag) != bool(tags):
        raise InvalidInputError(
            f"Result {data['id']}: abweichungen_vorhanden={flag} contradicts abweichungstyp"
        )
    return _build(ReconciliationResult, data)


def decode_review_decision(record: Dict[str, Any]) -> ReviewDecision:
    data = _envelope(record)
    fields = record.get("fields") or {}
    data.update(
        result_id=id_of(fields.get("abgleichsergebnis")),
        decision=_decode_enum(fields.get("freigabeentscheidung"), DECISION_VALUES, Decision),
        reviewer_first_name=fields.get("pruefer_vorname"),
        reviewer_last_name=fields.get("pruefer_nachname"),
        review_date=parse_date(fields.get("pruefdatum")),
        comment=fields.get("kommentar"),
        corrective_action=fields.get("korrekturmassnahmen"),
        follow_up_required=bool(fields.get("nachverfolgung_erforderlich", False)),
        follow_up_date=parse_date(fields.get("nachverfolgungsdatum")),
    )
    return _build(ReviewDecision, data)


# --- Encoding ---

def _drop_none(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


def encode_purchase_order(order: PurchaseOrder) -> Dict[str, Any]:
    return _drop_none({
        "bestellnummer": order.order_number,
        "bestelldatum": _format_date(order.order_date),
        "lieferant": order.supplier_name,
        "artikelnummer": order.article_number,
        "artikelbezeichnung": order.article_description,
        "bestellte_menge": order.ordered_quantity,
        "mengeneinheit": order.unit_of_measure,
        "einzelpreis": order.unit_price,
        "gesamtpreis": order.total_price,
        "erwartetes_lieferdatum": _format_date(order.expected_delivery_date),
    })


def encode_confirmation(confirmation: OrderConfirmation) -> Dict[str, Any]:
    order_ref = (
        record_url(Collection.PURCHASE_ORDERS, confirmation.order_id)
        if confirmation.order_id else None
    )
    return _drop_none({
        "bestellung": order_ref,
        "ab_artikelbezeichnung": confirmation.article_description,
        "ab_artikelnummer": confirmation.article_number,
        "ab_menge": confirmation.confirmed_quantity,
        "ab_mengeneinheit": confirmation.unit_of_measure,
        "ab_einzelpreis": confirmation.unit_price,
        "ab_gesamtpreis": confirmation.total_price,
        "ab_liefertermin": _format_date(confirmation.confirmed_delivery_date),
        "lieferant_name": confirmation.supplier_name,
        "auftragsnummer": confirmation.supplier_order_number,
        "auftragsdatum": _format_date(confirmation.supplier_order_date),
        "extraktionsdatum": _format_date(confirmation.extraction_date),
        "pdf_dokument": confirmation.document,
    })


def encode_result(result: ReconciliationResult) -> Dict[str, Any]:
    return _drop_none({
        "bestellung": record_url(Collection.PURCHASE_ORDERS, result.order_id),
        "auftragsbestaetigung": record_url(Collection.CONFIRMATIONS, result.confirmation_id),
        "abgleichsdatum": _format_date(result.reconciliation_date),
        "abweichungen_vorhanden": result.deviations_present,
        "abweichungstyp": encode_deviation_types(result.deviation_types) or None,
        "mengenabweichung_wert": result.quantity_deviation,
        "mengenabweichung_prozent": result.quantity_deviation_percent,
        "preisabweichung_wert": result.price_deviation,
        "preisabweichung_prozent": result.price_deviation_percent,
        "artikelnummer_bestellung": result.article_number_order,
        "artikelnummer_ab": result.article_number_confirmation,
        "mengentoleranzschwelle": result.quantity_tolerance_percent,
        "preistoleranz_schwelle": result.price_tolerance_percent,
        "innerhalb_mengentoleran": result.within_quantity_tolerance,
        "innerhalb_preistoleranz": result.within_price_tolerance,
        "abweichungsbegruendung": result.justification,
        "freigabestatus": encode_status(result.status),
    })


def encode_status(status: WorkflowStatus) -> str:
    return STATUS_VALUES[WorkflowStatus(status)]


def encode_review_decision(decision: ReviewDecision) -> Dict[str, Any]:
    return _drop_none({
        "abgleichsergebnis": record_url(Collection.RECONCILIATION_RESULTS, decision.result_id),
        "freigabeentscheidung": DECISION_VALUES[decision.decision],
        "pruefer_vorname": decision.reviewer_first_name,
        "pruefer_nachname": decision.reviewer_last_name,
        "pruefdatum": _format_date(decision.review_date),
        "kommentar": decision.comment,
        "korrekturmassnahmen": decision.corrective_action,
        "nachverfolgung_erforderlich": decision.follow_up_required,
        "nachverfolgungsdatum": _format_date(decision.follow_up_date),
    })


# --- In-memory store ---

class InMemoryRecordStore:
    """Dict-backed RecordStore, used by tests and the command line."""

    def __init__(self, records: Optional[Dict[Collection, Iterable[Dict[str, Any]]]] = None):
        self._collections: Dict[Collection, Dict[str, Dict[str, Any]]] = {c: {} for c in Collection}
        for collection, items in (records or {}).items():
            for record in items:
                record_id = record.get("id") or record.get("record_id") or self._new_id()
                stored = dict(record, id=record_id)
                stored.pop("record_id", None)
                stored.setdefault("createdat", self._now())
                stored.setdefault("updatedat", None)
                self._collections[Collection(collection)][record_id] = stored

    @staticmethod
    def _new_id() -> str:
        return secrets.token_hex(12)

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    def list_records(self, collection: Collection) -> List[Dict[str, Any]]:
        return [dict(r) for r in self._collections[Collection(collection)].values()]

    def get_record(self, collection: Collection, record_id: str) -> Dict[str, Any]:
        try:
            return dict(self._collections[Collection(collection)][record_id])
        except KeyError:
            raise KeyError(f"No record {record_id} in {Collection(collection).name}")

    def create_record(self, collection: Collection, fields: Dict[str, Any]) -> Dict[str, Any]:
        record_id = self._new_id()
        record = {"id": record_id, "createdat": self._now(), "updatedat": None, "fields": dict(fields)}
        self._collections[Collection(collection)][record_id] = record
        return dict(record)

    def update_record(self, collection: Collection, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        record = self.get_record(collection, record_id)
        record["fields"] = {**record.get("fields", {}), **fields}
        record["updatedat"] = self._now()
        self._collections[Collection(collection)][record_id] = record
        return dict(record)

    def delete_record(self, collection: Collection, record_id: str) -> bool:
        return self._collections[Collection(collection)].pop(record_id, None) is not None

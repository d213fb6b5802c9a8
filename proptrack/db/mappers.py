from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from ..models.portfolio import COLLECTIONS, RECORD_TYPES, EntityStore, Record
from ..utils.coerce import to_bool, to_float, to_int, to_str
from ..utils.logging import get_logger

LOGGER = get_logger("db.mappers")

Coercion = Tuple[Callable[[Any], Any], Any]


# Stored key -> (coercer, default when the stored value is unusable).
FIELD_COERCIONS: Dict[str, Dict[str, Coercion]] = {
    "houses": {
        "roomCount": (to_int, 1),
        "paymentDate": (to_int, 1),
        "mortgagePayment": (to_float, 0.0),
        "mortgageBalance": (to_float, 0.0),
        "insuranceAmount": (to_float, 0.0),
    },
    "rooms": {},
    "tenants": {
        "durationMonths": (to_int, 12),
        "rentDueDate": (to_int, 1),
        "securityDeposit": (to_float, 0.0),
        "baseRent": (to_float, 0.0),
        "garagePrice": (to_float, 0.0),
        "monthlyRent": (to_float, 0.0),
        "hasGarage": (to_bool, False),
        "isActive": (to_bool, True),
    },
    "payments": {
        "amount": (to_float, 0.0),
        "proratedDays": (to_int, None),
        "isProrated": (to_bool, False),
    },
    "leads": {
        "budget": (to_float, 0.0),
        "hasPets": (to_bool, False),
        "isActive": (to_bool, True),
    },
    "showings": {
        "showedPrice": (to_float, 0.0),
        "offeredPrice": (to_float, 0.0),
        "isActive": (to_bool, True),
    },
    "lentItems": {},
}

_ID_KEYS = ("id", "houseId", "roomId", "tenantId")


def clean_record(collection: str, raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Coerce form-era values ("", "800", null) into what the models accept."""

    row = dict(raw)
    for key in _ID_KEYS:
        if key in row and row[key] is not None:
            row[key] = to_str(row[key])
    for key, (coerce, default) in FIELD_COERCIONS.get(collection, {}).items():
        if key not in row:
            continue
        value = coerce(row[key])
        row[key] = default if value is None else value
    if collection == "houses" and row.get("maintenanceLog") is None:
        row.pop("maintenanceLog", None)
    return row


def map_collection(collection: str, raw: Any) -> List[Record]:
    if raw is None:
        LOGGER.info("collection_missing name=%s substituted=[]", collection)
        return []
    if not isinstance(raw, list):
        LOGGER.warning("collection_malformed name=%s type=%s substituted=[]", collection, type(raw).__name__)
        return []
    model = RECORD_TYPES[COLLECTIONS[collection]]
    records: List[Record] = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping):
            LOGGER.warning("record_skipped collection=%s index=%d reason=not_an_object", collection, index)
            continue
        try:
            records.append(model.model_validate(clean_record(collection, item)))
        except ValidationError as exc:
            LOGGER.warning(
                "record_skipped collection=%s index=%d errors=%d", collection, index, exc.error_count()
            )
    return records


def map_state_blob(raw: Optional[Mapping[str, Any]]) -> EntityStore:
    """Build a snapshot from a persisted blob, tolerating missing collections."""

    if not isinstance(raw, Mapping):
        raw = {}
    collections = {}
    for stored_name, field in COLLECTIONS.items():
        value = raw.get(stored_name)
        if value is None and field != stored_name:
            value = raw.get(field)
        collections[field] = map_collection(stored_name, value)
    return EntityStore.model_validate(collections)

"""
Record Normalizer
Turns raw Firestore documents from the waterSources collection into
WaterSource records. Missing fields fall back to defaults; a field holding a
type that cannot be converted raises RecordDecodeError for that document only.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple
import logging
import math

from pydantic import ValidationError

from ..core.exceptions import RecordDecodeError
from ..models.database_models import WaterSource

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Range of epoch milliseconds a datetime can hold
MIN_MILLIS = (datetime.min.replace(tzinfo=timezone.utc) - EPOCH) // timedelta(milliseconds=1)
MAX_MILLIS = (datetime.max.replace(tzinfo=timezone.utc) - EPOCH) // timedelta(milliseconds=1)

STRING_FIELDS = ('name', 'type', 'location', 'status')


class TimestampKind(str, Enum):
    EPOCH_MILLIS = "epoch_millis"
    NATIVE_TIMESTAMP = "native_timestamp"
    ABSENT = "absent"  # missing, null or any other type


def classify_timestamp(value: Any) -> TimestampKind:
    # bool is an int subclass but never a timestamp
    if isinstance(value, bool):
        return TimestampKind.ABSENT
    if isinstance(value, (int, float)):
        return TimestampKind.EPOCH_MILLIS
    # Firestore returns DatetimeWithNanoseconds, a datetime subclass
    if isinstance(value, datetime):
        return TimestampKind.NATIVE_TIMESTAMP
    return TimestampKind.ABSENT


def datetime_to_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // timedelta(milliseconds=1)


def decode_last_updated(value: Any) -> int:
    """Decode lastUpdated into epoch milliseconds, 0 when unknown or out of range."""
    kind = classify_timestamp(value)
    if kind is TimestampKind.EPOCH_MILLIS:
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        if not MIN_MILLIS <= value <= MAX_MILLIS:
            return 0
        return int(value)
    if kind is TimestampKind.NATIVE_TIMESTAMP:
        return datetime_to_millis(value)
    return 0


def _read_string(data: Dict[str, Any], field: str, document_id: str) -> str:
    value = data.get(field)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise RecordDecodeError(
        document_id,
        field,
        f"Field '{field}' of document {document_id} is {type(value).__name__}, expected string",
    )


def water_source_from_document(document) -> WaterSource:
    """
    Convert one Firestore DocumentSnapshot into a WaterSource.

    Raises:
        RecordDecodeError: a string field holds an unconvertible value
    """
    document_id = document.id
    data = document.to_dict() or {}

    fields = {field: _read_string(data, field, document_id) for field in STRING_FIELDS}
    return WaterSource(
        id=document_id,
        last_updated=decode_last_updated(data.get('lastUpdated')),
        **fields,
    )


def _try_normalize(document) -> Tuple[WaterSource | None, Exception | None]:
    try:
        return water_source_from_document(document), None
    except (RecordDecodeError, ValidationError, TypeError, ValueError) as e:
        return None, e


def normalize_documents(documents: Iterable[Any]) -> List[WaterSource]:
    """Normalize every document, keeping order and dropping the ones that fail."""
    sources = []
    for document in documents:
        source, error = _try_normalize(document)
        if error is not None:
            logger.warning(f"Skipping water source document {getattr(document, 'id', '?')}: {error}")
            continue
        sources.append(source)
    return sources

"""JSON codec between entity dataclasses and persisted records.

Records use camelCase keys (``branchId``, ``monthlyRent``, ``isPaid``...)
so collections written by earlier versions of the app stay readable.
"""

import json
import types
from dataclasses import MISSING, fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import lru_cache
from typing import Any, TypeVar, Union, get_args, get_origin, get_type_hints

from rooms_mgmt.exceptions import DeserializationError
from rooms_mgmt.models import Tenant
from rooms_mgmt.models.rental import AppSettings, Branch, Payment, Room, UtilityUsage

T = TypeVar("T")

# Field names whose persisted key is not the plain camelCase form
FIELD_ALIASES: dict[type, dict[str, str]] = {
    Branch: {"branch_id": "id"},
    Room: {"room_id": "id", "tenant": "host"},
    UtilityUsage: {"utility_id": "id"},
    Payment: {"payment_id": "id"},
    Tenant: {},
    AppSettings: {},
}


def camel_case(name: str) -> str:
    """Convert a snake_case field name to camelCase."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def record_key(cls: type, name: str) -> str:
    """Persisted key for field ``name`` of ``cls``."""
    return FIELD_ALIASES.get(cls, {}).get(name) or camel_case(name)


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        # Whole amounts stay integers in JSON, like the numbers the app wrote
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, (datetime, date)):
        return value.isoformat()
    elif is_dataclass(value):
        return to_record(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


def to_record(obj: Any) -> dict:
    """Convert an entity dataclass to a JSON-compatible record."""
    return {record_key(type(obj), f.name): serialize_value(getattr(obj, f.name)) for f in fields(obj)}


@lru_cache(maxsize=None)
def _hints(cls: type) -> dict[str, Any]:
    return get_type_hints(cls)


def _unwrap_optional(hint: Any) -> tuple[Any, bool]:
    """Return the inner type of ``X | None`` and whether None is allowed."""
    if get_origin(hint) in (Union, types.UnionType):
        args = [a for a in get_args(hint) if a is not type(None)]
        return args[0], len(args) != len(get_args(hint))
    return hint, False


def parse_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting the trailing ``Z`` form."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def coerce_value(hint: Any, value: Any) -> Any:
    """Convert a JSON value (or loosely typed input) to the annotated type."""
    inner, optional = _unwrap_optional(hint)
    if value is None:
        if optional:
            return None
        raise DeserializationError(f"Unexpected null for {inner}")

    if inner is Decimal:
        if isinstance(value, bool):
            raise DeserializationError(f"Expected a number, got {value!r}")
        try:
            return value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation as e:
            raise DeserializationError(f"Invalid decimal {value!r}") from e
    if inner is datetime:
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            raise DeserializationError(f"Expected an ISO-8601 string, got {value!r}")
        try:
            return parse_datetime(value)
        except (TypeError, ValueError) as e:
            raise DeserializationError(f"Invalid timestamp {value!r}") from e
    if inner is int:
        if isinstance(value, (bool, dict, list)):
            raise DeserializationError(f"Expected an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise DeserializationError(f"Invalid integer {value!r}") from e
    if inner is bool:
        if not isinstance(value, bool):
            raise DeserializationError(f"Expected true or false, got {value!r}")
        return value
    if inner is str:
        if isinstance(value, (dict, list)):
            raise DeserializationError(f"Expected a string, got {value!r}")
        return str(value)
    if is_dataclass(inner):
        if isinstance(value, inner):
            return value
        if not isinstance(value, dict):
            raise DeserializationError(f"Expected an object for {inner.__name__}, got {value!r}")
        return from_record(inner, value)
    return value


def coerce_fields(cls: type, values: dict[str, Any]) -> dict[str, Any]:
    """Coerce keyword values (``monthly_rent=500``) to the field types of ``cls``."""
    hints = _hints(cls)
    return {name: coerce_value(hints[name], value) if name in hints else value for name, value in values.items()}


def from_record(cls: type[T], record: dict) -> T:
    """Build an entity of type ``cls`` from a persisted record."""
    if not isinstance(record, dict):
        raise DeserializationError(f"Expected an object for {cls.__name__}, got {record!r}")

    hints = _hints(cls)
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        key = record_key(cls, f.name)
        if key in record:
            kwargs[f.name] = coerce_value(hints[f.name], record[key])
        elif f.default is MISSING and f.default_factory is MISSING:
            raise DeserializationError(f"{cls.__name__} record is missing {key!r}")
    return cls(**kwargs)


def encode_collection(records: list[Any]) -> str:
    """Serialize a whole collection to the JSON string stored under its key."""
    return json.dumps([to_record(r) for r in records], ensure_ascii=False)


def decode_collection(cls: type[T], raw: str) -> list[T]:
    """Parse a stored JSON array into entities of type ``cls``."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DeserializationError(f"Stored {cls.__name__} collection is not valid JSON") from e

    if not isinstance(data, list):
        raise DeserializationError(f"Stored {cls.__name__} collection is not a JSON array")
    return [from_record(cls, item) for item in data]


def encode_object(obj: Any) -> str:
    """Serialize a single record (used for settings)."""
    return json.dumps(to_record(obj), ensure_ascii=False)


def decode_object(cls: type[T], raw: str) -> T:
    """Parse a single stored JSON object into ``cls``."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DeserializationError(f"Stored {cls.__name__} is not valid JSON") from e
    return from_record(cls, data)

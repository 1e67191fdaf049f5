"""Custom Temporal DataConverter for lockledger frozen-dataclass types.

Handles serialization of: bytes, datetime, Enum, tuples and nested
dataclasses (Trade -> Claim -> UtcDatetime) by adding __type__ tags during
encoding. Amounts stay JSON integers; Python's json keeps uint256 values exact.
"""

from __future__ import annotations

import dataclasses
import importlib
import json
from datetime import datetime
from enum import Enum
from typing import Any, get_type_hints

from temporalio.converter import (
    CompositePayloadConverter,
    DataConverter,
    DefaultPayloadConverter,
    JSONPlainPayloadConverter,
    JSONTypeConverter,
)

# ---------------------------------------------------------------------------
# Recursive serializer (replaces dataclasses.asdict)
# ---------------------------------------------------------------------------


def _to_json(obj: Any) -> Any:
    """Recursively convert lockledger objects to JSON-compatible values.

    Adds ``__type__`` tags to dataclass instances so that optional nested
    values (Trade.claim) can be round-tripped.
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, bytes):
        return {"__bytes__": obj.hex()}
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        d: dict[str, Any] = {
            "__type__": f"{type(obj).__module__}.{type(obj).__qualname__}",
        }
        for field in dataclasses.fields(obj):
            d[field.name] = _to_json(getattr(obj, field.name))
        return d
    if isinstance(obj, (tuple, list)):
        return [_to_json(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _to_json(v) for k, v in obj.items()}
    msg = f"Cannot encode {type(obj).__name__} for Temporal"
    raise TypeError(msg)


class LockLedgerJSONEncoder(json.JSONEncoder):
    """JSON encoder using _to_json for full lockledger type support."""

    def default(self, o: Any) -> Any:
        return _to_json(o)


# ---------------------------------------------------------------------------
# Recursive deserializer
# ---------------------------------------------------------------------------

# Only resolve classes from these modules.
_ALLOWED_MODULES: frozenset[str] = frozenset({
    "lockledger.claims.types",
    "lockledger.core.types",
    "lockledger.settlement.hooks",
    "lockledger.settlement.types",
})

_CLASS_CACHE: dict[str, type] = {}


def _resolve_class(fqn: str) -> type | None:
    """Resolve a fully qualified class name to a type.

    Only classes from ``_ALLOWED_MODULES`` are resolved, so a crafted
    payload cannot instantiate arbitrary classes.
    """
    if fqn in _CLASS_CACHE:
        return _CLASS_CACHE[fqn]
    parts = fqn.rsplit(".", 1)
    if len(parts) != 2:
        return None
    module_name, class_name = parts
    if module_name not in _ALLOWED_MODULES:
        return None
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    cls = getattr(module, class_name, None)
    if isinstance(cls, type):
        _CLASS_CACHE[fqn] = cls
        return cls
    return None


def _from_json(hint: Any, value: Any) -> Any:
    """Recursively convert JSON values back to lockledger types."""
    if value is None:
        return None

    # Tagged dataclass
    if isinstance(value, dict) and "__type__" in value:
        cls = _resolve_class(value["__type__"])
        if cls is not None and dataclasses.is_dataclass(cls):
            hints = get_type_hints(cls)
            kwargs: dict[str, Any] = {}
            for field in dataclasses.fields(cls):
                if field.name in value:
                    field_hint = hints.get(field.name, Any)
                    kwargs[field.name] = _from_json(field_hint, value[field.name])
            return cls(**kwargs)

    if isinstance(value, dict) and "__bytes__" in value:
        return bytes.fromhex(value["__bytes__"])

    if hint is datetime and isinstance(value, str):
        return datetime.fromisoformat(value)

    # Enum
    if isinstance(hint, type) and issubclass(hint, Enum) and not isinstance(value, Enum):
        return hint(value)

    # tuple from list
    if isinstance(value, list):
        return tuple(_from_json(Any, x) for x in value)

    return value


class LockLedgerJSONTypeConverter(JSONTypeConverter):
    """Deserialize tagged JSON values back to lockledger types."""

    def to_typed_value(self, hint: type, value: Any) -> Any:
        if isinstance(value, dict) and ("__type__" in value or "__bytes__" in value):
            return _from_json(hint, value)
        return JSONTypeConverter.Unhandled


# ---------------------------------------------------------------------------
# Wire up
# ---------------------------------------------------------------------------


class LockLedgerPayloadConverter(CompositePayloadConverter):
    """Payload converter with lockledger-aware JSON handling."""

    def __init__(self) -> None:
        json_converter = JSONPlainPayloadConverter(
            encoder=LockLedgerJSONEncoder,
            custom_type_converters=[LockLedgerJSONTypeConverter()],
        )
        super().__init__(
            *(
                c
                for c in DefaultPayloadConverter.default_encoding_payload_converters
                if not isinstance(c, JSONPlainPayloadConverter)
            ),
            json_converter,
        )


LOCKLEDGER_DATA_CONVERTER = DataConverter(
    payload_converter_class=LockLedgerPayloadConverter,
)

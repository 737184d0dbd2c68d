"""Encoding and shape validation of persisted entities.

Every logical key has one entry in ENTITIES: an encoder to stable text, a
decoder that validates the text and either returns the typed value or
raises StoreCorrupt, a default factory, and the message reported when a
write of that entity fails.

Callers go through decode(), which never raises: it returns a tagged
SchemaResult (ok + value, or not ok + reason).

Shape policy:
  logs           → must be a JSON list; each record is migrated, then
                   validated; records that still fail are dropped
  creature       → strict model check, no field-by-field repair
  customization  → strict model check, no field-by-field repair
  safety,
  micro_index    → non-negative decimal integer
  text_color_pref→ "white" or a palette value
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Literal, NamedTuple, get_args

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from emochild.errors import StoreCorrupt
from emochild.migration import migrate_logs
from emochild.models import (
    DEFAULT_CUSTOMIZATION,
    DEFAULT_TEXT_COLOR,
    CreatureCustomization,
    CreatureState,
    EmotionLog,
    TextColor,
)

logger = logging.getLogger(__name__)

LogicalKey = Literal["logs", "creature", "safety", "customization", "micro_index", "text_color_pref"]

TEXT_COLORS: tuple[str, ...] = get_args(TextColor)
_DECIMAL = re.compile(r"[0-9]+")


class SchemaResult(BaseModel):
    """Tagged outcome of decoding one stored record."""

    ok: bool
    value: Any = None
    reason: str | None = None

    @classmethod
    def accept(cls, value: Any) -> SchemaResult:
        return cls(ok=True, value=value)

    @classmethod
    def reject(cls, reason: str) -> SchemaResult:
        return cls(ok=False, reason=reason)


class Entity(NamedTuple):
    encode: Callable[[Any], str]
    decode: Callable[[str], Any]
    default: Callable[[], Any]
    failure: str


# ---------------------------------------------------------------------------
# Decoders — raise StoreCorrupt on anything unexpected
# ---------------------------------------------------------------------------

def _parse_json(key: str, text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise StoreCorrupt(key, f"invalid JSON: {e}") from e


def _decode_logs(text: str) -> list[EmotionLog]:
    data = _parse_json("logs", text)
    if not isinstance(data, list):
        raise StoreCorrupt("logs", f"expected a list, got {type(data).__name__}")
    logs: list[EmotionLog] = []
    for i, raw in enumerate(migrate_logs(data)):
        try:
            logs.append(EmotionLog.model_validate(raw, strict=True))
        except PydanticValidationError as e:
            logger.warning("Dropping malformed log record #%d: %d error(s)", i, e.error_count())
    return logs


def _record_decoder(
    key: str, model: type[BaseModel], required: tuple[str, ...] = ()
) -> Callable[[str], Any]:
    """`required` names fields that must be stored even though the model has a default for them."""

    def decode(text: str) -> Any:
        data = _parse_json(key, text)
        if not isinstance(data, dict):
            raise StoreCorrupt(key, f"expected an object, got {type(data).__name__}")
        missing = [name for name in required if name not in data]
        if missing:
            raise StoreCorrupt(key, "missing fields: " + ", ".join(missing))
        try:
            return model.model_validate(data, strict=True)
        except PydanticValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise StoreCorrupt(key, f"invalid fields: {fields}") from e

    return decode


def _counter_decoder(key: str) -> Callable[[str], int]:
    def decode(text: str) -> int:
        if not _DECIMAL.fullmatch(text):
            raise StoreCorrupt(key, f"not a decimal integer: {text[:20]!r}")
        return int(text)

    return decode


def _decode_text_color(text: str) -> str:
    if text not in TEXT_COLORS:
        raise StoreCorrupt("text_color_pref", f"unknown colour {text[:20]!r}")
    return text


# ---------------------------------------------------------------------------
# Encoders
# ---------------------------------------------------------------------------

def _encode_logs(logs: list[EmotionLog]) -> str:
    return json.dumps([log.model_dump(exclude_none=True) for log in logs], indent=2)


def _encode_record(record: BaseModel) -> str:
    return record.model_dump_json(indent=2)


def _encode_counter(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    return str(value)


def _encode_text_color(color: str) -> str:
    if color not in TEXT_COLORS:
        raise ValueError(f"unknown colour {color!r}")
    return color


ENTITIES: dict[str, Entity] = {
    "logs": Entity(_encode_logs, _decode_logs, list, "Failed to save data - changes may not persist"),
    "creature": Entity(
        _encode_record,
        _record_decoder("creature", CreatureState, required=("brightness", "size")),
        CreatureState,
        "Failed to save creature state",
    ),
    "safety": Entity(_encode_counter, _counter_decoder("safety"), int, "Failed to save safety score"),
    "customization": Entity(
        _encode_record,
        _record_decoder("customization", CreatureCustomization),
        lambda: DEFAULT_CUSTOMIZATION,
        "Failed to save customization",
    ),
    "micro_index": Entity(
        _encode_counter,
        _counter_decoder("micro_index"),
        int,
        "Failed to save micro-sentence index",
    ),
    "text_color_pref": Entity(
        _encode_text_color,
        _decode_text_color,
        lambda: DEFAULT_TEXT_COLOR,
        "Failed to save text color preference",
    ),
}


def encode(key: str, value: Any) -> str:
    """Serialise a value for `key`. Raises on values of the wrong type."""
    return ENTITIES[key].encode(value)


def decode(key: str, text: str) -> SchemaResult:
    """Validate stored text for `key`. Never raises for bad content."""
    try:
        return SchemaResult.accept(ENTITIES[key].decode(text))
    except StoreCorrupt as e:
        return SchemaResult.reject(e.reason)


def default(key: str) -> Any:
    return ENTITIES[key].default()

"""Conversion of raw BikePoint records into :class:`Station` objects."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from models.records import Station
from services.errors import (
    InvalidNumericValueError,
    MalformedRecordError,
    MissingPropertyError,
)

ID_PREFIX = "BikePoints_"

# ASCII digits with an optional sign.
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

RawRecord = Mapping[str, Any]


def _require(raw: RawRecord, key: str) -> Any:
    if key not in raw or raw[key] is None:
        raise MalformedRecordError(key, "is missing")
    return raw[key]


def _parse_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidNumericValueError(key, value)
    if isinstance(value, int):
        return value
    text = value.strip() if isinstance(value, str) else ""
    if not _INTEGER_PATTERN.fullmatch(text):
        raise InvalidNumericValueError(key, value)
    return int(text)


def _parse_id(raw: RawRecord) -> int:
    value = _require(raw, "id")
    if not isinstance(value, str) or not value.startswith(ID_PREFIX):
        raise MalformedRecordError("id", f"lacks the {ID_PREFIX!r} prefix")
    remainder = value[len(ID_PREFIX):]
    if not (remainder.isascii() and remainder.isdigit()):
        raise InvalidNumericValueError("id", value)
    return int(remainder)


def _parse_float(raw: RawRecord, key: str) -> float:
    value = _require(raw, key)
    if isinstance(value, bool):
        raise InvalidNumericValueError(key, value)
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidNumericValueError(key, value) from exc


def find_property(raw: RawRecord, key: str) -> Any:
    """Return the value of the ``additionalProperties`` entry named ``key``."""
    properties = raw.get("additionalProperties") or []
    for prop in properties:
        if isinstance(prop, Mapping) and prop.get("key") == key:
            return prop.get("value")
    raise MissingPropertyError(key)


def _int_property(raw: RawRecord, key: str) -> int:
    return _parse_int(key, find_property(raw, key))


def _count_property(raw: RawRecord, key: str) -> int:
    value = find_property(raw, key)
    parsed = _parse_int(key, value)
    if parsed < 0:
        raise InvalidNumericValueError(key, value)
    return parsed


def _text_property(raw: RawRecord, key: str) -> str:
    value = find_property(raw, key)
    if value is None:
        raise MalformedRecordError(key, "has no value")
    return str(value)


def normalize_record(raw: RawRecord) -> Station:
    """Build a station, raising :class:`MalformedRecordError` on the first bad field."""
    return Station(
        id=_parse_id(raw),
        name=str(_require(raw, "commonName")),
        lat=_parse_float(raw, "lat"),
        lon=_parse_float(raw, "lon"),
        capacity=_count_property(raw, "NbDocks"),
        bikes=_count_property(raw, "NbBikes"),
        terminal_name=_text_property(raw, "TerminalName"),
        install_date=_int_property(raw, "InstallDate"),
    )


def normalize_records(raws: Iterable[RawRecord]) -> list[Station]:
    return [normalize_record(raw) for raw in raws]

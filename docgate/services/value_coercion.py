from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from docgate.models.common import FieldType
from docgate.services.field_descriptors import FieldDescriptor
from docgate.services.query_errors import (
    InvalidBetweenValueError,
    InvalidDateFormatError,
    InvalidFloatFormatError,
)

_RFC3339_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})$"
)


def parse_rfc3339(text: str) -> datetime:
    """Parse an RFC 3339 date-time such as ``2020-01-01T00:00:00Z``.

    Date-only values and values without an offset are rejected; the result
    is always timezone-aware. Raises ValueError.
    """
    if not _RFC3339_RE.fullmatch(text):
        raise ValueError(f"not an RFC 3339 date-time: {text!r}")
    normalized = text.upper()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    return datetime.fromisoformat(normalized)


def coerce_value(field: FieldDescriptor, param: str, raw: str) -> Any:
    if field.value_type is FieldType.DATETIME:
        try:
            return parse_rfc3339(raw)
        except ValueError:
            raise InvalidDateFormatError(param, raw)
    if field.value_type is FieldType.FLOAT:
        # float() is looser than a base-10 literal: it trims and accepts "1_000".
        if raw != raw.strip() or "_" in raw:
            raise InvalidFloatFormatError(param, raw)
        try:
            return float(raw)
        except ValueError:
            raise InvalidFloatFormatError(param, raw)
    return raw


def parse_between(param: str, raw: str) -> tuple[datetime, datetime]:
    # Ranges are date-only, whatever the declared type of the field.
    parts = raw.split(",")
    if len(parts) != 2:
        raise InvalidBetweenValueError(param, f"expected two comma-separated date-times, got {raw!r}")
    bounds = []
    for label, part in zip(("start", "end"), parts):
        text = part.strip()
        try:
            bounds.append(parse_rfc3339(text))
        except ValueError:
            raise InvalidBetweenValueError(param, f"invalid {label} date format {text!r}")
    return bounds[0], bounds[1]

"""Kind inference for untyped values.

Used when a source cannot report declared column types (JSON records, sqlite
cursors): the Python types of the column values decide the column type, and
strings that look like timestamps are promoted to temporal kinds.
"""

from collections import Counter
from datetime import date, datetime, time
from decimal import Decimal
from functools import lru_cache
from typing import Any, Iterable, Optional

import dateparser

from .logging_config import get_logger

logger = get_logger(__name__)

_DATEPARSER_SETTINGS = {
    "RETURN_AS_TIMEZONE_AWARE": False,
    "PREFER_DAY_OF_MONTH": "first",
}

# Pairs of types that widen into a common type when mixed in one column
_WIDENING = {
    frozenset({int, float}): float,
    frozenset({int, Decimal}): Decimal,
    frozenset({float, Decimal}): Decimal,
    frozenset({date, datetime}): datetime,
}

_TEMPORAL_TYPES = {date, time, datetime}


def temporal_kind_of(value: Any) -> Optional[type]:
    """
    Detect whether a string holds a date, a time or a timestamp.

    Returns:
        date, time or datetime for recognised strings, None otherwise.
    """
    if not isinstance(value, str) or len(value) < 4:
        return None
    text = value.strip()
    has_date_part = "-" in text or "/" in text or "." in text
    has_time_part = ":" in text
    if not (has_date_part or has_time_part):
        return None
    if any(c.isalpha() for c in text.replace("T", "").replace("Z", "")):
        # Month names and the like are left as text
        return None
    try:
        float(text)
        return None
    except ValueError:
        pass
    settings = dict(_DATEPARSER_SETTINGS)
    if has_date_part:
        settings["REQUIRE_PARTS"] = ["day", "month", "year"]
    if dateparser.parse(text, settings=settings) is None:
        return None
    if has_time_part and not has_date_part:
        return time
    if has_time_part:
        return datetime
    return date


def parse_temporal(text: str, target: type) -> Any:
    """
    Parse a string into a date, time or datetime.

    Args:
        text: String representation of the value
        target: One of date, time or datetime

    Returns:
        Parsed value of the requested type

    Raises:
        ValueError: If the string cannot be parsed
    """
    parsed = dateparser.parse(text.strip(), settings=_DATEPARSER_SETTINGS)
    if parsed is None:
        raise ValueError(f"Cannot parse {text!r} as {target.__name__}")
    if target is date:
        return parsed.date()
    if target is time:
        return parsed.time()
    return parsed


def infer_type(values: Iterable[Any]) -> Optional[type]:
    """
    Infer the Python type of a column from all of its values.

    Nulls are ignored. Mixed numeric types widen (int + float -> float),
    date + datetime widens to datetime, and strings that merely look like
    dates or times widen to plain text when free text shares the column.
    Any other mix is a conflict.

    Returns:
        The inferred type, or None when every value is null or the types
        conflict.
    """
    counts = Counter()
    for value in values:
        if value is None:
            continue
        counts[_value_type(value)] += 1

    if not counts:
        return None

    types = set(counts)
    if len(types) == 1:
        return types.pop()

    if str in types and types <= _TEMPORAL_TYPES | {str}:
        return str

    if len(types) == 2:
        widened = _WIDENING.get(frozenset(types))
        if widened is not None:
            return widened

    logger.debug("Conflicting value types in column: %s", dict(counts))
    return None


def _value_type(value: Any) -> type:
    if isinstance(value, bool):
        return bool
    if isinstance(value, (bytearray, memoryview)):
        return bytes
    if isinstance(value, str):
        return _string_kind(value)
    for candidate in (int, float, Decimal, datetime, date, time, bytes):
        if isinstance(value, candidate):
            return candidate
    return type(value)


@lru_cache(maxsize=4096)
def _string_kind(text: str) -> type:
    return temporal_kind_of(text) or str

"""
Type classification for captured columns.

Maps a source column's declared type (SQL type name, Delphi TFieldType name
or Python type) onto the closed set of logical kinds the literal encoder
understands, and extracts size/precision/scale metadata.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class FieldKind(Enum):
    """Logical column kinds, independent of the source's type system."""

    INTEGER = "integer"
    FLOAT = "float"
    CURRENCY = "currency"  # fixed-point
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    STRING = "string"  # text with a declared length
    MEMO = "memo"  # text without a declared length
    BINARY = "binary"
    BOOLEAN = "boolean"
    UNSUPPORTED = "unsupported"

    @property
    def is_text(self) -> bool:
        return self in (FieldKind.STRING, FieldKind.MEMO)


@dataclass(frozen=True)
class ColumnMeta:
    """Type-specific metadata extracted during classification."""

    size: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    source_type: Optional[str] = None
    large: bool = False  # 64-bit integer


# Base SQL type names (upper case, single-spaced, no parameters)
SQL_TYPE_MAP: Dict[str, FieldKind] = {
    # integers
    "INT": FieldKind.INTEGER,
    "INTEGER": FieldKind.INTEGER,
    "SMALLINT": FieldKind.INTEGER,
    "TINYINT": FieldKind.INTEGER,
    "MEDIUMINT": FieldKind.INTEGER,
    "BIGINT": FieldKind.INTEGER,
    "INT2": FieldKind.INTEGER,
    "INT4": FieldKind.INTEGER,
    "INT8": FieldKind.INTEGER,
    "SERIAL": FieldKind.INTEGER,
    "BIGSERIAL": FieldKind.INTEGER,
    "SMALLSERIAL": FieldKind.INTEGER,
    # floating point
    "FLOAT": FieldKind.FLOAT,
    "FLOAT4": FieldKind.FLOAT,
    "FLOAT8": FieldKind.FLOAT,
    "REAL": FieldKind.FLOAT,
    "DOUBLE": FieldKind.FLOAT,
    "DOUBLE PRECISION": FieldKind.FLOAT,
    "BINARY_FLOAT": FieldKind.FLOAT,
    "BINARY_DOUBLE": FieldKind.FLOAT,
    # fixed point
    "DECIMAL": FieldKind.CURRENCY,
    "DEC": FieldKind.CURRENCY,
    "NUMERIC": FieldKind.CURRENCY,
    "NUMBER": FieldKind.CURRENCY,
    "MONEY": FieldKind.CURRENCY,
    "SMALLMONEY": FieldKind.CURRENCY,
    "CURRENCY": FieldKind.CURRENCY,
    # temporal
    "DATE": FieldKind.DATE,
    "TIME": FieldKind.TIME,
    "TIMETZ": FieldKind.TIME,
    "TIME WITH TIME ZONE": FieldKind.TIME,
    "TIME WITHOUT TIME ZONE": FieldKind.TIME,
    "DATETIME": FieldKind.DATETIME,
    "DATETIME2": FieldKind.DATETIME,
    "SMALLDATETIME": FieldKind.DATETIME,
    "DATETIMEOFFSET": FieldKind.DATETIME,
    "TIMESTAMP": FieldKind.DATETIME,
    "TIMESTAMPTZ": FieldKind.DATETIME,
    "TIMESTAMP WITH TIME ZONE": FieldKind.DATETIME,
    "TIMESTAMP WITHOUT TIME ZONE": FieldKind.DATETIME,
    # text
    "CHAR": FieldKind.STRING,
    "NCHAR": FieldKind.STRING,
    "CHARACTER": FieldKind.STRING,
    "VARCHAR": FieldKind.STRING,
    "NVARCHAR": FieldKind.STRING,
    "VARCHAR2": FieldKind.STRING,
    "NVARCHAR2": FieldKind.STRING,
    "CHARACTER VARYING": FieldKind.STRING,
    "NATIONAL CHARACTER VARYING": FieldKind.STRING,
    "STRING": FieldKind.STRING,
    "TEXT": FieldKind.MEMO,
    "NTEXT": FieldKind.MEMO,
    "TINYTEXT": FieldKind.MEMO,
    "MEDIUMTEXT": FieldKind.MEMO,
    "LONGTEXT": FieldKind.MEMO,
    "CLOB": FieldKind.MEMO,
    "NCLOB": FieldKind.MEMO,
    "MEMO": FieldKind.MEMO,
    # binary
    "BLOB": FieldKind.BINARY,
    "TINYBLOB": FieldKind.BINARY,
    "MEDIUMBLOB": FieldKind.BINARY,
    "LONGBLOB": FieldKind.BINARY,
    "BINARY": FieldKind.BINARY,
    "VARBINARY": FieldKind.BINARY,
    "BYTEA": FieldKind.BINARY,
    "IMAGE": FieldKind.BINARY,
    "RAW": FieldKind.BINARY,
    # boolean
    "BOOL": FieldKind.BOOLEAN,
    "BOOLEAN": FieldKind.BOOLEAN,
    "BIT": FieldKind.BOOLEAN,
}

# Delphi TFieldType names, lower case without the "ft" prefix
DELPHI_FIELD_TYPE_MAP: Dict[str, FieldKind] = {
    "smallint": FieldKind.INTEGER,
    "integer": FieldKind.INTEGER,
    "word": FieldKind.INTEGER,
    "largeint": FieldKind.INTEGER,
    "autoinc": FieldKind.INTEGER,
    "shortint": FieldKind.INTEGER,
    "byte": FieldKind.INTEGER,
    "longword": FieldKind.INTEGER,
    "float": FieldKind.FLOAT,
    "single": FieldKind.FLOAT,
    "extended": FieldKind.FLOAT,
    "currency": FieldKind.CURRENCY,
    "bcd": FieldKind.CURRENCY,
    "fmtbcd": FieldKind.CURRENCY,
    "date": FieldKind.DATE,
    "time": FieldKind.TIME,
    "datetime": FieldKind.DATETIME,
    "timestamp": FieldKind.DATETIME,
    "string": FieldKind.STRING,
    "widestring": FieldKind.STRING,
    "fixedchar": FieldKind.STRING,
    "fixedwidechar": FieldKind.STRING,
    "memo": FieldKind.MEMO,
    "widememo": FieldKind.MEMO,
    "fmtmemo": FieldKind.MEMO,
    "blob": FieldKind.BINARY,
    "bytes": FieldKind.BINARY,
    "varbytes": FieldKind.BINARY,
    "graphic": FieldKind.BINARY,
    "boolean": FieldKind.BOOLEAN,
}

# Order matters: bool before int, datetime before date
PYTHON_TYPE_MAP: Tuple[Tuple[type, FieldKind], ...] = (
    (bool, FieldKind.BOOLEAN),
    (int, FieldKind.INTEGER),
    (float, FieldKind.FLOAT),
    (Decimal, FieldKind.CURRENCY),
    (datetime, FieldKind.DATETIME),
    (date, FieldKind.DATE),
    (time, FieldKind.TIME),
    (str, FieldKind.MEMO),
    (bytes, FieldKind.BINARY),
    (bytearray, FieldKind.BINARY),
    (memoryview, FieldKind.BINARY),
)

# Integer type names declared 64 bits wide (SQL and Delphi)
LARGE_INTEGER_TYPES = {"BIGINT", "INT8", "BIGSERIAL", "LARGEINT"}

# Range of a 32-bit ftInteger field
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_SQL_TYPE_RE = re.compile(
    r"^\s*(?P<base>[A-Za-z_][A-Za-z0-9_ ]*)"
    r"(?:\(\s*(?P<first>\d+|max)\s*(?:,\s*(?P<second>-?\d+)\s*)?\))?"
    r"(?P<tail>[A-Za-z ]*)$",
    re.IGNORECASE,
)


def classify(
    type_info: Any,
    size: Optional[int] = None,
    precision: Optional[int] = None,
    scale: Optional[int] = None,
) -> Tuple[FieldKind, ColumnMeta]:
    """
    Classify a source column type.

    Args:
        type_info: SQL type name, Delphi TFieldType name, Python type or None
        size: Declared length for text/binary, overrides the parsed one
        precision: Declared precision for fixed-point, overrides the parsed one
        scale: Declared scale for fixed-point, overrides the parsed one

    Returns:
        Tuple of (FieldKind, ColumnMeta). Unrecognised types map to
        FieldKind.UNSUPPORTED; this function never raises.
    """
    if isinstance(type_info, type):
        kind, parsed = _classify_python_type(type_info)
    elif isinstance(type_info, str) and type_info.strip():
        kind, parsed = _classify_type_name(type_info)
    else:
        kind, parsed = FieldKind.UNSUPPORTED, ColumnMeta(
            source_type=None if type_info is None else repr(type_info)
        )

    meta = ColumnMeta(
        size=_positive_or_none(size if size is not None else parsed.size),
        precision=_positive_or_none(
            precision if precision is not None else parsed.precision
        ),
        scale=scale if scale is not None else parsed.scale,
        source_type=parsed.source_type,
    )
    if meta.scale is not None and meta.scale < 0:
        meta = ColumnMeta(
            size=meta.size, precision=meta.precision, source_type=meta.source_type
        )

    if kind.is_text:
        # Declared length decides fixed-width vs variable-width text
        kind = FieldKind.STRING if meta.size else FieldKind.MEMO
    if kind != FieldKind.CURRENCY:
        meta = ColumnMeta(
            size=meta.size if kind in (FieldKind.STRING, FieldKind.BINARY) else None,
            source_type=meta.source_type,
            large=kind == FieldKind.INTEGER and parsed.large,
        )
    return kind, meta


def _classify_python_type(py_type: type) -> Tuple[FieldKind, ColumnMeta]:
    for candidate, kind in PYTHON_TYPE_MAP:
        if issubclass(py_type, candidate):
            return kind, ColumnMeta(source_type=py_type.__name__)
    return FieldKind.UNSUPPORTED, ColumnMeta(source_type=py_type.__name__)


def _classify_type_name(type_name: str) -> Tuple[FieldKind, ColumnMeta]:
    text = type_name.strip()

    # Delphi TFieldType names ("ftWideString")
    if text[:2].lower() == "ft" and text[2:].lower() in DELPHI_FIELD_TYPE_MAP:
        name = text[2:].lower()
        return DELPHI_FIELD_TYPE_MAP[name], ColumnMeta(
            source_type=text, large=name.upper() in LARGE_INTEGER_TYPES
        )

    match = _SQL_TYPE_RE.match(text)
    if not match:
        return FieldKind.UNSUPPORTED, ColumnMeta(source_type=text)

    base = " ".join(match.group("base").upper().split())
    tail = " ".join(match.group("tail").upper().split())
    kind = SQL_TYPE_MAP.get(base)
    if kind is None and tail:
        kind = SQL_TYPE_MAP.get(f"{base} {tail}")
    if kind is None:
        # "UNSIGNED BIGINT", "INT UNSIGNED", "LONG VARCHAR"
        for word in reversed(base.split(" ")):
            if word in SQL_TYPE_MAP:
                kind = SQL_TYPE_MAP[word]
                break
        else:
            kind = FieldKind.UNSUPPORTED

    first = match.group("first")
    second = match.group("second")
    first_value = int(first) if first and first.lower() != "max" else None
    second_value = int(second) if second is not None else None

    if kind == FieldKind.CURRENCY:
        scale = second_value
        if scale is None and first_value is not None:
            scale = 0
        return kind, ColumnMeta(
            precision=first_value, scale=scale, source_type=text
        )
    if kind in (FieldKind.STRING, FieldKind.MEMO, FieldKind.BINARY):
        return kind, ColumnMeta(size=first_value, source_type=text)
    if kind == FieldKind.INTEGER:
        words = set(base.split(" "))
        return kind, ColumnMeta(
            source_type=text, large=bool(words & LARGE_INTEGER_TYPES)
        )
    return kind, ColumnMeta(source_type=text)


def _positive_or_none(value: Optional[int]) -> Optional[int]:
    if value is None or value <= 0:
        return None
    return value


def field_type_tag(kind: FieldKind, meta: ColumnMeta) -> Tuple[str, Optional[int]]:
    """
    Map a logical kind to the Delphi TFieldType used in field declarations.

    Returns:
        Tuple of (TFieldType name, size argument or None)
    """
    if kind == FieldKind.INTEGER:
        return ("ftLargeint" if meta.large else "ftInteger"), None
    if kind == FieldKind.FLOAT:
        return "ftFloat", None
    if kind == FieldKind.CURRENCY:
        if meta.scale is not None:
            return "ftBCD", meta.scale
        return "ftCurrency", None
    if kind == FieldKind.DATE:
        return "ftDate", None
    if kind == FieldKind.TIME:
        return "ftTime", None
    if kind == FieldKind.DATETIME:
        return "ftDateTime", None
    if kind == FieldKind.STRING:
        return "ftWideString", meta.size
    if kind == FieldKind.BINARY:
        if meta.size:
            return "ftVarBytes", meta.size
        return "ftBlob", None
    if kind == FieldKind.BOOLEAN:
        return "ftBoolean", None
    # MEMO, and UNSUPPORTED values are rendered as text
    return "ftWideMemo", None

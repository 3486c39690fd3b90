"""
Literal encoding for row values.

Turns one captured value into Pascal source text: numbers with a ``.``
decimal separator, dates and times as ``EncodeDate``/``EncodeTime`` calls,
strings quoted with doubled quotes and ``#nn`` character codes, and long
strings split into ``+``-joined segments at the right margin.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Tuple

from .config import DEFAULT_OPTIONS, GeneratorOptions
from .schema import ColumnDescriptor
from .types import FieldKind

NULL_LITERAL = "Null"
CONCAT_SUFFIX = " +"

# A wrapped segment always carries at least this many characters
MIN_SEGMENT_UNITS = 8

# (text, quoted): quoted units live inside '...', the rest are #nn codes
_Unit = Tuple[str, bool]


@dataclass(frozen=True)
class EncodedLiteral:
    """Encoded value, possibly split into several line segments."""

    segments: Tuple[str, ...]
    lossy: bool = False
    note: Optional[str] = None

    @property
    def text(self) -> str:
        return (CONCAT_SUFFIX + "\n").join(self.segments)

    @property
    def is_wrapped(self) -> bool:
        return len(self.segments) > 1


NULL = EncodedLiteral((NULL_LITERAL,))


class LiteralEncoder:
    """Encodes values for one generation call."""

    def __init__(self, options: GeneratorOptions):
        self.options = options
        self.right_margin = options.right_margin

    def encode(
        self,
        value: Any,
        column: ColumnDescriptor,
        start_column: int = 0,
        continuation_column: int = 0,
    ) -> EncodedLiteral:
        """
        Encode a single value of the given column.

        Args:
            value: Captured value, None for null
            column: Column the value belongs to
            start_column: Zero-based line position where the literal starts
            continuation_column: Line position of wrapped segments

        Returns:
            EncodedLiteral; only text values produce more than one segment
        """
        if value is None:
            return NULL

        kind = column.kind
        if kind == FieldKind.UNSUPPORTED:
            encoded = self._encode_text(str(value), start_column, continuation_column)
            return EncodedLiteral(
                encoded.segments,
                lossy=True,
                note=f"unsupported type {column.source_type or type(value).__name__} "
                "rendered as text",
            )
        if kind == FieldKind.BOOLEAN:
            return EncodedLiteral(("True" if value else "False",))
        if kind == FieldKind.INTEGER:
            return EncodedLiteral((str(int(value)),))
        if kind == FieldKind.FLOAT:
            return self._encode_float(value)
        if kind == FieldKind.CURRENCY:
            return self._encode_decimal(value, column.scale)
        if kind == FieldKind.DATE:
            return EncodedLiteral((encode_date(value),))
        if kind == FieldKind.TIME:
            return self._encode_time(value)
        if kind == FieldKind.DATETIME:
            return self._encode_datetime(value)
        if kind == FieldKind.BINARY:
            return EncodedLiteral(
                (encode_bytes(value),),
                lossy=True,
                note="binary data rendered as a variant array of bytes",
            )
        return self._encode_text(value, start_column, continuation_column)

    # Numbers

    def _encode_float(self, value: Any) -> EncodedLiteral:
        number = float(value)
        if math.isnan(number) or math.isinf(number):
            return EncodedLiteral(
                (NULL_LITERAL,), lossy=True, note=f"{number!r} has no literal form"
            )
        text = repr(number)
        if text.endswith(".0"):
            text = text[:-2]
        return EncodedLiteral((text,))

    def _encode_decimal(self, value: Any, scale: Optional[int]) -> EncodedLiteral:
        if isinstance(value, float):
            number = Decimal(repr(value))
        else:
            number = Decimal(value)
        if not number.is_finite():
            return EncodedLiteral(
                (NULL_LITERAL,), lossy=True, note=f"{number} has no literal form"
            )
        if scale is not None:
            try:
                quantized = number.quantize(Decimal(1).scaleb(-scale))
            except InvalidOperation:
                quantized = None
            # Keep every digit when the declared scale would round the value
            if quantized is not None and quantized == number:
                number = quantized
        return EncodedLiteral((format(number, "f"),))

    # Temporal values

    def _encode_time(self, value: time) -> EncodedLiteral:
        notes = []
        if value.microsecond % 1000:
            notes.append("sub-millisecond precision dropped")
        if value.tzinfo is not None:
            notes.append("time zone dropped")
        return EncodedLiteral(
            (encode_time(value),),
            lossy=bool(notes),
            note=", ".join(notes) or None,
        )

    def _encode_datetime(self, value: datetime) -> EncodedLiteral:
        notes = []
        if value.microsecond % 1000:
            notes.append("sub-millisecond precision dropped")
        if value.tzinfo is not None:
            notes.append("time zone dropped")
        text = f"{encode_date(value)}+{encode_time(value.time())}"
        return EncodedLiteral(
            (text,), lossy=bool(notes), note=", ".join(notes) or None
        )

    # Text

    def _encode_text(
        self, value: str, start_column: int, continuation_column: int
    ) -> EncodedLiteral:
        units = text_units(value)
        width = rendered_width(units)
        # An empty literal has nothing to split
        if not units or not self.right_margin or start_column + width <= self.right_margin:
            return EncodedLiteral((render_units(units),))
        return EncodedLiteral(
            tuple(
                render_units(segment)
                for segment in self._split(units, start_column, continuation_column)
            )
        )

    def _split(
        self, units: List[_Unit], start_column: int, continuation_column: int
    ) -> List[List[_Unit]]:
        segments = []
        position = 0
        column = start_column
        while position < len(units):
            remaining = units[position:]
            room = self.right_margin - column
            if rendered_width(remaining) <= room:
                segments.append(remaining)
                break

            count = fit_count(remaining, room - len(CONCAT_SUFFIX))
            count = max(count, min(MIN_SEGMENT_UNITS, len(remaining)))
            if count >= len(remaining):
                segments.append(remaining)
                break

            # Prefer ending a segment right after a space
            for end in range(count, (count + 1) // 2 - 1, -1):
                if remaining[end - 1] == (" ", True):
                    count = end
                    break

            segments.append(remaining[:count])
            position += count
            column = continuation_column
        return segments


def text_units(value: str) -> List[_Unit]:
    """Split a string into atomic literal units (escaped quote pairs and #nn codes stay whole)."""
    units = []
    for char in value:
        code = ord(char)
        if char == "'":
            units.append(("''", True))
        elif code < 32 or code == 127:
            units.append((f"#{code}", False))
        else:
            units.append((char, True))
    return units


def render_units(units: List[_Unit]) -> str:
    """Render literal units as Pascal string syntax."""
    if not units:
        return "''"
    parts = []
    in_quote = False
    for text, quoted in units:
        if quoted != in_quote:
            parts.append("'")
            in_quote = quoted
        parts.append(text)
    if in_quote:
        parts.append("'")
    return "".join(parts)


def rendered_width(units: List[_Unit]) -> int:
    """Length of ``render_units(units)`` without building the string."""
    if not units:
        return 2
    width = 0
    in_quote = False
    for text, quoted in units:
        width += len(text)
        if quoted and not in_quote:
            width += 2  # opening and closing quote
        in_quote = quoted
    return width


def fit_count(units: List[_Unit], limit: int) -> int:
    """Largest number of leading units whose rendering fits in ``limit`` characters."""
    width = 0
    in_quote = False
    count = 0
    for text, quoted in units:
        extra = len(text)
        if quoted and not in_quote:
            extra += 2
        if width + extra > limit:
            break
        width += extra
        in_quote = quoted
        count += 1
    return count


def unescape_literal(text: str) -> str:
    """
    Decode Pascal string literal syntax back into the value.

    Accepts quoted runs, ``#nn`` codes and ``+``-joined segments.
    """
    result = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == "'":
            index += 1
            while index < length:
                if text[index] == "'":
                    if index + 1 < length and text[index + 1] == "'":
                        result.append("'")
                        index += 2
                        continue
                    index += 1
                    break
                result.append(text[index])
                index += 1
        elif char == "#":
            index += 1
            start = index
            while index < length and text[index].isdigit():
                index += 1
            result.append(chr(int(text[start:index])))
        elif char in " +\t\r\n":
            index += 1
        else:
            raise ValueError(f"Unexpected character {char!r} in string literal")
    return "".join(result)


# Constructors for temporal and binary values


def encode_date(value: date) -> str:
    return f"EncodeDate({value.year},{value.month},{value.day})"


def encode_time(value: time) -> str:
    return (
        f"EncodeTime({value.hour},{value.minute},{value.second},"
        f"{value.microsecond // 1000})"
    )


def encode_bytes(value: bytes) -> str:
    return "VarArrayOf([" + ",".join(f"${byte:02X}" for byte in bytes(value)) + "])"


def encode_value(
    value: Any, column: ColumnDescriptor, options: Optional[GeneratorOptions] = None
) -> str:
    """
    Encode one value as literal text.

    Wrapped segments are joined with ``" +\\n"``.
    """
    return LiteralEncoder(options or DEFAULT_OPTIONS).encode(value, column).text

"""
Snapshot model for code generation.

Captures a point-in-time, read-only copy of a tabular source (ordered
columns plus ordered rows) in a normalized form that the renderer can work
with, fully decoupled from the source's own API.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ..inference import infer_type, parse_temporal
from ..logging_config import get_logger
from .types import INT32_MAX, INT32_MIN, FieldKind, ColumnMeta, classify

logger = get_logger(__name__)


class SnapshotError(ValueError):
    """Base exception for snapshot capture and validation errors."""

    pass


class ShapeError(SnapshotError):
    """A row does not match the column list, or a value does not match its column."""

    pass


@dataclass(frozen=True)
class ColumnDescriptor:
    """Represents a single captured column."""

    name: str
    kind: FieldKind
    size: Optional[int] = None  # declared length for text/binary
    precision: Optional[int] = None  # fixed-point only
    scale: Optional[int] = None  # fixed-point only
    source_type: Optional[str] = None  # original type name, for messages
    large: bool = False  # integer needs 64 bits

    @classmethod
    def from_type(
        cls,
        name: str,
        type_info: Any,
        size: Optional[int] = None,
        precision: Optional[int] = None,
        scale: Optional[int] = None,
    ) -> "ColumnDescriptor":
        """Build a descriptor by classifying a source type."""
        kind, meta = classify(type_info, size=size, precision=precision, scale=scale)
        return cls.from_meta(name, kind, meta)

    @classmethod
    def from_meta(cls, name: str, kind: FieldKind, meta: ColumnMeta) -> "ColumnDescriptor":
        return cls(
            name=name,
            kind=kind,
            size=meta.size,
            precision=meta.precision,
            scale=meta.scale,
            source_type=meta.source_type,
            large=meta.large,
        )

    @property
    def meta(self) -> ColumnMeta:
        return ColumnMeta(
            size=self.size,
            precision=self.precision,
            scale=self.scale,
            source_type=self.source_type,
            large=self.large,
        )

    @property
    def is_supported(self) -> bool:
        return self.kind != FieldKind.UNSUPPORTED


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable capture of column metadata and row values.

    Rows are tuples aligned positionally to ``columns``; ``None`` is the null
    marker for every kind.
    """

    columns: Tuple[ColumnDescriptor, ...] = ()
    rows: Tuple[Tuple[Any, ...], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "rows", tuple(tuple(row) for row in self.rows))
        self._validate()
        object.__setattr__(self, "columns", self._widen_integers())

    def _validate(self) -> None:
        seen = set()
        for column in self.columns:
            if not column.name:
                raise SnapshotError("Column names must not be empty")
            if column.name in seen:
                raise SnapshotError(f"Duplicate column name: {column.name}")
            seen.add(column.name)

        width = len(self.columns)
        for row_index, row in enumerate(self.rows):
            if len(row) != width:
                raise ShapeError(
                    f"Row {row_index} has {len(row)} values, expected {width}"
                )
            for column, value in zip(self.columns, row):
                if value is not None and not is_compatible(value, column.kind):
                    raise ShapeError(
                        f"Row {row_index}: value {value!r} is not valid for "
                        f"{column.kind.value} column '{column.name}'"
                    )

    def _widen_integers(self) -> Tuple[ColumnDescriptor, ...]:
        # ftInteger holds 32 bits; larger values need an ftLargeint field
        columns = list(self.columns)
        for index, column in enumerate(columns):
            if column.kind != FieldKind.INTEGER or column.large:
                continue
            if any(
                row[index] is not None and not INT32_MIN <= row[index] <= INT32_MAX
                for row in self.rows
            ):
                columns[index] = replace(column, large=True)
        return tuple(columns)

    @classmethod
    def empty(cls) -> "Snapshot":
        """Snapshot with zero columns and zero rows."""
        return cls()

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def get_column(self, name: str) -> Optional[ColumnDescriptor]:
        """Get column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def is_null(self, row_index: int, column_index: int) -> bool:
        return self.rows[row_index][column_index] is None

    def head(self, count: int) -> "Snapshot":
        """Return a snapshot with the first ``count`` rows, in source order."""
        if count >= len(self.rows):
            return self
        return Snapshot(columns=self.columns, rows=self.rows[: max(count, 0)])


def is_compatible(value: Any, kind: FieldKind) -> bool:
    """Check that a non-null value can live in a column of the given kind."""
    if kind == FieldKind.UNSUPPORTED:
        return True
    if kind == FieldKind.BOOLEAN:
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if kind == FieldKind.INTEGER:
        return isinstance(value, int)
    if kind == FieldKind.FLOAT:
        return isinstance(value, (int, float))
    if kind == FieldKind.CURRENCY:
        return isinstance(value, (int, float, Decimal))
    if kind == FieldKind.DATE:
        return isinstance(value, date) and not isinstance(value, datetime)
    if kind == FieldKind.TIME:
        return isinstance(value, time)
    if kind == FieldKind.DATETIME:
        return isinstance(value, datetime)
    if kind.is_text:
        return isinstance(value, str)
    if kind == FieldKind.BINARY:
        return isinstance(value, bytes)
    return False


def capture(source) -> Snapshot:
    """
    Capture a tabular source into an immutable Snapshot.

    The source must provide ``columns()`` (objects with ``name``,
    ``type_info`` and optional ``size``/``precision``/``scale``) and
    ``rows()`` (sequences aligned to the columns). Both are traversed once,
    in order. A column whose ``type_info`` is None is typed from its values.

    Args:
        source: Tabular source to capture

    Returns:
        Snapshot with classified columns and coerced values

    Raises:
        ShapeError: If a row length or value does not match its column
    """
    source_columns = list(source.columns())
    raw_rows: List[Sequence[Any]] = list(source.rows())
    width = len(source_columns)

    for row_index, row in enumerate(raw_rows):
        if len(row) != width:
            raise ShapeError(f"Row {row_index} has {len(row)} values, expected {width}")

    columns = []
    values_by_column = []
    for index, source_column in enumerate(source_columns):
        name = str(source_column.name)
        type_info = getattr(source_column, "type_info", None)
        size = getattr(source_column, "size", None)
        precision = getattr(source_column, "precision", None)
        scale = getattr(source_column, "scale", None)
        inferred = type_info is None
        raw_values = [row[index] for row in raw_rows]

        if inferred:
            type_info = _infer_column_type(raw_values)

        kind, meta = classify(type_info, size=size, precision=precision, scale=scale)
        column = ColumnDescriptor.from_meta(name, kind, meta)
        try:
            values = [
                _coerce(value, column, row_index)
                for row_index, value in enumerate(raw_values)
            ]
        except ShapeError as e:
            if not inferred:
                raise
            # Inferred kinds are a guess; keep the raw values as text instead
            logger.debug("Falling back to unsupported for column '%s': %s", name, e)
            column = ColumnDescriptor(
                name=name, kind=FieldKind.UNSUPPORTED, source_type="mixed values"
            )
            values = raw_values

        if column.kind == FieldKind.UNSUPPORTED:
            logger.warning(
                "Column '%s' has unsupported type %s", name, column.source_type
            )
        columns.append(column)
        values_by_column.append(values)

    rows = list(zip(*values_by_column)) if columns else [() for _ in raw_rows]

    logger.debug("Captured %d columns and %d rows", len(columns), len(rows))
    return Snapshot(columns=tuple(columns), rows=tuple(rows))


def _infer_column_type(values: Iterable[Any]) -> Any:
    values = list(values)
    if all(value is None for value in values):
        # Nothing to render either way; plain text is the safest declaration
        return str
    return infer_type(values)


_TRUE_STRINGS = {"true", "t", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "f", "no", "n", "0"}


def _coerce(value: Any, column: ColumnDescriptor, row_index: int) -> Any:
    """Convert a raw source value into the native type of its column kind."""
    if value is None:
        return None
    kind = column.kind
    try:
        if kind == FieldKind.UNSUPPORTED:
            return value
        if kind == FieldKind.BOOLEAN:
            if isinstance(value, bool):
                return value
            if isinstance(value, (int, Decimal)) and value in (0, 1):
                return bool(value)
            if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS:
                return True
            if isinstance(value, str) and value.strip().lower() in _FALSE_STRINGS:
                return False
        elif kind == FieldKind.INTEGER:
            if isinstance(value, bool):
                return int(value)
            if isinstance(value, int):
                return value
            if isinstance(value, (float, Decimal)) and value == int(value):
                return int(value)
            if isinstance(value, str):
                return int(value.strip())
        elif kind == FieldKind.FLOAT:
            if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
                return float(value)
            if isinstance(value, str):
                return float(value.strip())
        elif kind == FieldKind.CURRENCY:
            if isinstance(value, Decimal):
                return value
            if isinstance(value, int) and not isinstance(value, bool):
                return Decimal(value)
            if isinstance(value, float):
                return Decimal(repr(value))
            if isinstance(value, str):
                return Decimal(value.strip())
        elif kind == FieldKind.DATE:
            if isinstance(value, datetime):
                return value.date()
            if isinstance(value, date):
                return value
            if isinstance(value, str):
                return parse_temporal(value, date)
        elif kind == FieldKind.TIME:
            if isinstance(value, datetime):
                return value.time()
            if isinstance(value, time):
                return value
            if isinstance(value, str):
                return parse_temporal(value, time)
        elif kind == FieldKind.DATETIME:
            if isinstance(value, datetime):
                return value
            if isinstance(value, date):
                return datetime.combine(value, time())
            if isinstance(value, str):
                return parse_temporal(value, datetime)
        elif kind.is_text:
            if isinstance(value, str):
                return value
            if isinstance(value, (int, float, Decimal)):
                return str(value)
        elif kind == FieldKind.BINARY:
            if isinstance(value, (bytes, bytearray, memoryview)):
                return bytes(value)
    except (ValueError, ArithmeticError, InvalidOperation) as e:
        raise ShapeError(
            f"Row {row_index}: cannot convert {value!r} for "
            f"{kind.value} column '{column.name}': {e}"
        ) from e

    raise ShapeError(
        f"Row {row_index}: value {value!r} is not valid for "
        f"{kind.value} column '{column.name}'"
    )

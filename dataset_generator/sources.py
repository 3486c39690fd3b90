"""
Tabular sources for snapshot capture.

Every source offers ``columns()`` (objects with ``name``, ``type_info`` and
optional ``size``/``precision``/``scale``) and ``rows()`` (sequences aligned
to the columns). A ``type_info`` of None means the kind is inferred from the
values at capture time.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .logging_config import get_logger
from .utils import SourceLoadError

logger = get_logger(__name__)


@dataclass(frozen=True)
class SourceColumn:
    """Column metadata as reported by a source."""

    name: str
    type_info: Any = None
    size: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None


class SequenceSource:
    """In-memory source over prepared columns and rows."""

    def __init__(self, columns: Iterable[Any], rows: Iterable[Sequence[Any]] = ()):
        self._columns = [
            column if isinstance(column, SourceColumn) else _to_column(column)
            for column in columns
        ]
        self._rows = [tuple(row) for row in rows]

    def columns(self) -> List[SourceColumn]:
        return list(self._columns)

    def rows(self) -> List[tuple]:
        return list(self._rows)


def _to_column(spec: Any) -> SourceColumn:
    # "Name" or ("Name", type_info[, size[, precision[, scale]]])
    if isinstance(spec, str):
        return SourceColumn(spec)
    return SourceColumn(*spec)


class CursorSource:
    """
    Source over an executed DB-API 2.0 cursor.

    Names and type codes come from ``cursor.description``. Type codes that
    are neither type names nor Python types (sqlite3 reports None) leave the
    kind to be inferred from the fetched values.
    """

    def __init__(self, cursor):
        if cursor.description is None:
            raise SourceLoadError("Cursor has no result set")
        self._cursor = cursor
        self._columns = [self._describe(entry) for entry in cursor.description]

    @staticmethod
    def _describe(entry: Sequence[Any]) -> SourceColumn:
        name, type_code = entry[0], entry[1]
        internal_size = entry[3] if len(entry) > 3 else None
        precision = entry[4] if len(entry) > 4 else None
        scale = entry[5] if len(entry) > 5 else None
        if not isinstance(type_code, (str, type)):
            type_code = None
        return SourceColumn(
            name=str(name),
            type_info=type_code,
            size=_positive_int(internal_size),
            precision=_positive_int(precision),
            scale=scale if isinstance(scale, int) and scale >= 0 else None,
        )

    def columns(self) -> List[SourceColumn]:
        return list(self._columns)

    def rows(self) -> List[tuple]:
        return [tuple(row) for row in self._cursor.fetchall()]


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return None


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def query_source(connection, sql: str, parameters: Sequence[Any] = ()) -> CursorSource:
    """Run a query and expose its result set as a source."""
    cursor = connection.cursor()
    cursor.execute(sql, parameters)
    logger.debug(f"Executed query: {sql}")
    return CursorSource(cursor)


def sqlite_table_source(connection, table: str) -> SequenceSource:
    """
    Read a sqlite table with its declared column types.

    Rows are read in rowid order. Columns declared without a type are typed
    from their values.
    """
    info = connection.execute(f"PRAGMA table_info({quote_identifier(table)})").fetchall()
    if not info:
        raise SourceLoadError(f"Table not found: {table}")

    # PRAGMA table_info rows: (cid, name, type, notnull, dflt_value, pk)
    columns = [SourceColumn(row[1], row[2] or None) for row in info]
    column_list = ", ".join(quote_identifier(column.name) for column in columns)
    rows = connection.execute(
        f"SELECT {column_list} FROM {quote_identifier(table)} ORDER BY rowid"
    ).fetchall()
    logger.debug(f"Read {len(rows)} rows from table {table}")
    return SequenceSource(columns, rows)


class RecordsSource:
    """
    Source over a list of JSON objects.

    Column order follows the first appearance of each key; missing keys are
    nulls. Kinds are inferred from the values.
    """

    def __init__(self, records: Iterable[Dict[str, Any]]):
        self._records = list(records)
        names: Dict[str, None] = {}
        for record in self._records:
            for key in record:
                names.setdefault(str(key), None)
        self._names = list(names)

    def columns(self) -> List[SourceColumn]:
        return [SourceColumn(name) for name in self._names]

    def rows(self) -> List[tuple]:
        return [
            tuple(record.get(name) for name in self._names) for record in self._records
        ]

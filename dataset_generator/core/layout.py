"""
Layout rendering for generated dataset code.

Each generator mode is a stage that wraps the output of the previous one:
structure declares the fields, append adds the rows after it, function wraps
both in a callable that builds the dataset, and unit wraps the function in a
complete source file. Stages are plain functions that return lists of lines.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Set, Tuple

from ..logging_config import get_logger
from ..targets import DatasetTarget
from .config import AppendMode, GeneratorMode, GeneratorOptions
from .literals import CONCAT_SUFFIX, EncodedLiteral, LiteralEncoder, render_units, text_units
from .schema import ColumnDescriptor, Snapshot
from .templates import TemplateEngine, get_default_template_engine
from .types import FieldKind, field_type_tag

logger = get_logger(__name__)

# Identifiers declared by the generated code
DATASET_VARIABLE = "ds"
ROWS_VARIABLE = "data"
ROW_INDEX_VARIABLE = "idx"
FIELD_INDEX_VARIABLE = "col"
OWNER_PARAMETER = "aOwner"

UNIT_TEMPLATE_NAME = "unit.pas.j2"


@dataclass
class RenderContext:
    """Options, target and collected warnings of one rendering call."""

    options: GeneratorOptions
    target: DatasetTarget
    rows_omitted: int = 0
    warnings: List[str] = field(default_factory=list)
    unsupported_columns: List[str] = field(default_factory=list)
    engine: Optional[TemplateEngine] = None  # unit template source
    encoder: LiteralEncoder = field(init=False, repr=False)
    _reported: Set[Tuple[str, Optional[str]]] = field(
        default_factory=set, init=False, repr=False
    )

    def __post_init__(self):
        self.encoder = LiteralEncoder(self.options)

    def indent(self, depth: int) -> str:
        return self.options.indentation * depth

    def warn(self, key: Tuple[str, Optional[str]], message: str):
        """Record a warning once per key."""
        if key in self._reported:
            return
        self._reported.add(key)
        self.warnings.append(message)
        logger.debug(message)

    def check_columns(self, snapshot: Snapshot):
        for column in snapshot.columns:
            if column.is_supported:
                continue
            if column.name not in self.unsupported_columns:
                self.unsupported_columns.append(column.name)
            self.warn(
                (column.name, None),
                f"Column '{column.name}' has unsupported type "
                f"{column.source_type or 'unknown'}; values are rendered as text",
            )

    def note_literal(self, column: ColumnDescriptor, encoded: EncodedLiteral):
        # Unsupported columns already carry a column-level warning
        if encoded.lossy and column.is_supported:
            self.warn((column.name, encoded.note), f"Column '{column.name}': {encoded.note}")


class LineBuilder:
    """Accumulates lines while tracking the position on the current one."""

    def __init__(self, ctx: RenderContext):
        self.ctx = ctx
        self.lines: List[str] = []
        self._current: Optional[str] = None
        self._depth = 0

    @property
    def column(self) -> int:
        return len(self._current or "")

    def line(self, depth: int, text: str):
        """Emit one complete line."""
        self.begin(depth, text)
        self.end()

    def extend(self, lines: List[str]):
        self.lines.extend(lines)

    def begin(self, depth: int, text: str = ""):
        self._depth = depth
        self._current = self.ctx.indent(depth) + text

    def write(self, text: str):
        self._current += text

    def write_value(self, value: Any, column: ColumnDescriptor):
        """Write a literal; wrapped text continues one level deeper."""
        continuation = self.ctx.indent(self._depth + 1)
        encoded = self.ctx.encoder.encode(
            value,
            column,
            start_column=self.column,
            continuation_column=len(continuation),
        )
        self.ctx.note_literal(column, encoded)

        for segment in encoded.segments[:-1]:
            self.write(segment + CONCAT_SUFFIX)
            self.lines.append(self._current)
            self._current = continuation
        self.write(encoded.segments[-1])

    def end(self):
        self.lines.append(self._current if self._current.strip() else "")
        self._current = None


def quote_name(name: str) -> str:
    """Field names as Pascal string literals, never wrapped."""
    return render_units(text_units(name))


def field_declaration(column: ColumnDescriptor) -> str:
    """``FieldDefs.Add`` statement declaring one column."""
    tag, size = field_type_tag(column.kind, column.meta)
    args = [quote_name(column.name), tag]
    if size is not None:
        args.append(str(size))
    text = f"FieldDefs.Add({', '.join(args)});"
    if column.kind == FieldKind.CURRENCY and column.precision:
        text += f" {{ precision {column.precision} }}"
    return text


def function_signature(options: GeneratorOptions) -> str:
    return f"function {options.function_name}({OWNER_PARAMETER}: TComponent): TDataSet;"


def render_structure(ctx: RenderContext, snapshot: Snapshot, depth: int = 0) -> List[str]:
    """Field declarations in column order, then ``CreateDataSet``."""
    ctx.check_columns(snapshot)
    out = LineBuilder(ctx)
    out.line(depth, f"with {DATASET_VARIABLE} do")
    out.line(depth, "begin")
    for column in snapshot.columns:
        out.line(depth + 1, field_declaration(column))
    # A dataset without field definitions cannot be created
    if snapshot.columns:
        out.line(depth + 1, "CreateDataSet;")
    out.line(depth, "end;")
    return out.lines


def render_append(ctx: RenderContext, snapshot: Snapshot, depth: int = 0) -> List[str]:
    """Structure followed by the row population for the configured append mode."""
    return render_structure(ctx, snapshot, depth) + render_rows(ctx, snapshot, depth)


def render_rows(ctx: RenderContext, snapshot: Snapshot, depth: int = 0) -> List[str]:
    """Row population only."""
    append_mode = ctx.options.append_mode
    if append_mode == AppendMode.SINGLELINE:
        lines = _singleline_rows(ctx, snapshot, depth)
    elif append_mode == AppendMode.ROW_ARRAY:
        lines = _row_array(ctx, snapshot, depth)
    else:
        lines = _multiline_rows(ctx, snapshot, depth)

    if ctx.rows_omitted and ctx.options.comment_truncated_rows:
        lines.append(
            ctx.indent(depth)
            + f"{{ {ctx.rows_omitted} more rows omitted, "
            f"max rows is {ctx.options.max_rows} }}"
        )
    return lines


def _multiline_rows(ctx: RenderContext, snapshot: Snapshot, depth: int) -> List[str]:
    out = LineBuilder(ctx)
    skip_nulls = ctx.target.nulls_default_unset
    for row in snapshot.rows:
        out.line(depth, f"with {DATASET_VARIABLE} do")
        out.line(depth, "begin")
        out.line(depth + 1, "Append;")
        for column, value in zip(snapshot.columns, row):
            if value is None and skip_nulls:
                continue
            out.begin(depth + 1, f"FieldByName({quote_name(column.name)}).Value := ")
            out.write_value(value, column)
            out.write(";")
            out.end()
        out.line(depth + 1, "Post;")
        out.line(depth, "end;")
    return out.lines


def _write_values(out: LineBuilder, snapshot: Snapshot, row: Tuple[Any, ...]):
    for index, (column, value) in enumerate(zip(snapshot.columns, row)):
        if index:
            out.write(", ")
        out.write_value(value, column)


def _singleline_rows(ctx: RenderContext, snapshot: Snapshot, depth: int) -> List[str]:
    out = LineBuilder(ctx)
    for row in snapshot.rows:
        out.begin(depth, f"{DATASET_VARIABLE}.AppendRecord([")
        _write_values(out, snapshot, row)
        out.write("]);")
        out.end()
    return out.lines


def _row_array(ctx: RenderContext, snapshot: Snapshot, depth: int) -> List[str]:
    out = LineBuilder(ctx)
    if not snapshot.rows:
        return out.lines

    last = len(snapshot.rows) - 1
    out.line(depth, f"{ROWS_VARIABLE} := [")
    for row_index, row in enumerate(snapshot.rows):
        out.begin(depth + 1, "[")
        _write_values(out, snapshot, row)
        out.write("]," if row_index < last else "]")
        out.end()
    out.line(depth, "];")

    rows, idx, col = ROWS_VARIABLE, ROW_INDEX_VARIABLE, FIELD_INDEX_VARIABLE
    out.line(depth, f"for {idx} := 0 to High({rows}) do")
    out.line(depth, "begin")
    out.line(depth + 1, f"{DATASET_VARIABLE}.Append;")
    out.line(depth + 1, f"for {col} := 0 to High({rows}[{idx}]) do")
    out.line(depth + 2, f"{DATASET_VARIABLE}.Fields[{col}].Value := {rows}[{idx}][{col}];")
    out.line(depth + 1, f"{DATASET_VARIABLE}.Post;")
    out.line(depth, "end;")
    return out.lines


def render_function(ctx: RenderContext, snapshot: Snapshot) -> List[str]:
    """Callable that builds, fills and returns the dataset."""
    out = LineBuilder(ctx)
    out.line(0, function_signature(ctx.options))
    out.line(0, "var")
    out.line(1, f"{DATASET_VARIABLE}: {ctx.target.class_name};")
    if ctx.options.append_mode == AppendMode.ROW_ARRAY and snapshot.rows:
        out.line(1, f"{ROWS_VARIABLE}: TArray<TArray<Variant>>;")
        out.line(1, f"{ROW_INDEX_VARIABLE}, {FIELD_INDEX_VARIABLE}: Integer;")
    out.line(0, "begin")
    out.line(1, ctx.target.construction(DATASET_VARIABLE, OWNER_PARAMETER))
    out.extend(render_append(ctx, snapshot, 1))
    out.line(1, f"Result := {DATASET_VARIABLE};")
    out.line(0, "end;")
    return out.lines


def render_unit(
    ctx: RenderContext,
    snapshot: Snapshot,
    engine: Optional[TemplateEngine] = None,
) -> List[str]:
    """Complete unit: interface declaration plus the function implementation."""
    engine = engine or ctx.engine or get_default_template_engine()
    text = engine.render_template(
        UNIT_TEMPLATE_NAME,
        {
            "unit_name": ctx.options.unit_name,
            "indentation": ctx.indent(1),
            "uses": ctx.target.unit_uses(),
            "signature": function_signature(ctx.options),
            "body": render_function(ctx, snapshot),
        },
    )
    return text.split("\n")


def render(ctx: RenderContext, snapshot: Snapshot) -> List[str]:
    """Render the snapshot for the configured generator mode."""
    mode = ctx.options.generator_mode
    logger.debug(
        "Rendering %d columns, %d rows in %s mode",
        snapshot.column_count,
        snapshot.row_count,
        mode.value,
    )
    if mode == GeneratorMode.STRUCTURE:
        return render_structure(ctx, snapshot)
    if mode == GeneratorMode.APPEND:
        return render_append(ctx, snapshot)
    if mode == GeneratorMode.FUNCTION:
        return render_function(ctx, snapshot)
    return render_unit(ctx, snapshot)

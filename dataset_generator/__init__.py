"""
Dataset Generator

Generates Pascal source that rebuilds a table, structure and rows, as an
in-memory dataset for use as a deterministic test fake.
"""

from .core.config import (
    DEFAULT_OPTIONS,
    AppendMode,
    ConfigError,
    GeneratorMode,
    GeneratorOptions,
    load_config,
)
from .core.generator import (
    DataSetGenerator,
    GenerationResult,
    execute,
    render_lines,
    render_text,
    render_text_and_copy_to_clipboard,
    render_text_and_write_to_file,
)
from .core.schema import ColumnDescriptor, ShapeError, Snapshot, SnapshotError, capture
from .core.sinks import SinkError
from .core.types import FieldKind, classify
from .registry import RegistryError, get_registry, list_supported_targets
from .sources import (
    CursorSource,
    RecordsSource,
    SequenceSource,
    SourceColumn,
    query_source,
    sqlite_table_source,
)

# Version info
__version__ = "0.1.0"


def quick_generate(columns, rows=(), **options) -> str:
    """
    Quick code generation from in-memory columns and rows.

    Args:
        columns: Column specs, ``"Name"`` or ``("Name", type_info, size, ...)``
        rows: Row value sequences aligned to the columns
        **options: GeneratorOptions fields (enum fields accept strings)

    Returns:
        Generated code string
    """
    return render_text(
        SequenceSource(columns, rows), DEFAULT_OPTIONS.with_overrides(**options)
    )


# Export main interfaces
__all__ = [
    "AppendMode",
    "ColumnDescriptor",
    "ConfigError",
    "CursorSource",
    "DEFAULT_OPTIONS",
    "DataSetGenerator",
    "FieldKind",
    "GenerationResult",
    "GeneratorMode",
    "GeneratorOptions",
    "RecordsSource",
    "RegistryError",
    "SequenceSource",
    "ShapeError",
    "SinkError",
    "Snapshot",
    "SnapshotError",
    "SourceColumn",
    "capture",
    "classify",
    "execute",
    "get_registry",
    "list_supported_targets",
    "load_config",
    "query_source",
    "quick_generate",
    "render_lines",
    "render_text",
    "render_text_and_copy_to_clipboard",
    "render_text_and_write_to_file",
    "sqlite_table_source",
]

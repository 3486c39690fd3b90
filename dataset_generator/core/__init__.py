"""
Core code generation components.

Type classification, snapshot capture, literal encoding, layout rendering
and the generator facade.
"""

from .types import FieldKind, ColumnMeta, classify, field_type_tag
from .schema import ColumnDescriptor, Snapshot, SnapshotError, ShapeError, capture
from .literals import EncodedLiteral, LiteralEncoder, encode_value
from .config import (
    AppendMode,
    ConfigError,
    ConfigManager,
    DEFAULT_OPTIONS,
    GeneratorMode,
    GeneratorOptions,
    load_config,
    validate_options,
)
from .naming import NameSanitizer
from .templates import TemplateEngine, TemplateError, create_template_engine
from .layout import RenderContext, render
from .sinks import ClipboardSink, FileSink, MemorySink, SinkError
from .generator import (
    DataSetGenerator,
    GenerationResult,
    execute,
    render_lines,
    render_text,
    render_text_and_copy_to_clipboard,
    render_text_and_write_to_file,
)

__all__ = [
    # Type classifier
    "FieldKind",
    "ColumnMeta",
    "classify",
    "field_type_tag",
    # Snapshot model
    "ColumnDescriptor",
    "Snapshot",
    "SnapshotError",
    "ShapeError",
    "capture",
    # Literal encoder
    "EncodedLiteral",
    "LiteralEncoder",
    "encode_value",
    # Configuration system
    "AppendMode",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_OPTIONS",
    "GeneratorMode",
    "GeneratorOptions",
    "load_config",
    "validate_options",
    # Naming utilities
    "NameSanitizer",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
    # Layout renderer
    "RenderContext",
    "render",
    # Sinks
    "ClipboardSink",
    "FileSink",
    "MemorySink",
    "SinkError",
    # Generator facade
    "DataSetGenerator",
    "GenerationResult",
    "execute",
    "render_lines",
    "render_text",
    "render_text_and_copy_to_clipboard",
    "render_text_and_write_to_file",
]

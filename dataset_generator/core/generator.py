"""
Generator facade.

Orchestrates one generation call: validate the options, resolve the dataset
target, capture the source, cap the rows, render and hand the lines to a
sink.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..logging_config import get_logger
from ..registry import RegistryError, get_registry
from ..targets import DatasetTarget
from .config import DEFAULT_OPTIONS, ConfigError, GeneratorOptions, validate_options
from .layout import RenderContext, render
from .schema import Snapshot, capture
from .sinks import ClipboardSink, FileSink, MemorySink, join_lines
from .templates import TemplateEngine

logger = get_logger(__name__)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        lines: List[str],
        warnings: List[str] = None,
        unsupported_columns: List[str] = None,
        metadata: Dict[str, Any] = None,
        line_ending: str = "\n",
    ):
        """
        Initialize generation result.

        Args:
            lines: Generated code lines, without line endings
            warnings: Non-fatal problems (unsupported columns, lossy values)
            unsupported_columns: Names of columns rendered as best-effort text
            metadata: Additional metadata about generation
            line_ending: Line ending used by ``code``
        """
        self.lines = tuple(lines)
        self.warnings = warnings or []
        self.unsupported_columns = unsupported_columns or []
        self.metadata = metadata or {}
        self.line_ending = line_ending

    @property
    def code(self) -> str:
        return join_lines(self.lines, self.line_ending)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


class DataSetGenerator:
    """Configurable entry point: renders sources with fixed options."""

    def __init__(
        self,
        options: Optional[GeneratorOptions] = None,
        template_engine: Optional[TemplateEngine] = None,
    ):
        self.options = options or DEFAULT_OPTIONS
        self.template_engine = template_engine

    def resolve_target(self) -> DatasetTarget:
        try:
            return get_registry().get_target(self.options.target)
        except RegistryError as e:
            raise ConfigError(str(e)) from e

    def execute(self, source: Union[Snapshot, Any]) -> GenerationResult:
        """
        Generate code for a snapshot or any tabular source.

        Args:
            source: Snapshot, or an object with ``columns()`` and ``rows()``

        Returns:
            GenerationResult with lines, warnings and metadata

        Raises:
            ConfigError: If the options are invalid (nothing is rendered)
            ShapeError: If the source rows do not match its columns
        """
        validate_options(self.options)
        target = self.resolve_target()

        snapshot = source if isinstance(source, Snapshot) else capture(source)
        limited = snapshot.head(self.options.max_rows)
        omitted = snapshot.row_count - limited.row_count
        if omitted:
            logger.info(
                "Rendering %d of %d rows (max rows %d)",
                limited.row_count,
                snapshot.row_count,
                self.options.max_rows,
            )

        ctx = RenderContext(
            options=self.options,
            target=target,
            rows_omitted=omitted,
            engine=self.template_engine,
        )
        lines = render(ctx, limited)

        metadata = {
            "generator_mode": self.options.generator_mode.value,
            "append_mode": self.options.append_mode.value,
            "target": target.key,
            "dataset_class": target.class_name,
            "column_count": snapshot.column_count,
            "rows_total": snapshot.row_count,
            "rows_rendered": limited.row_count,
            "rows_omitted": omitted,
            "line_count": len(lines),
        }
        logger.debug("Generated %d lines", len(lines))

        return GenerationResult(
            lines,
            warnings=list(ctx.warnings),
            unsupported_columns=list(ctx.unsupported_columns),
            metadata=metadata,
            line_ending=self.options.line_ending,
        )

    def render_text(self, source: Union[Snapshot, Any]) -> str:
        return self.execute(source).code

    def write(self, source: Union[Snapshot, Any], sink) -> GenerationResult:
        """Generate and hand the lines to a sink; nothing is written if rendering fails."""
        result = self.execute(source)
        sink.write(result.lines)
        return result


# Convenience functions using a fixed default configuration


def execute(
    source: Union[Snapshot, Any], options: Optional[GeneratorOptions] = None
) -> GenerationResult:
    """Generate code with the given (or default) options."""
    return DataSetGenerator(options).execute(source)


def render_lines(
    source: Union[Snapshot, Any], options: Optional[GeneratorOptions] = None
) -> List[str]:
    """Generate code and return it as a list of lines."""
    sink = MemorySink()
    DataSetGenerator(options).write(source, sink)
    return sink.lines


def render_text(
    source: Union[Snapshot, Any], options: Optional[GeneratorOptions] = None
) -> str:
    """Generate code and return it as text."""
    return DataSetGenerator(options).render_text(source)


def render_text_and_write_to_file(
    source: Union[Snapshot, Any],
    path: Union[str, Path],
    options: Optional[GeneratorOptions] = None,
) -> GenerationResult:
    """
    Generate code and write it to a file, replacing its content.

    Raises:
        SinkError: If the file cannot be written; an existing file is left as it was
    """
    generator = DataSetGenerator(options)
    sink = FileSink(path, line_ending=generator.options.line_ending)
    return generator.write(source, sink)


def render_text_and_copy_to_clipboard(
    source: Union[Snapshot, Any], options: Optional[GeneratorOptions] = None
) -> GenerationResult:
    """
    Generate code and copy it to the system clipboard.

    Raises:
        SinkError: If the clipboard is unavailable
    """
    generator = DataSetGenerator(options)
    sink = ClipboardSink(line_ending=generator.options.line_ending)
    return generator.write(source, sink)

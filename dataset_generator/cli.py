"""
Command-line interface for dataset code generation.

Reads a table from sqlite, a JSON file or a URL and prints, saves or copies
the Pascal code that rebuilds it as an in-memory dataset.
"""

import argparse
import sqlite3
import sys
from contextlib import closing
from pathlib import Path
from typing import List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from .core.config import (
    DEFAULT_OPTIONS,
    AppendMode,
    ConfigError,
    GeneratorMode,
    GeneratorOptions,
    load_config,
)
from .core.generator import DataSetGenerator, GenerationResult
from .core.naming import derive_function_name, derive_unit_name
from .core.schema import Snapshot, SnapshotError, capture
from .core.sinks import ClipboardSink, FileSink, SinkError
from .core.templates import TemplateError, create_template_engine
from .logging_config import get_logger, setup_logging
from .registry import list_all_target_info
from .sources import RecordsSource, query_source, sqlite_table_source
from .utils import SourceLoadError, load_records

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Generated code goes to stdout, everything else to stderr
console = Console()
err_console = Console(stderr=True)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dataset-generator",
        description="Generate Pascal code that rebuilds a table as an in-memory dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dataset-generator --sqlite shop.db --table orders
  dataset-generator --sqlite shop.db --query "SELECT * FROM orders" --mode unit
  dataset-generator --json orders.json --append-mode singleline -o Orders.pas
  dataset-generator --list-targets
        """.strip(),
    )

    # Input options (mutually exclusive)
    input_group = parser.add_argument_group("input")
    sources = input_group.add_mutually_exclusive_group()
    sources.add_argument("--sqlite", metavar="DB", help="sqlite database file")
    sources.add_argument(
        "--json", metavar="FILE", help="JSON (or .jsonl JSON Lines) file with records"
    )
    sources.add_argument("--url", help="URL returning a JSON list of records")
    query = input_group.add_mutually_exclusive_group()
    query.add_argument("--table", metavar="NAME", help="Table to read (with --sqlite)")
    query.add_argument("--query", metavar="SQL", help="Query to run (with --sqlite)")

    # Generation options
    gen_group = parser.add_argument_group("generation")
    gen_group.add_argument(
        "--mode",
        choices=[mode.value for mode in GeneratorMode],
        help=f"Scope of the generated code (default: {DEFAULT_OPTIONS.generator_mode.value})",
    )
    gen_group.add_argument(
        "--append-mode",
        choices=[mode.value for mode in AppendMode],
        help=f"Row rendering strategy (default: {DEFAULT_OPTIONS.append_mode.value})",
    )
    gen_group.add_argument(
        "--target",
        help=f"Dataset target, see --list-targets (default: {DEFAULT_OPTIONS.target})",
    )
    gen_group.add_argument(
        "--max-rows",
        type=int,
        metavar="N",
        help=f"Maximum number of rows to render (default: {DEFAULT_OPTIONS.max_rows})",
    )
    gen_group.add_argument(
        "--right-margin",
        type=int,
        metavar="N",
        help="Wrap string literals beyond this column, 0 disables "
        f"(default: {DEFAULT_OPTIONS.right_margin})",
    )
    gen_group.add_argument(
        "--indent",
        type=int,
        metavar="N",
        help="Spaces per indentation level (default: 2)",
    )
    gen_group.add_argument("--unit-name", metavar="NAME", help="Unit name (unit mode)")
    gen_group.add_argument(
        "--function-name", metavar="NAME", help="Function name (function and unit modes)"
    )
    gen_group.add_argument(
        "--mark-truncation",
        action="store_true",
        help="Add a comment when rows beyond --max-rows are left out",
    )
    gen_group.add_argument("--config", metavar="FILE", help="JSON configuration file")
    gen_group.add_argument(
        "--template-dir",
        metavar="DIR",
        help="Directory with templates overriding the built-in unit.pas.j2",
    )

    # Output options
    out_group = parser.add_argument_group("output")
    destination = out_group.add_mutually_exclusive_group()
    destination.add_argument("--output", "-o", metavar="FILE", help="Write code to a file")
    destination.add_argument(
        "--clipboard", action="store_true", help="Copy code to the clipboard"
    )
    out_group.add_argument(
        "--plain", action="store_true", help="Print code without highlighting"
    )
    out_group.add_argument(
        "--verbose", "-v", action="store_true", help="Show generation metadata"
    )
    out_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )

    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-targets", action="store_true", help="List dataset targets and exit"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line interface.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.list_targets:
            return _list_targets()

        snapshot, table_name = _load_snapshot(args)
        options = _build_options(args, table_name)
        return _generate_and_output(snapshot, options, args)

    except CLIError as e:
        err_console.print(f"[red]✗ Error:[/red] {e}")
        return 1
    except ConfigError as e:
        err_console.print(f"[red]✗ Configuration error:[/red] {e}")
        return 1
    except (SourceLoadError, SnapshotError, sqlite3.Error) as e:
        err_console.print(f"[red]✗ Failed to read source:[/red] {e}")
        return 1
    except (SinkError, TemplateError) as e:
        err_console.print(f"[red]✗ Failed to write output:[/red] {e}")
        return 1


def _list_targets() -> int:
    """List dataset targets with details."""
    table = Table(title="📋 Dataset Targets", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Target", style="bold green", no_wrap=True)
    table.add_column("Class", style="cyan")
    table.add_column("Uses", style="dim")
    table.add_column("Aliases", style="blue")

    for name, info in sorted(list_all_target_info().items()):
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(name, info["class"], ", ".join(info["uses"]), aliases)

    console.print(table)
    console.print(
        Panel(
            "[bold]Usage:[/bold] dataset-generator --sqlite [dim]db[/dim] "
            "--table [dim]name[/dim] --target [cyan]TARGET[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def _load_snapshot(args: argparse.Namespace) -> Tuple[Snapshot, Optional[str]]:
    """Capture the requested input; returns the snapshot and the table name, if any."""
    if args.sqlite:
        db_path = Path(args.sqlite)
        if not db_path.exists():
            raise CLIError(f"Database not found: {db_path}")
        if not (args.table or args.query):
            raise CLIError("--sqlite requires --table or --query")

        with closing(sqlite3.connect(str(db_path))) as connection:
            if args.table:
                source = sqlite_table_source(connection, args.table)
            else:
                source = query_source(connection, args.query)
            # The snapshot holds copies; the connection can close afterwards
            return capture(source), args.table

    if args.table or args.query:
        raise CLIError("--table and --query require --sqlite")

    if args.json or args.url:
        description, records = load_records(file_path=args.json, url=args.url)
        logger.info("Loaded %d records from %s", len(records), description)
        table_name = Path(args.json).stem if args.json else None
        return capture(RecordsSource(records)), table_name

    raise CLIError("Input source required (--sqlite, --json or --url)")


def _build_options(args: argparse.Namespace, table_name: Optional[str]) -> GeneratorOptions:
    """Build generator options from the config file and CLI arguments."""
    options = load_config(config_file=args.config)

    # Names default to the table name unless configured
    if table_name:
        if options.function_name == DEFAULT_OPTIONS.function_name:
            options = options.with_overrides(function_name=derive_function_name(table_name))
        if options.unit_name == DEFAULT_OPTIONS.unit_name:
            options = options.with_overrides(unit_name=derive_unit_name(table_name))

    overrides = {
        "generator_mode": args.mode,
        "append_mode": args.append_mode,
        "target": args.target,
        "max_rows": args.max_rows,
        "right_margin": args.right_margin,
        "unit_name": args.unit_name,
        "function_name": args.function_name,
    }
    if args.indent is not None:
        if args.indent < 0:
            raise CLIError("--indent must not be negative")
        overrides["indentation"] = " " * args.indent
    if args.mark_truncation:
        overrides["comment_truncated_rows"] = True

    return options.with_overrides(
        **{key: value for key, value in overrides.items() if value is not None}
    )


def _generate_and_output(
    snapshot: Snapshot, options: GeneratorOptions, args: argparse.Namespace
) -> int:
    """Generate code and handle output with rich formatting."""
    engine = None
    if args.template_dir:
        template_dir = Path(args.template_dir)
        if not template_dir.is_dir():
            raise CLIError(f"Template directory not found: {template_dir}")
        engine = create_template_engine(template_dir)
    generator = DataSetGenerator(options, template_engine=engine)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=True,
    ) as progress:
        progress.add_task("[green]Generating dataset code...", total=None)
        result = generator.execute(snapshot)

    if args.output:
        FileSink(args.output, line_ending=options.line_ending).write(result.lines)
        err_console.print(f"[green]✓[/green] Generated code saved to [cyan]{args.output}[/cyan]")
    elif args.clipboard:
        ClipboardSink(line_ending=options.line_ending).write(result.lines)
        err_console.print("[green]✓[/green] Generated code copied to clipboard")
    elif args.plain:
        sys.stdout.write(result.code)
    else:
        console.print(Syntax(result.code, "delphi", theme="monokai"))

    if args.verbose:
        _print_metadata(result)

    if result.warnings:
        err_console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            err_console.print(f"  [yellow]•[/yellow] {warning}")

    return 0


def _print_metadata(result: GenerationResult):
    metadata_table = Table(
        title="📊 Generation Metadata",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    metadata_table.add_column("Property", style="bold")
    metadata_table.add_column("Value", style="green")

    for key, value in result.metadata.items():
        metadata_table.add_row(key.replace("_", " ").title(), str(value))

    err_console.print()
    err_console.print(metadata_table)


if __name__ == "__main__":
    sys.exit(main())

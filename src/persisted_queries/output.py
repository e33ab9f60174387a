"""Output - the query map file and the terminal report."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional, TextIO

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .errors import OutputWriteError

if TYPE_CHECKING:
    from .extractor import ExtractionResult
    from .identifiers import OutputMap


def invert_output_map(output_map: OutputMap) -> dict[str, str]:
    """The id -> query view of an output map, with ids as strings."""
    return {str(query_id): query for query, query_id in output_map.items()}


def write_output_map(output_map: OutputMap, output_path: Path) -> None:
    """
    Write ``output_map`` to ``output_path`` as a flat JSON object.

    Raises:
        OutputWriteError: If the file cannot be written
    """
    try:
        Path(output_path).write_text(json.dumps(output_map), encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(output_path, e) from e


class OutputFormatter:
    """Base class for output formatters."""

    def format(self, result: ExtractionResult, output: TextIO = sys.stdout) -> None:
        """Format and write the extraction result."""
        raise NotImplementedError


class HumanFormatter(OutputFormatter):
    """Human-readable colored terminal output using Rich."""

    PREVIEW_WIDTH = 60

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize formatter."""
        self.console = console or Console()

    def format(self, result: ExtractionResult, output: TextIO = sys.stdout) -> None:
        """Format and print the extraction result."""
        self._print_header(result)
        self._print_queries(result)
        self._print_footer(result)

    def _print_header(self, result: ExtractionResult) -> None:
        title = Text("Persisted Queries", style="bold blue")
        subtitle = Text(
            f"{result.input_path} → {result.output_path} ({result.hash_type.value} ids)",
            style="dim",
        )
        self.console.print()
        self.console.print(Panel(subtitle, title=title, border_style="blue"))
        self.console.print()

    def _print_queries(self, result: ExtractionResult) -> None:
        if not result.output_map:
            self.console.print("[yellow]No GraphQL operations found.[/yellow]")
            return

        table = Table(title="Extracted Queries", show_header=True, header_style="bold")
        table.add_column("Id", justify="right", style="cyan", no_wrap=True)
        table.add_column("Query")

        for query, query_id in result.output_map.items():
            preview = " ".join(query.split())
            if len(preview) > self.PREVIEW_WIDTH:
                preview = preview[: self.PREVIEW_WIDTH - 1] + "…"
            table.add_row(str(query_id), Text(preview))

        self.console.print(table)
        self.console.print()

    def _print_footer(self, result: ExtractionResult) -> None:
        self.console.print(
            f"[green bold]✓ Wrote {len(result.output_map)} queries "
            f"from {len(result.source_files)} files to {escape(str(result.output_path))}[/green bold]"
        )
        if result.pushed is not None:
            self.console.print(f"[green]✓ Pushed {result.pushed} queries to the key-value store[/green]")


class JSONFormatter(OutputFormatter):
    """The query map itself, for piping into other tools."""

    def __init__(self, pretty: bool = True) -> None:
        """Initialize formatter."""
        self.pretty = pretty

    def format(self, result: ExtractionResult, output: TextIO = sys.stdout) -> None:
        """Format and write the query map as JSON."""
        if self.pretty:
            json_str = json.dumps(result.output_map, indent=2)
        else:
            json_str = json.dumps(result.output_map)

        output.write(json_str)
        output.write("\n")


def get_formatter(format_name: str) -> OutputFormatter:
    """Get a formatter by name."""
    formatters = {
        "human": HumanFormatter,
        "json": JSONFormatter,
    }

    formatter_class = formatters.get(format_name.lower())
    if not formatter_class:
        raise ValueError(f"Unknown format: {format_name}")

    return formatter_class()

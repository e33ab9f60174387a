"""CLI entry point for persisted query extraction."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .config import ExtractorConfig, HashType, OutputFormat, SinkConfig
from .errors import ConfigurationError, PersistedQueriesError
from .extractor import QueryExtractor
from .output import get_formatter
from .transformers import TRANSFORMERS

app = typer.Typer(
    name="persisted-queries",
    help="Extract GraphQL operations from a source tree into a persisted query map.",
    no_args_is_help=True,
)

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through Rich."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        log_time_format="[%H:%M:%S]",
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(name)s] %(message)s",
        handlers=[handler],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from . import __version__
        console.print(f"persisted-queries v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version", "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Persisted Queries - map every GraphQL operation in a project to a stable id."""
    pass


@app.command()
def extract(
    input_path: Annotated[
        Path,
        typer.Argument(
            help="File or directory to extract GraphQL operations from.",
        ),
    ],
    output_path: Annotated[
        Path,
        typer.Argument(
            help="Where to write the query map (JSON).",
        ),
    ] = Path("extracted_queries.json"),
    add_typename: Annotated[
        bool,
        typer.Option(
            "--add-typename",
            help="Add __typename to every selection set before keying.",
        ),
    ] = False,
    transformers: Annotated[
        Optional[list[str]],
        typer.Option(
            "--transformer", "-t",
            help=f"Query transformer to apply, in order (one of: {', '.join(sorted(TRANSFORMERS))}).",
        ),
    ] = None,
    js: Annotated[
        bool,
        typer.Option(
            "--js",
            help="Read tagged template literals from program source instead of .graphql files.",
        ),
    ] = False,
    extension: Annotated[
        Optional[str],
        typer.Option(
            "--extension", "-e",
            help="Extension of the files to read (default: graphql, or js with --js).",
        ),
    ] = None,
    tag: Annotated[
        str,
        typer.Option(
            "--tag",
            help="Template literal tag marking GraphQL documents.",
        ),
    ] = "gql",
    hash_type: Annotated[
        str,
        typer.Option(
            "--hash",
            help="Id strategy: md5, sha1, sha256, sequential or uuid.",
        ),
    ] = HashType.SEQUENTIAL.value,
    sink_url: Annotated[
        Optional[str],
        typer.Option(
            "--sink-url", "--redis-url",
            envvar="PERSISTED_QUERIES_SINK_URL",
            help="Key-value store to push the id -> query map to (redis:// or http(s)://).",
        ),
    ] = None,
    sink_prefix: Annotated[
        str,
        typer.Option(
            "--sink-prefix", "--redis-prefix",
            help="Namespace prepended to every pushed key.",
        ),
    ] = "graphqlQueries",
    output_format: Annotated[
        str,
        typer.Option(
            "--format", "-f",
            help="Output format: 'human' or 'json'.",
        ),
    ] = "human",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """
    Extract GraphQL operations into a query map.

    Every operation under INPUT_PATH is printed together with the fragments
    it uses and assigned an id. The map is written to OUTPUT_PATH as a JSON
    object from query text to id.

    Examples:

        # Standalone .graphql documents, sequential ids
        persisted-queries extract queries/ extracted_queries.json

        # gql`...` literals in a JavaScript app, content hashes
        persisted-queries extract src/ --js --hash sha256 --add-typename

        # Also push id -> query to Redis
        persisted-queries extract queries/ --sink-url redis://localhost:6379/0
    """
    setup_logging(verbose)

    # Validate output format
    try:
        fmt = OutputFormat(output_format.lower())
    except ValueError:
        console.print(f"[red]Error: Invalid format '{output_format}'. Use 'human' or 'json'.[/red]")
        raise typer.Exit(1)

    names = list(transformers or [])
    if add_typename:
        if fmt == OutputFormat.HUMAN:
            console.print("[dim]Using the add-typename query transformer.[/dim]")
        names.insert(0, "add_typename")

    try:
        config = ExtractorConfig(
            input_path=input_path,
            output_path=output_path,
            transformers=names,
            extension=extension,
            in_js_code=js,
            literal_tag=tag,
            hash_type=hash_type,
            sink=SinkConfig(url=sink_url, prefix=sink_prefix) if sink_url else None,
        )
        extractor = QueryExtractor(config)
    except ConfigurationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if fmt == OutputFormat.HUMAN:
        console.print(f"[dim]Extracting queries from {input_path}...[/dim]")

    try:
        result = extractor.extract()
    except PersistedQueriesError as e:
        console.print(f"[red]Unable to process {input_path}: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    formatter = get_formatter(fmt.value)
    formatter.format(result, output=sys.stdout)


if __name__ == "__main__":
    app()

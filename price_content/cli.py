"""
Command-line interface for the price content server.

``serve`` runs the MCP server on stdio; ``fetch`` and ``process`` call the
same tools from a terminal and print the text block they return.
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from price_content.server import dispatch_tool
from price_content.server import main as run_stdio_server
from price_content.utils.logging import setup_logging

app = typer.Typer(
    name="price-content",
    help="Fetch pages and APIs and shape their embedded price data",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def _parse_headers(values: List[str]) -> dict:
    headers = {}
    for value in values:
        name, sep, header_value = value.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(f"expected 'Name: value', got '{value}'", param_hint="--header")
        headers[name.strip()] = header_value.strip()
    return headers


def _print_result(name: str, arguments: dict) -> None:
    result = asyncio.run(dispatch_tool(name, arguments))
    text = result.content[0].text

    if result.isError:
        err_console.print(f"[red]✗[/red] {escape(text)}", highlight=False)
        raise typer.Exit(1)

    # Plain print keeps the payload byte-for-byte
    console.out(text, highlight=False)


@app.command()
def serve(
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Override LOG_LEVEL"),
):
    """Run the MCP server on stdio."""
    if log_level:
        setup_logging(log_level=log_level.upper())
    run_stdio_server()


@app.command()
def fetch(
    url: str = typer.Argument(..., help="URL to request"),
    method: str = typer.Option("GET", "--method", "-X", help="GET, POST, PUT or DELETE"),
    header: List[str] = typer.Option([], "--header", "-H", help="Extra header as 'Name: value'"),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="Request body"),
    extract: bool = typer.Option(False, "--extract", "-e", help="Extract the mass record from an HTML page"),
):
    """Fetch a URL the way the fetch_api tool does."""
    arguments = {"url": url, "method": method.upper(), "extractMassData": extract}
    if header:
        arguments["headers"] = _parse_headers(header)
    if body is not None:
        arguments["body"] = body

    _print_result("fetch_api", arguments)


@app.command()
def process(
    source: Optional[Path] = typer.Argument(None, help="File holding the payload (stdin when omitted)"),
    output_format: str = typer.Option("detailed", "--format", "-f", help="compact or detailed"),
    field: List[str] = typer.Option([], "--field", "-F", help="Field to keep; repeat to keep several"),
):
    """Shape a payload the way the process_data tool does."""
    if source is None:
        data = sys.stdin.read()
    else:
        try:
            data = source.read_text(encoding="utf-8")
        except OSError as e:
            err_console.print(f"[red]✗[/red] Cannot read {source}: {escape(str(e))}")
            raise typer.Exit(1)

    arguments = {"data": data, "format": output_format}
    if field:
        arguments["filterFields"] = field

    _print_result("process_data", arguments)


if __name__ == "__main__":
    app()

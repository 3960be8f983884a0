"""``chtsh lookup`` — fetch one cheat sheet and print it."""

from __future__ import annotations

import asyncio
import sys

import click
from rich.markup import escape
from rich.text import Text

from chtsh.cli_commands._output import console, err_console
from chtsh.config import DEFAULT_BASE_URL


@click.command()
@click.argument("query")
@click.option("--language", "-l", default=None, help="Programming language, e.g. python.")
@click.option(
    "--option",
    "-o",
    "options",
    multiple=True,
    help="cht.sh option flag (repeatable), e.g. T or q.",
)
@click.option("--base-url", envvar="CHTSH_BASE_URL", default=DEFAULT_BASE_URL, show_default=True)
@click.option(
    "--timeout",
    envvar="CHTSH_TIMEOUT",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
)
def lookup(
    query: str,
    language: str | None,
    options: tuple[str, ...],
    base_url: str,
    timeout: float | None,
) -> None:
    """Look up QUERY on cht.sh."""
    from chtsh.errors import FetchError
    from chtsh.fetcher import ChtShFetcher

    async def _lookup() -> str:
        async with ChtShFetcher(base_url, timeout=timeout) as fetcher:
            return await fetcher.fetch(query, language, options)

    try:
        text = asyncio.run(_lookup())
    except FetchError as exc:
        err_console.print(f"[red]Lookup error:[/red] {escape(str(exc))}")
        sys.exit(1)

    console.print(Text.from_ansi(text))

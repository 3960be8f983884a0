"""chtsh CLI entrypoint."""

from __future__ import annotations

import click

from chtsh import __version__


@click.group()
@click.version_option(version=__version__, prog_name="chtsh")
def main() -> None:
    """chtsh — cht.sh cheat sheets as an MCP tool."""


# Register subcommands
from chtsh.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()

"""``chtsh tools`` — show the tool exposed by the server."""

from __future__ import annotations

import json

import click

from chtsh.cli_commands._output import console, print_tool_table


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the tools/list payload as JSON.")
def tools(as_json: bool) -> None:
    """Show the cht_sh tool descriptor."""
    from chtsh.tools import CHT_SH_TOOL

    if as_json:
        console.print_json(json.dumps({"tools": [CHT_SH_TOOL.model_dump(by_alias=True)]}))
        return

    print_tool_table(CHT_SH_TOOL)

"""Shared CLI output helpers.

Protocol traffic owns stdout while serving, so logs and diagnostics go to
``err_console``.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from chtsh.protocol.models import ToolDefinition  # noqa: TC001

console = Console()
err_console = Console(stderr=True)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def configure_logging(level: str) -> None:
    """Route all logging through a rich handler on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def print_tool_table(tool: ToolDefinition) -> None:
    """Pretty-print a tool descriptor and its parameters."""
    console.print(f"\n[bold cyan]{tool.name}[/bold cyan]")
    console.print(f"  {tool.description}")

    properties: dict[str, dict[str, object]] = tool.input_schema.get("properties", {})
    required = set(tool.input_schema.get("required", []))

    table = Table(title="Parameters")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Required")
    table.add_column("Description")

    for name, schema in properties.items():
        table.add_row(
            name,
            str(schema.get("type", "?")),
            "yes" if name in required else "no",
            _truncate(str(schema.get("description", ""))),
        )

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."

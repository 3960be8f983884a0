"""``chtsh serve`` — run the MCP server over stdin/stdout."""

from __future__ import annotations

import asyncio
import sys

import click

from chtsh.cli_commands._output import LOG_LEVELS, configure_logging, err_console
from chtsh.config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT


@click.command()
@click.option(
    "--base-url",
    envvar="CHTSH_BASE_URL",
    default=DEFAULT_BASE_URL,
    show_default=True,
    help="cht.sh endpoint to query.",
)
@click.option(
    "--user-agent",
    envvar="CHTSH_USER_AGENT",
    default=DEFAULT_USER_AGENT,
    show_default=True,
    help="User-Agent sent upstream.",
)
@click.option(
    "--timeout",
    envvar="CHTSH_TIMEOUT",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Upstream request timeout in seconds (default: none).",
)
@click.option(
    "--concurrent",
    envvar="CHTSH_CONCURRENT",
    is_flag=True,
    help="Handle lines concurrently; responses may be reordered.",
)
@click.option(
    "--log-level",
    envvar="CHTSH_LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level (logs go to stderr).",
)
@click.option("--telemetry", is_flag=True, help="Export trace spans to stderr.")
@click.option("--otlp-endpoint", default=None, help="Export trace spans via OTLP/gRPC.")
def serve(
    base_url: str,
    user_agent: str,
    timeout: float | None,
    concurrent: bool,
    log_level: str,
    telemetry: bool,
    otlp_endpoint: str | None,
) -> None:
    """Serve the cht_sh tool as JSON-RPC over stdin/stdout."""
    from chtsh.config import ServerConfig
    from chtsh.server import run_stdio
    from chtsh.utils.telemetry import configure_telemetry

    configure_logging(log_level)

    config = ServerConfig(
        base_url=base_url,
        user_agent=user_agent,
        timeout=timeout,
        concurrent=concurrent,
        telemetry=telemetry,
        otlp_endpoint=otlp_endpoint,
    )

    try:
        configure_telemetry(config)
    except ImportError as exc:
        err_console.print(f"[red]Telemetry error:[/red] {exc}")
        sys.exit(1)

    asyncio.run(run_stdio(config))

"""Server configuration — upstream endpoint, protocol identity, loop mode."""

from __future__ import annotations

from pydantic import BaseModel, Field

from chtsh import __version__

DEFAULT_BASE_URL = "https://cht.sh/"
# cht.sh answers curl-like clients with plain text and browsers with HTML.
DEFAULT_USER_AGENT = "curl/7.68.0"
PROTOCOL_VERSION = "2025-03-26"


class ServerConfig(BaseModel):
    """Configuration for a stdio server instance.

    ``timeout`` is ``None`` by default: upstream requests wait as long as
    cht.sh takes to answer.
    """

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float | None = Field(default=None, gt=0)
    protocol_version: str = PROTOCOL_VERSION
    server_name: str = "CheatSheet"
    server_version: str = __version__
    concurrent: bool = False
    telemetry: bool = False
    otlp_endpoint: str | None = None

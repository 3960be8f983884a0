"""chtsh — cht.sh cheat sheets served as an MCP tool over stdio."""

from __future__ import annotations

__version__ = "1.0.0"

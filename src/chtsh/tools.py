"""The ``cht_sh`` tool descriptor."""

from __future__ import annotations

from chtsh.protocol.models import ToolDefinition

TOOL_NAME = "cht_sh"

CHT_SH_TOOL = ToolDefinition(
    name=TOOL_NAME,
    description=(
        "Look up programming language cheat sheets, examples and documentation from cht.sh"
    ),
    input_schema={
        "type": "object",
        "properties": {
            "language": {
                "type": "string",
                "description": "Programming language (e.g., javascript, python, go)",
            },
            "query": {
                "type": "string",
                "description": "Query or topic to search for (e.g., map, regex, sort)",
            },
            "options": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Optional parameters (e.g., 'T' for text-only, 'q' for quiet)",
            },
        },
        "required": ["query"],
    },
)

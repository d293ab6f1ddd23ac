"""
Result envelope shared by all operations.

Every operation returns a ToolResult; nothing raises past the dispatcher.
to_call_result() gives the MCP wire shape ``{"content": [{"type": "text",
"text": ...}], "isError": ...}`` with the text passed through verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass

from mcp.types import CallToolResult, TextContent


@dataclass(frozen=True)
class ToolResult:
    """Uniform success/error envelope."""

    content: str
    is_error: bool = False

    @classmethod
    def ok(cls, content: str) -> ToolResult:
        return cls(content=content, is_error=False)

    @classmethod
    def error(cls, content: str) -> ToolResult:
        return cls(content=content, is_error=True)

    def to_call_result(self) -> CallToolResult:
        """Convert to the MCP tool-call result returned to the client."""
        return CallToolResult(
            content=[TextContent(type="text", text=self.content)],
            isError=self.is_error,
        )

"""MCP transport layer: FastMCP server, tool wiring, audit trail."""

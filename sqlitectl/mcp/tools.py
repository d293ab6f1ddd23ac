"""
sqlitectl MCP Tools — six SQL/insight tools, one resource, one prompt.

Thin wrappers around OperationDispatcher. Each tool call:

    ① Dispatch   — classifier gate → executor or ledger
    ② Audit log  — always, including on failure (finally block)
    ③ Envelope   — the ToolResult is returned as a CallToolResult, so
                   error text reaches the client verbatim with isError=true

Tools:
    READ:     read_query
    WRITE:    write_query, create_table
    SCHEMA:   list_tables, describe_table
    INSIGHT:  append_insight (notifies memo://insights subscribers)

Resource:   memo://insights — Business Insights Memo (text/plain)
Prompt:     mcp-demo(topic), described per call as "Demo template for <topic>"
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, GetPromptResult
from pydantic import AnyUrl

from sqlitectl.dispatcher import OperationDispatcher
from sqlitectl.insights import MEMO_NAME, MEMO_URI
from sqlitectl.mcp.audit import AuditLogger
from sqlitectl.mcp.prompts import (
    DEMO_PROMPT_DESCRIPTION,
    DEMO_PROMPT_NAME,
    demo_prompt_description,
    render_demo_prompt,
)
from sqlitectl.types import ToolResult

logger = logging.getLogger(__name__)


class SqliteFastMCP(FastMCP):
    """FastMCP whose mcp-demo prompt carries a topic-specific description."""

    async def get_prompt(
        self, name: str, arguments: Optional[Dict[str, Any]] = None,
    ) -> GetPromptResult:
        result = await super().get_prompt(name, arguments)
        if name == DEMO_PROMPT_NAME and arguments and "topic" in arguments:
            result = result.model_copy(
                update={"description": demo_prompt_description(arguments["topic"])}
            )
        return result


def register_sqlite_tools(
    mcp,
    dispatcher: OperationDispatcher,
    *,
    audit: Optional[AuditLogger] = None,
) -> None:
    """
    Register the SQLite tools, the memo resource and the demo prompt.

    Args:
        mcp: FastMCP server instance.
        dispatcher: OperationDispatcher owning the store and the ledger.
        audit: AuditLogger for per-call records (default: stderr).
    """
    if audit is None:
        audit = AuditLogger()

    db_path = str(dispatcher.executor.db_path)

    def _run(
        tool: str,
        call: Callable[[], ToolResult],
        detail: Optional[Dict[str, Any]] = None,
    ) -> ToolResult:
        t0 = time.monotonic()
        rid = audit.new_rid()
        outcome = "error"
        try:
            result = call()
            outcome = "error" if result.is_error else "ok"
            return result
        finally:
            audit.log(tool, rid, db_path, outcome, detail,
                      (time.monotonic() - t0) * 1000)

    # =====================================================================
    # SQL tools
    # =====================================================================

    @mcp.tool()
    def read_query(query: str) -> CallToolResult:
        """Execute a SELECT query on the SQLite database.

        Args:
            query: SELECT SQL query to execute.

        Returns:
            JSON array of result rows.
        """
        return _run(
            "read_query",
            lambda: dispatcher.read_query(query),
            audit.make_statement_detail(query),
        ).to_call_result()

    @mcp.tool()
    def write_query(query: str) -> CallToolResult:
        """Execute an INSERT, UPDATE, or DELETE query on the SQLite database.

        Args:
            query: SQL query to execute.
        """
        return _run(
            "write_query",
            lambda: dispatcher.write_query(query),
            audit.make_statement_detail(query),
        ).to_call_result()

    @mcp.tool()
    def create_table(query: str) -> CallToolResult:
        """Create a new table in the SQLite database.

        Args:
            query: CREATE TABLE SQL statement.
        """
        return _run(
            "create_table",
            lambda: dispatcher.create_table(query),
            audit.make_statement_detail(query),
        ).to_call_result()

    @mcp.tool()
    def list_tables() -> CallToolResult:
        """List all tables in the SQLite database."""
        return _run("list_tables", dispatcher.list_tables).to_call_result()

    @mcp.tool()
    def describe_table(table_name: str) -> CallToolResult:
        """Get the schema information for a specific table.

        Args:
            table_name: Name of the table to describe.
        """
        return _run(
            "describe_table",
            lambda: dispatcher.describe_table(table_name),
            {"table": table_name},
        ).to_call_result()

    # =====================================================================
    # Insights
    # =====================================================================

    @mcp.tool()
    async def append_insight(insight: str, ctx: Context = None) -> CallToolResult:
        """Add a business insight to the memo.

        Args:
            insight: Business insight discovered from data analysis.
        """
        result = _run(
            "append_insight",
            lambda: dispatcher.append_insight(insight),
            AuditLogger.make_content_detail(insight),
        )
        if not result.is_error and ctx is not None:
            await ctx.session.send_resource_updated(AnyUrl(MEMO_URI))
            logger.debug("Sent resource update for %s", MEMO_URI)
        return result.to_call_result()

    @mcp.resource(
        MEMO_URI,
        name=MEMO_NAME,
        description="A living document of discovered business insights",
        mime_type="text/plain",
    )
    def insights_memo() -> str:
        """Business Insights Memo synthesized from appended insights."""
        return dispatcher.read_memo()

    # =====================================================================
    # Prompt
    # =====================================================================

    @mcp.prompt(name=DEMO_PROMPT_NAME, description=DEMO_PROMPT_DESCRIPTION)
    def mcp_demo(topic: str) -> str:
        """Demo template seeded with a topic."""
        return render_demo_prompt(topic)

"""
sqlitectl MCP Server — SQLite access and business insights for LLMs

Standalone MCP server exposing a SQLite database via the Model Context
Protocol. Works with Claude Desktop, VS Code, and any MCP-compatible
client over stdio.

Architecture: thin MCP layer delegating to OperationDispatcher.
No business logic in this module.

Usage:
    python -m sqlitectl.mcp.server /path/to/database.db
    python -m sqlitectl.mcp.server --config sqlitectl.json -v
    sqlitectl-mcp --audit-log audit.jsonl

Database path precedence: positional argument, $SQLITECTL_DB, config
file, then ~/.mcp-sqlite/database.db.
"""

from __future__ import annotations

import argparse
import atexit
import logging
import os
import sys

logger = logging.getLogger(__name__)

# Instructions embedded in FastMCP — always visible to any MCP client.
_MCP_INSTRUCTIONS = (
    "SQLite database access with a living business insights memo (6 tools).\n"
    "\n"
    "READ:     read_query for SELECT statements only.\n"
    "WRITE:    write_query for INSERT/UPDATE/DELETE, create_table for DDL.\n"
    "SCHEMA:   list_tables, describe_table.\n"
    "INSIGHT:  append_insight to record findings; they are collected in the\n"
    "          memo://insights resource (Business Insights Memo).\n"
    "\n"
    "Rules:\n"
    "- One statement per call\n"
    "- Pass plain table names to describe_table (no quoting is applied)\n"
)

_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser for the SQLite MCP server."""
    p = argparse.ArgumentParser(
        prog="sqlitectl-mcp",
        description="sqlitectl MCP Server — SQLite access and business insights memo",
    )
    p.add_argument(
        "db_path",
        nargs="?",
        default=None,
        help="SQLite database path (default: $SQLITECTL_DB or ~/.mcp-sqlite/database.db)",
    )
    p.add_argument(
        "--config",
        default=os.environ.get("SQLITECTL_CONFIG"),
        help="JSON config file (default: $SQLITECTL_CONFIG)",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    lg = p.add_argument_group("logging")
    lg.add_argument(
        "--error-log",
        default=None,
        help="Append ERROR-level log records to this file",
    )
    lg.add_argument(
        "--combined-log",
        default=None,
        help="Append all log records to this file",
    )
    lg.add_argument(
        "--audit-log",
        default=None,
        help="Audit log file path (default: stderr)",
    )

    return p


def configure_logging(
    level: str = "INFO",
    error_log: str | None = None,
    combined_log: str | None = None,
) -> None:
    """Configure root logging: stderr always, plus optional file sinks.

    stdout carries the MCP protocol and is never used for logs.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if combined_log:
        handlers.append(logging.FileHandler(combined_log, encoding="utf-8"))
    if error_log:
        err = logging.FileHandler(error_log, encoding="utf-8")
        err.setLevel(logging.ERROR)
        handlers.append(err)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=_LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def create_server(args=None):
    """
    Create and configure the FastMCP server with SQLite tools.

    Args:
        args: Parsed argparse.Namespace, or None to parse from sys.argv.

    Returns:
        (mcp_server, dispatcher) tuple.

    Raises:
        StartupError: store path or directory cannot be prepared.
        ConfigError: config file holds invalid values.
    """
    from sqlitectl.config import load_config
    from sqlitectl.dispatcher import OperationDispatcher
    from sqlitectl.executor import QueryExecutor
    from sqlitectl.mcp.audit import AuditLogger
    from sqlitectl.mcp.tools import SqliteFastMCP, register_sqlite_tools

    if args is None:
        args = build_parser().parse_args()

    config = load_config(args.config, strict=True)

    db_path = args.db_path or os.environ.get("SQLITECTL_DB") or config.store.db_path

    executor = QueryExecutor(db_path)
    executor.ensure_store()
    dispatcher = OperationDispatcher(executor)

    audit_path = args.audit_log or config.server.audit_log
    audit_output = None
    if audit_path:
        audit_output = open(audit_path, "a", encoding="utf-8")
    audit = AuditLogger(output=audit_output)
    atexit.register(audit.close)

    mcp = SqliteFastMCP(
        name=config.server.name,
        instructions=_MCP_INSTRUCTIONS,
    )
    register_sqlite_tools(mcp, dispatcher, audit=audit)

    logger.info(
        "sqlitectl MCP server ready: db=%s, audit=%s",
        executor.db_path, audit_path or "stderr",
    )

    return mcp, dispatcher


def main():
    """CLI entry point — parse args, create server, run."""
    from sqlitectl.config import ConfigError, load_config
    from sqlitectl.executor import StartupError

    parser = build_parser()
    args = parser.parse_args()

    log_cfg = load_config(args.config).logging
    configure_logging(
        "DEBUG" if args.verbose else log_cfg.level,
        error_log=args.error_log or log_cfg.error_log,
        combined_log=args.combined_log or log_cfg.combined_log,
    )
    logger.info("Starting MCP SQLite Server")

    try:
        mcp, _dispatcher = create_server(args)
    except (StartupError, ConfigError, OSError) as e:
        logger.error("Error during startup: %s", e)
        sys.exit(1)

    mcp.run()


if __name__ == "__main__":
    main()

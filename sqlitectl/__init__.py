"""
sqlitectl — SQLite access for LLM agents, with a business insights memo.

Six operations over one SQLite file (read, write, create table, list
tables, describe table, append insight) and a memo document synthesized
from the insights appended during a session.
"""

__version__ = "0.1.0"

from sqlitectl.classify import StatementKind, classify_statement
from sqlitectl.dispatcher import OperationDispatcher, ValidationError
from sqlitectl.executor import ExecutionError, QueryExecutor, StartupError
from sqlitectl.insights import InsightLedger, synthesize_memo
from sqlitectl.config import SqliteConfig
from sqlitectl.types import ToolResult

__all__ = [
    "__version__",
    "StatementKind",
    "classify_statement",
    "OperationDispatcher",
    "ValidationError",
    "ExecutionError",
    "QueryExecutor",
    "StartupError",
    "InsightLedger",
    "synthesize_memo",
    "SqliteConfig",
    "ToolResult",
]

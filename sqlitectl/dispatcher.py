"""
Operation Dispatcher — the six named operations plus the memo read path.

Composes the classifier, the executor and the insight ledger, and maps
every outcome to a ToolResult envelope:

    read_query      SELECT only
    write_query     anything but SELECT
    create_table    CREATE TABLE only
    list_tables     fixed catalog query
    describe_table  PRAGMA table_info(<name>)
    append_insight  ledger append, no store access
    read_memo       memo synthesized from the ledger

Shape violations (ValidationError) and store faults (ExecutionError) are
converted to ``is_error=True`` results here; neither escapes.

The dispatcher owns its ledger, so independent dispatchers never share
insights.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlitectl.classify import is_create_table, is_read
from sqlitectl.executor import ExecutionError, QueryExecutor
from sqlitectl.formatting import format_rows
from sqlitectl.insights import InsightLedger, synthesize_memo
from sqlitectl.types import ToolResult

logger = logging.getLogger(__name__)

LIST_TABLES_SQL = "SELECT name FROM sqlite_master WHERE type='table'"

READ_ONLY_MESSAGE = "Only SELECT queries are allowed for read_query"
NO_SELECT_MESSAGE = "SELECT queries are not allowed for write_query"
CREATE_ONLY_MESSAGE = "Only CREATE TABLE statements are allowed"
EMPTY_INSIGHT_MESSAGE = "Insight must be a non-empty string"
INSIGHT_ADDED = "Insight added to memo"


class ValidationError(ValueError):
    """Raised when a caller argument does not match the operation's shape."""


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ValidationError(message)


class OperationDispatcher:
    """Named-operation surface over one store and one insight ledger."""

    def __init__(
        self,
        executor: QueryExecutor,
        ledger: Optional[InsightLedger] = None,
    ):
        self._executor = executor
        self._ledger = ledger if ledger is not None else InsightLedger()

    @property
    def executor(self) -> QueryExecutor:
        return self._executor

    @property
    def ledger(self) -> InsightLedger:
        return self._ledger

    # -- SQL operations ----------------------------------------------------

    def read_query(self, query: str) -> ToolResult:
        """Execute a SELECT and return its rows as JSON text."""
        try:
            _require(is_read(query), READ_ONLY_MESSAGE)
            rows = self._executor.execute(query)
        except ValidationError as e:
            return self._rejected("read_query", e)
        except ExecutionError as e:
            return ToolResult.error(f"Error executing query: {e}")
        return ToolResult.ok(format_rows(rows))

    def write_query(self, query: str) -> ToolResult:
        """Execute any non-SELECT statement and return its rows as JSON text."""
        try:
            _require(not is_read(query), NO_SELECT_MESSAGE)
            rows = self._executor.execute(query)
        except ValidationError as e:
            return self._rejected("write_query", e)
        except ExecutionError as e:
            return ToolResult.error(f"Error executing query: {e}")
        return ToolResult.ok(format_rows(rows))

    def create_table(self, query: str) -> ToolResult:
        """Execute a CREATE TABLE statement exactly once."""
        try:
            _require(is_create_table(query), CREATE_ONLY_MESSAGE)
            self._executor.execute(query)
        except ValidationError as e:
            return self._rejected("create_table", e)
        except ExecutionError as e:
            return ToolResult.error(f"Error creating table: {e}")
        logger.info("Table created: %s", query.strip())
        return ToolResult.ok(f"Table created successfully: {query}")

    def list_tables(self) -> ToolResult:
        """Return the names of all tables in the store."""
        try:
            rows = self._executor.execute(LIST_TABLES_SQL)
        except ExecutionError as e:
            return ToolResult.error(f"Error listing tables: {e}")
        return ToolResult.ok(format_rows(rows))

    def describe_table(self, table_name: str) -> ToolResult:
        """Return column metadata for a table.

        The name is interpolated as-is into PRAGMA table_info(); callers
        are trusted to pass a plain identifier. An unknown table yields
        an empty list, as SQLite does.
        """
        try:
            rows = self._executor.execute(f"PRAGMA table_info({table_name})")
        except ExecutionError as e:
            return ToolResult.error(f"Error describing table: {e}")
        return ToolResult.ok(format_rows(rows))

    # -- Insights ----------------------------------------------------------

    def append_insight(self, insight: str) -> ToolResult:
        """Append an insight to the ledger.

        The memo is synthesized on read; the tool layer notifies
        memo://insights subscribers after a successful append.
        """
        try:
            _require(bool(insight and insight.strip()), EMPTY_INSIGHT_MESSAGE)
        except ValidationError as e:
            return self._rejected("append_insight", e)
        count = self._ledger.append(insight)
        logger.info("Insight appended (%d in memo)", count)
        return ToolResult.ok(INSIGHT_ADDED)

    def read_memo(self) -> str:
        """Current memo text, synthesized from the ledger."""
        return synthesize_memo(self._ledger.snapshot())

    # -- Helpers -----------------------------------------------------------

    @staticmethod
    def _rejected(operation: str, error: ValidationError) -> ToolResult:
        logger.warning("%s rejected: %s", operation, error)
        return ToolResult.error(str(error))

"""
Query Executor — single-statement SQLite execution.

Every call opens a fresh connection, runs exactly one statement with
optional named parameters, fetches all rows eagerly and closes the
connection before returning, fault or not. There is no pooling and no
statement cache: no connection state leaks from one operation to the next.

Rows come back as plain dicts (column name -> value). Values keep the
dynamic SQLite typing: None, int, float, str or bytes.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

# Fallback store location when no path is supplied at startup
DEFAULT_DB_PATH = Path.home() / ".mcp-sqlite" / "database.db"

Row = Dict[str, Any]


class ExecutionError(RuntimeError):
    """Raised when SQLite rejects a statement or the connection cannot open."""


class StartupError(RuntimeError):
    """Raised when the store path or its directory cannot be prepared."""


def resolve_store_path(path: Union[str, os.PathLike, None] = None) -> Path:
    """Resolve a store path to an absolute path (``~`` expanded).

    None falls back to DEFAULT_DB_PATH.
    """
    raw = Path(path) if path else DEFAULT_DB_PATH
    return raw.expanduser().resolve()


class QueryExecutor:
    """Runs statements against one SQLite file, one connection per call."""

    def __init__(self, db_path: Union[str, os.PathLike]):
        self._db_path = resolve_store_path(db_path)

    @property
    def db_path(self) -> Path:
        """Absolute path of the backing store."""
        return self._db_path

    def ensure_store(self) -> None:
        """Create the parent directory and the database file if absent.

        Opens a connection and closes it straight away; nothing is kept.

        Raises:
            StartupError: directory or file cannot be created.
        """
        logger.debug("Initializing database connection: %s", self._db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            with closing(sqlite3.connect(str(self._db_path))):
                pass
        except (OSError, sqlite3.Error) as e:
            raise StartupError(
                f"Cannot prepare store at '{self._db_path}': {e}"
            ) from e

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self._db_path))
        except sqlite3.Error as e:
            logger.error("Cannot open database %s: %s", self._db_path, e)
            raise ExecutionError(f"Cannot open database: {e}") from e
        conn.row_factory = sqlite3.Row
        return conn

    def execute(
        self,
        statement: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Row]:
        """Execute one statement and return all resulting rows.

        Args:
            statement: Raw SQL text (a single statement).
            params: Named parameters bound to ``:name`` placeholders.

        Returns:
            List of rows, each a dict keyed by column name. Statements
            that produce no rows return an empty list.

        Raises:
            ExecutionError: SQLite rejected the statement (syntax error,
                constraint violation, missing table, ...).
        """
        logger.debug("Executing query: %s", statement)
        with closing(self._connect()) as conn:
            try:
                cursor = conn.execute(
                    statement, dict(params) if params is not None else ()
                )
                rows = [dict(r) for r in cursor.fetchall()]
                conn.commit()
            except (sqlite3.Error, sqlite3.Warning) as e:
                # sqlite3.Warning: more than one statement on older Pythons
                logger.error("Database error executing query: %s", e)
                raise ExecutionError(str(e)) from e
        logger.debug("Query returned %d rows", len(rows))
        return rows

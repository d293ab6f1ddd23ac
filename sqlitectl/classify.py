"""
Statement classification by leading keyword.

Provides the single gate used by every SQL operation:
  classify_statement() — label a raw statement as read, write,
  create_table or other.

Classification is a prefix test on the trimmed, uppercased text. The
statement body is never parsed; SQL correctness is left to SQLite, which
raises its own error at execution time.
"""

from __future__ import annotations

from typing import Literal

StatementKind = Literal["read", "write", "create_table", "other"]

_READ_PREFIX = "SELECT"
_CREATE_TABLE_PREFIX = "CREATE TABLE"
_WRITE_PREFIXES = ("INSERT", "UPDATE", "DELETE")


def _normalize(text: str) -> str:
    return text.strip().upper()


def classify_statement(text: str) -> StatementKind:
    """Classify a SQL statement by its leading keyword.

    Examples:
        >>> classify_statement("  select * from t")
        'read'
        >>> classify_statement("CREATE TABLE t (id INTEGER)")
        'create_table'
        >>> classify_statement("insert into t values (1)")
        'write'
        >>> classify_statement("DROP TABLE t")
        'other'
    """
    head = _normalize(text)
    if head.startswith(_READ_PREFIX):
        return "read"
    if head.startswith(_CREATE_TABLE_PREFIX):
        return "create_table"
    if head.startswith(_WRITE_PREFIXES):
        return "write"
    return "other"


def is_read(text: str) -> bool:
    """True if the statement is accepted by read_query."""
    return classify_statement(text) == "read"


def is_create_table(text: str) -> bool:
    """True if the statement is accepted by create_table."""
    return classify_statement(text) == "create_table"

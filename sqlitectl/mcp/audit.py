"""
MCP Audit Logger — Structured JSONL logging for SQL tool calls.

One record per tool call, successful or not. Records carry the tool
name, a request ID, the outcome and the latency. Statement-carrying tools
add a short preview, a SHA-256 hash, the byte size and the classified
statement kind. Full statements are never written to the audit sink.

log() never raises: a broken audit sink is reported through the module
logger and the tool call proceeds.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

from sqlitectl.classify import classify_statement

logger = logging.getLogger(__name__)

AUDIT_SCHEMA_VERSION = 1
PREVIEW_MAX_CHARS = 120


def _timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class AuditLogger:
    """Structured JSONL audit logger for MCP tool calls."""

    def __init__(self, output: Optional[TextIO] = None):
        """
        Args:
            output: File handle for audit output. None → stderr.
        """
        self._output = output if output is not None else sys.stderr

    def new_rid(self) -> str:
        """Generate a new request ID (UUID4 hex string)."""
        return uuid.uuid4().hex

    def close(self) -> None:
        """Close a file sink. stderr is left open."""
        if self._output is not sys.stderr and not self._output.closed:
            self._output.close()

    def log(
        self,
        tool: str,
        rid: str,
        db_path: str,
        outcome: str,
        detail: Optional[Dict[str, Any]] = None,
        latency_ms: float = 0.0,
    ) -> None:
        """
        Write one JSONL audit record.

        Args:
            tool: MCP tool name (e.g. "read_query").
            rid: Request ID (from new_rid()).
            db_path: Absolute path of the backing store.
            outcome: "ok" or "error".
            detail: Tool-specific fields.
            latency_ms: Wall-clock latency in milliseconds.
        """
        record: Dict[str, Any] = {
            "v": AUDIT_SCHEMA_VERSION,
            "ts": _timestamp(),
            "rid": rid,
            "tool": tool,
            "db": db_path,
            "outcome": outcome,
        }
        if detail:
            record["d"] = detail
        record["ms"] = round(latency_ms, 1)

        try:
            line = json.dumps(record, ensure_ascii=False, separators=(",", ":"))
            self._output.write(line + "\n")
            self._output.flush()
        except (OSError, ValueError, TypeError) as e:
            logger.debug("Audit record for %s (%s) not written: %s", tool, rid, e)

    @staticmethod
    def make_content_detail(content: str) -> Dict[str, Any]:
        """
        Build safe audit detail fields for free text (e.g. an insight).

        - preview: first 120 chars, newlines → space, truncated with '…'
        - hash: SHA-256 hex digest (correlate without storing content)
        - bytes: content size in UTF-8
        """
        encoded = content.encode("utf-8")
        preview = content[:PREVIEW_MAX_CHARS].replace("\n", " ").replace("\r", "")
        if len(content) > PREVIEW_MAX_CHARS:
            preview = preview.rstrip() + "\u2026"  # …

        return {
            "bytes": len(encoded),
            "hash": hashlib.sha256(encoded).hexdigest(),
            "preview": preview,
        }

    @staticmethod
    def make_statement_detail(statement: str) -> Dict[str, Any]:
        """Content detail for a SQL statement, plus its classified kind."""
        return {
            "kind": classify_statement(statement),
            **AuditLogger.make_content_detail(statement),
        }

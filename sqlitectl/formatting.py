"""
Result Set Formatting — rows to JSON text.

Single place where query results become the text payload of a tool
result. Rows are dicts with dynamic SQLite values:

- BLOB columns are not JSON-native and are rendered as base64 strings.
- Non-finite REALs (inf, -inf) have no JSON form and are rendered as null.
"""

from __future__ import annotations

import base64
import json
import math
from typing import Any, Dict, List


def _json_default(value: Any) -> Any:
    """Fallback encoder for non-JSON SQLite values."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _finite(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def format_rows(rows: List[Dict[str, Any]]) -> str:
    """Serialize a result set as a compact JSON array of objects.

    Column order within each row follows the query's column order. The
    output is strict JSON (no Infinity or NaN literals).
    """
    rows = [{k: _finite(v) for k, v in row.items()} for row in rows]
    return json.dumps(
        rows, ensure_ascii=False, separators=(",", ":"),
        allow_nan=False, default=_json_default,
    )

"""
Raw SQL helpers for ibis backends.

Values are rendered as escaped literals; ibis' ``sql()`` has no bind
parameters, so every string goes through ``sql_value``.
"""

import json
import math
from datetime import datetime
from typing import Any

import ibis

from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.sql")


def escape_sql_string(value: str) -> str:
    """Escape single quotes for SQL strings."""
    return value.replace("'", "''")


def sql_value(value: Any) -> str:
    """Convert a Python value to its SQL literal."""
    if value is None:
        return "NULL"
    # bool before int: isinstance(True, int) is True
    elif isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    elif isinstance(value, (int, float)):
        return str(value)
    elif isinstance(value, datetime):
        return f"TIMESTAMP '{value.replace(tzinfo=None).isoformat(sep=' ')}'"
    elif isinstance(value, (dict, list)):
        return f"'{escape_sql_string(json.dumps(value, sort_keys=True))}'"
    else:
        return f"'{escape_sql_string(str(value))}'"


def execute_statement(connection: ibis.BaseBackend, statement: str) -> None:
    """
    Execute a DDL/DML statement immediately.

    ``raw_sql`` is used directly: statements have side effects and must run
    exactly once. Cursors returned by server backends are closed; DuckDB
    returns its own connection, which must stay open.
    """
    result = connection.raw_sql(statement)
    if getattr(connection, "name", "") == "duckdb":
        return
    if result is not None and result is not connection and hasattr(result, "close"):
        try:
            result.close()
        except Exception as e:
            logger.debug(f"Error closing cursor: {e}")


def fetch_records(connection: ibis.BaseBackend, query: str) -> list[dict[str, Any]]:
    """Run a SELECT and return rows as dicts with NULL/NaN mapped to None."""
    frame = connection.sql(query).execute()
    if frame is None or len(frame) == 0:
        return []
    return [{k: _clean(v) for k, v in row.items()} for row in frame.to_dict("records")]


def _clean(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    # pandas NaT / Timestamp
    if type(value).__name__ == "NaTType":
        return None
    if hasattr(value, "to_pydatetime"):
        return value.to_pydatetime()
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        return value.item()
    return value

from datetime import date, datetime, time
from sqlchat.core.logging import get_logger
from typing import Any, Dict, List, Sequence, Tuple
import json
import sqlparse

logger = get_logger(__name__)


def format_value(value: Any) -> str:
    """Render one cell for display."""
    if value is None:
        return "NULL"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    return str(value)


def format_result(rows: Sequence[Dict[str, Any]]) -> Tuple[List[str], List[List[str]]]:
    """Turn records into (columns, rows of display strings).

    Column names come from the first record; rows are assumed to share keys.
    """
    if not rows:
        return [], []

    columns = list(rows[0].keys())
    return columns, [[format_value(row.get(col)) for col in columns] for row in rows]


def format_sql(sql: str) -> str:
    """Pretty-print SQL for display, falling back to the input."""
    try:
        return sqlparse.format(sql, reindent=True, keyword_case="upper").strip()
    except Exception as e:
        logger.warning(f"SQL formatting error: {e}")
        return sql

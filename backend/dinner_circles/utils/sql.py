"""
SQL result helpers.

COUNT queries through SQLModel can come back as a bare int or as a 1-tuple
Row depending on the select form; scalar_int() accepts both.
"""
from typing import Any


def scalar_int(x: Any) -> int:
    """Coerce a COUNT/aggregate result (int or 1-tuple/Row) to int."""
    try:
        return int(x[0])
    except (TypeError, IndexError):
        return int(x)

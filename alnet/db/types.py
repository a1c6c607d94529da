from typing import Iterable, List, Optional

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator


def normalize_string_list(values: Optional[Iterable[str]]) -> List[str]:
    """Trim, drop empties and duplicates (case-insensitive), keep first-seen order"""
    result: List[str] = []
    seen = set()
    for value in values or []:
        item = value.strip() if isinstance(value, str) else ""
        if not item or item.lower() in seen:
            continue
        seen.add(item.lower())
        result.append(item)
    return result


class StringList(TypeDecorator):
    """Ordered set of strings stored as comma separated text.

    Kept as plain text so substring predicates (ILIKE) work the same on
    PostgreSQL and SQLite.
    """

    impl = Text
    cache_ok = True

    def coerce_compared_value(self, op, value):
        # LIKE/ILIKE operands are plain patterns, not lists
        return Text()

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            return value
        return ",".join(normalize_string_list(value))

    def process_result_value(self, value, dialect):
        if not value:
            return []
        return [item for item in value.split(",") if item]

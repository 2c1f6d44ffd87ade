"""
Sorter stage: total order over records by id.

Ids that both look like base-10 integers compare numerically; any other
pair compares as plain strings.
"""

from __future__ import annotations

import functools
import re
from typing import Iterable, List, Optional

from .models import ItemRecord

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_int_id(value: str) -> Optional[int]:
    # int() alone would also accept whitespace, underscores and non-ASCII digits
    if _INTEGER_RE.fullmatch(value):
        return int(value)
    return None


def compare_ids(a: str, b: str) -> int:
    num_a = parse_int_id(a)
    num_b = parse_int_id(b)
    if num_a is not None and num_b is not None:
        return (num_a > num_b) - (num_a < num_b)
    return (a > b) - (a < b)


def _compare_records(a: ItemRecord, b: ItemRecord) -> int:
    return compare_ids(a.id, b.id)


def buffer_records(records: Iterable[ItemRecord]) -> List[ItemRecord]:
    """Materialize the filtered stream; sorting needs every record."""
    return list(records)


def sort_records(records: Iterable[ItemRecord]) -> List[ItemRecord]:
    """Return records ordered by id. Stable for equal ids."""
    return sorted(buffer_records(records), key=functools.cmp_to_key(_compare_records))

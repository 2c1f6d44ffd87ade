"""
Filter stage: turns raw CSV rows into accepted ItemRecords.

Each rule is a small predicate so it can be exercised on its own. A row
that fails any rule is dropped silently; nothing here is fatal.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .models import ColumnPositions, FilterConfig, FilterStats, ItemRecord

logger = logging.getLogger(__name__)

Fields = Tuple[str, str, str]


def is_wide_enough(row: Sequence[str], positions: ColumnPositions) -> bool:
    return len(row) >= positions.min_width


def extract_fields(row: Sequence[str], positions: ColumnPositions) -> Fields:
    return (
        row[positions.id].strip(),
        row[positions.name].strip(),
        row[positions.category].strip(),
    )


def has_required_fields(fields: Fields) -> bool:
    return all(fields)


def is_category_allowed(category: str, config: FilterConfig) -> bool:
    return category in config.categories


def is_name_excluded(name: str, config: FilterConfig) -> bool:
    return any(term in name for term in config.excluded_terms)


def check_row(row: Sequence[str], positions: ColumnPositions, config: FilterConfig) -> Tuple[Optional[ItemRecord], Optional[str]]:
    """
    Run one row through every rule.

    Returns (record, None) when accepted, or (None, reason) naming the
    first rule it failed.
    """
    if not is_wide_enough(row, positions):
        return None, "short_row"

    item_id, name, category = fields = extract_fields(row, positions)
    if not has_required_fields(fields):
        return None, "missing_field"
    if not is_category_allowed(category, config):
        return None, "category_not_allowed"
    if is_name_excluded(name, config):
        return None, "excluded_name"

    return ItemRecord(id=item_id, name=name, category=category), None


def filter_rows(
    rows: Iterable[List[str]],
    positions: ColumnPositions,
    config: Optional[FilterConfig] = None,
    stats: Optional[FilterStats] = None,
) -> Iterator[ItemRecord]:
    """Lazily yield the records that pass every rule."""
    config = config or FilterConfig()

    for row in rows:
        if stats is not None:
            stats.rows_seen += 1

        record, reason = check_row(row, positions, config)
        if record is None:
            logger.debug("Dropped row %r: %s", row, reason)
            if stats is not None:
                stats.reject(reason)
            continue

        if stats is not None:
            stats.accepted += 1
        yield record

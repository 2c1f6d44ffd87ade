"""
Runs the four stages in order: load, filter, sort, export.
"""

from __future__ import annotations

import logging
from typing import Optional

from .exporter import export_tables
from .filters import filter_rows
from .loader import load_items
from .models import ExportSummary, FilterConfig, FilterStats
from .rules import DEFAULT_OUTPUT_DIR
from .sorting import sort_records

logger = logging.getLogger(__name__)


def run(
    input_path,
    output_dir=DEFAULT_OUTPUT_DIR,
    config: Optional[FilterConfig] = None,
    encoding: Optional[str] = None,
    stats: Optional[FilterStats] = None,
) -> ExportSummary:
    """
    Convert one item CSV into JSON lookup tables.

    Any loader or export error propagates; the input file is closed
    before anything is written.
    """
    config = config or FilterConfig()
    stats = stats if stats is not None else FilterStats()

    with load_items(input_path, encoding=encoding) as source:
        records = sort_records(filter_rows(source.rows(), source.positions, config, stats))

    logger.info(
        "Accepted %d of %d rows (rejected: %s)",
        stats.accepted,
        stats.rows_seen,
        stats.rejected or "none",
    )

    return export_tables(records, output_dir)

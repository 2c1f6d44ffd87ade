"""
Exporter stage: id -> name lookup tables written as JSON.

One aggregate table (allitems.json) holds every record; each category
present in the data gets its own file named after the sanitized label.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List

from .exceptions import AggregateWriteError, CategoryWriteError, DirectoryCreationError
from .models import CategoryExport, ExportSummary, ItemRecord
from .rules import AGGREGATE_FILENAME, JSON_INDENT

logger = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_filename(label: str) -> str:
    """Filesystem-safe base name for a category label ("House Floor" -> "House_Floor")."""
    return _UNSAFE_CHARS_RE.sub("_", label.replace(" ", "_"))


def build_lookup_table(records: Iterable[ItemRecord]) -> Dict[str, str]:
    # later records overwrite earlier ones with the same id
    table: Dict[str, str] = {}
    for record in records:
        table[record.id] = record.name
    return table


def group_by_category(records: Iterable[ItemRecord]) -> Dict[str, List[ItemRecord]]:
    """Groups keyed by category, in order of first appearance."""
    groups: Dict[str, List[ItemRecord]] = {}
    for record in records:
        groups.setdefault(record.category, []).append(record)
    return groups


def render_table(table: Dict[str, str]) -> str:
    return json.dumps(table, ensure_ascii=False, indent=JSON_INDENT)


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def write_table(path: Path, table: Dict[str, str]) -> None:
    """
    Write table to path via a temp file in the same directory, so the
    target is either fully replaced or left untouched.
    """
    data = render_table(table).encode("utf-8")
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        # mkstemp creates 0600; give the output the usual umask-derived mode
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def ensure_output_dir(output_dir) -> Path:
    out = Path(output_dir)
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(f"error creating output directory {out}: {e}") from e
    return out


def export_category(out: Path, category: str, records: List[ItemRecord]) -> CategoryExport:
    path = out / f"{sanitize_filename(category)}.json"
    try:
        write_table(path, build_lookup_table(records))
    except OSError as e:
        raise CategoryWriteError(category, path, e) from e
    return CategoryExport(category=category, path=str(path), items=len(records))


def export_tables(records: List[ItemRecord], output_dir) -> ExportSummary:
    """
    Write allitems.json and one file per category into output_dir.

    A failure on the aggregate file aborts the export; a failure on a
    category file is logged and recorded in the summary.
    """
    out = ensure_output_dir(output_dir)

    aggregate_path = out / AGGREGATE_FILENAME
    try:
        write_table(aggregate_path, build_lookup_table(records))
    except OSError as e:
        raise AggregateWriteError(f"error saving all items to {aggregate_path}: {e}") from e
    logger.info("Wrote %s (%d records)", aggregate_path, len(records))

    summary = ExportSummary(aggregate_path=str(aggregate_path), total_items=len(records))

    seen_filenames: Dict[str, str] = {}
    for category, group in group_by_category(records).items():
        filename = sanitize_filename(category)
        if filename in seen_filenames:
            logger.warning(
                "Categories %r and %r both map to %s.json; the later one wins",
                seen_filenames[filename],
                category,
                filename,
            )
        seen_filenames[filename] = category

        try:
            result = export_category(out, category, group)
        except CategoryWriteError as e:
            logger.info("%s", e)
            result = CategoryExport(
                category=category,
                path=str(e.path),
                items=len(group),
                error=str(e),
            )
        else:
            logger.info("Wrote %s (%d items)", result.path, result.items)
        summary.categories.append(result)

    return summary

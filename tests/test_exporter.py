import json
import logging
import os
import stat

import pytest

from itemtables.exceptions import AggregateWriteError, DirectoryCreationError
from itemtables.exporter import (
    build_lookup_table,
    export_tables,
    group_by_category,
    render_table,
    sanitize_filename,
)
from itemtables.models import ItemRecord
from itemtables.sorting import sort_records


def rec(item_id, name, category="House"):
    return ItemRecord(id=item_id, name=name, category=category)


@pytest.mark.parametrize(
    "label, expected",
    [
        ("House Floor", "House_Floor"),
        ("NPC Skin!", "NPC_Skin_"),
        ("Pet", "Pet"),
        ("a-b_c", "a-b_c"),
        ("Wand/Staff", "Wand_Staff"),
        ("Café", "Caf_"),
    ],
)
def test_sanitize_filename(label, expected):
    assert sanitize_filename(label) == expected


def test_duplicate_id_last_write_wins():
    records = sort_records([rec("5", "Old Lamp"), rec("1", "Chair"), rec("5", "New Lamp")])
    assert build_lookup_table(records) == {"1": "Chair", "5": "New Lamp"}


def test_group_by_category_keeps_first_seen_order():
    records = [rec("1", "a", "Pet"), rec("2", "b", "House"), rec("3", "c", "Pet")]
    groups = group_by_category(records)
    assert list(groups) == ["Pet", "House"]
    assert [r.id for r in groups["Pet"]] == ["1", "3"]


def test_render_table_keeps_non_ascii():
    assert render_table({"1": "Café"}) == '{\n  "1": "Café"\n}'


def test_export_creates_nested_directory(tmp_path):
    out = tmp_path / "a" / "b"
    summary = export_tables([rec("1", "Chair", "House Floor")], out)

    assert summary.total_items == 1
    assert summary.aggregate_path == str(out / "allitems.json")
    assert [(c.category, c.items) for c in summary.written] == [("House Floor", 1)]
    assert json.loads((out / "House_Floor.json").read_text(encoding="utf-8")) == {"1": "Chair"}


def test_export_empty_input_writes_empty_aggregate(tmp_path):
    summary = export_tables([], tmp_path)
    assert (tmp_path / "allitems.json").read_text(encoding="utf-8") == "{}"
    assert summary.categories == []


def test_directory_creation_error(tmp_path):
    blocker = tmp_path / "file.txt"
    blocker.write_text("x")
    with pytest.raises(DirectoryCreationError):
        export_tables([rec("1", "Chair")], blocker / "out")


def test_aggregate_write_error_leaves_no_temp_files(tmp_path):
    (tmp_path / "allitems.json").mkdir()
    with pytest.raises(AggregateWriteError):
        export_tables([rec("1", "Chair")], tmp_path)
    assert sorted(p.name for p in tmp_path.iterdir()) == ["allitems.json"]


def test_category_failure_recorded_in_summary(tmp_path):
    (tmp_path / "Pet.json").mkdir()
    records = [rec("1", "Chair", "House"), rec("2", "Cat", "Pet")]
    summary = export_tables(records, tmp_path)

    assert [c.category for c in summary.written] == ["House"]
    assert [c.category for c in summary.failed] == ["Pet"]
    assert "error saving category Pet" in summary.failed[0].error


def test_colliding_labels_warn(tmp_path, caplog):
    records = [rec("1", "a", "NPC Skin"), rec("2", "b", "NPC_Skin")]
    with caplog.at_level("WARNING"):
        export_tables(records, tmp_path)
    assert "both map to NPC_Skin.json" in caplog.text
    assert json.loads((tmp_path / "NPC_Skin.json").read_text(encoding="utf-8")) == {"2": "b"}


def test_written_files_follow_umask(tmp_path):
    old = os.umask(0o022)
    try:
        export_tables([rec("1", "Chair", "Pet")], tmp_path)
    finally:
        os.umask(old)
    assert stat.S_IMODE((tmp_path / "allitems.json").stat().st_mode) == 0o644
    assert stat.S_IMODE((tmp_path / "Pet.json").stat().st_mode) == 0o644


def test_category_failure_logged_below_warning(tmp_path, caplog):
    (tmp_path / "Pet.json").mkdir()
    with caplog.at_level(logging.DEBUG):
        export_tables([rec("2", "Cat", "Pet")], tmp_path)
    failures = [r for r in caplog.records if "error saving category Pet" in r.getMessage()]
    assert len(failures) == 1
    assert failures[0].levelno < logging.WARNING

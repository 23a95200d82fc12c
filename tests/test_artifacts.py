from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from jobsched_sim.io import (
    ArtifactError,
    read_mapping,
    resolve_path,
    write_events_csv,
    write_jsonl,
    write_mapping,
    write_rows_csv,
)


def test_write_mapping_follows_suffix(tmp_path: Path) -> None:
    payload = {"version": "0.1", "jobs": [{"id": 0}]}
    for name in ("nested/a.yaml", "nested/a.json"):
        write_mapping(tmp_path / name, payload)
        assert read_mapping(tmp_path / name) == payload


@pytest.mark.parametrize(
    ("name", "text", "message"),
    [
        ("list.json", "[1, 2]", "root must be object"),
        ("broken.json", "{", "invalid config syntax"),
        ("broken.yaml", "a: [", "invalid config syntax"),
    ],
)
def test_read_mapping_errors(tmp_path: Path, name: str, text: str, message: str) -> None:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ArtifactError, match=message):
        read_mapping(path)
    with pytest.raises(ArtifactError, match="not found"):
        read_mapping(tmp_path / "missing.yaml")


def test_rows_csv_uses_union_of_keys(tmp_path: Path) -> None:
    out = tmp_path / "rows.csv"
    write_rows_csv(out, [{"a": 1}, {"b": 2, "a": 3}])
    with out.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert list(rows[0]) == ["a", "b"]
    assert rows[1] == {"a": "3", "b": "2"}


def test_events_csv_serializes_payload(tmp_path: Path) -> None:
    out = tmp_path / "events.csv"
    write_events_csv(out, [{"event_id": "evt-00000000", "seq": 0, "type": "JobArrived", "payload": {"x": 1}}])
    with out.open(encoding="utf-8", newline="") as f:
        row = next(csv.DictReader(f))
    assert json.loads(row["payload"]) == {"x": 1}
    assert row["processor_id"] == ""


def test_jsonl_and_resolve_path(tmp_path: Path) -> None:
    out = tmp_path / "deep" / "events.jsonl"
    write_jsonl(out, iter([{"seq": 0}, {"seq": 1}]))
    assert [json.loads(line)["seq"] for line in out.read_text(encoding="utf-8").splitlines()] == [0, 1]
    assert resolve_path(tmp_path, "x/y.csv") == (tmp_path / "x" / "y.csv").resolve()
    assert resolve_path(tmp_path, out) == out

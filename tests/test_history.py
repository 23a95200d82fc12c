from __future__ import annotations

import logging
from pathlib import Path

import pytest

from jobsched_sim.predictor import (
    HistoryError,
    JobHistoryRecord,
    load_history,
    parse_history_row,
    write_history,
)


def test_load_history_skips_header_blank_and_malformed_lines(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "history.csv"
    path.write_text(
        "\n".join(
            [
                "JobId,EstimatedTime,ActualTime,Priority,IsIOBound,NumDependencies,MemoryReq,NetworkReq",
                "0,5,7,3,true,1,2048,100",
                "",
                "1,abc,7,3,false,1,2048,100",
                "2,4,4,9,maybe,0,1024,50",
                "3,6,9",
                "4,2,3,1,0,2,512,10",
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    with caplog.at_level(logging.WARNING, logger="jobsched_sim.predictor.history"):
        result = load_history(path)

    assert result.loaded == 2
    assert result.skipped == 3
    assert [r.job_id for r in result.records] == [0, 4]
    assert result.records[0].io_bound is True
    assert result.records[1].io_bound is False
    assert sum("skipping history line" in message for message in caplog.messages) == 3


def test_load_history_missing_file(tmp_path: Path) -> None:
    with pytest.raises(HistoryError, match="not found"):
        load_history(tmp_path / "missing.csv")


def test_write_then_load_preserves_records(tmp_path: Path) -> None:
    records = [
        JobHistoryRecord(1, 5, 8, 2, True, 3, 4096, 250),
        JobHistoryRecord(2, 3, 3, 7, False, 0, 0, 0),
    ]
    path = tmp_path / "nested" / "history.csv"
    assert write_history(path, records) == 2
    assert path.read_text(encoding="utf-8").splitlines()[0].startswith("JobId,")
    assert load_history(path).records == records


def test_parse_history_row_accepts_yes_no() -> None:
    record = parse_history_row(["7", "1", "2", "3", "YES", "0", "10", "20"])
    assert record.io_bound is True
    with pytest.raises(ValueError, match="expected 8 fields"):
        parse_history_row(["1", "2"])


def test_load_history_skips_undecodable_line(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "history.csv"
    path.write_bytes(
        b"JobId,EstimatedTime,ActualTime,Priority,IsIOBound,NumDependencies,MemoryReq,NetworkReq\n"
        b"0,5,7,3,true,1,2048,100\n"
        b"2,\xff\xfe,6,3,true,0,1024,50\n"
        b"3,4,4,9,false,0,1024,50\n"
    )

    with caplog.at_level(logging.WARNING, logger="jobsched_sim.predictor.history"):
        result = load_history(path)

    assert result.loaded == 2
    assert result.skipped == 1
    assert [r.job_id for r in result.records] == [0, 3]
    assert any("line 3" in message for message in caplog.messages)

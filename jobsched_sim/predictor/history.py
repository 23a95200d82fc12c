"""Flat CSV interchange for completed-job history records."""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Iterable

from .base import HISTORY_FIELDS, JobHistoryRecord


logger = logging.getLogger(__name__)

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


class HistoryError(Exception):
    """History file could not be opened."""


@dataclass(slots=True)
class HistoryLoadResult:
    records: list[JobHistoryRecord] = field(default_factory=list)
    skipped: int = 0

    @property
    def loaded(self) -> int:
        return len(self.records)


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"invalid boolean {raw!r}")


def parse_history_row(row: list[str]) -> JobHistoryRecord:
    if len(row) < len(HISTORY_FIELDS):
        raise ValueError(f"expected {len(HISTORY_FIELDS)} fields, got {len(row)}")
    return JobHistoryRecord(
        job_id=int(row[0]),
        estimated_time=int(row[1]),
        actual_time=int(row[2]),
        priority=int(row[3]),
        io_bound=_parse_bool(row[4]),
        num_dependencies=int(row[5]),
        memory_requirement=int(row[6]),
        network_requirement=int(row[7]),
    )


def load_history(path: str | Path) -> HistoryLoadResult:
    """Read a history CSV; malformed lines are skipped and counted, not fatal.

    Lines are decoded one at a time, so undecodable bytes only cost that line.
    """
    input_path = Path(path)
    if not input_path.exists():
        raise HistoryError(f"history file not found: {path}")

    result = HistoryLoadResult()
    with input_path.open("rb") as handle:
        for line_no, raw_line in enumerate(handle, start=1):
            try:
                row = next(csv.reader([raw_line.decode("utf-8").lstrip("\ufeff")]), [])
                if not row or all(not cell.strip() for cell in row):
                    continue
                if line_no == 1 and row[0].strip() == HISTORY_FIELDS[0]:
                    continue
                result.records.append(parse_history_row([cell.strip() for cell in row]))
            except (ValueError, csv.Error) as exc:
                result.skipped += 1
                logger.warning("skipping history line %d in %s: %s", line_no, input_path, exc)

    logger.info("loaded %d history records from %s (%d skipped)", result.loaded, input_path, result.skipped)
    return result


def write_history(path: str | Path, records: Iterable[JobHistoryRecord]) -> int:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(HISTORY_FIELDS)
        for record in records:
            writer.writerow(record.to_row())
            count += 1
    return count

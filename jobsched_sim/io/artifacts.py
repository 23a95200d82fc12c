"""Readers and writers for run artifacts (configs, traces, metrics, summaries)."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Iterable

import yaml


EVENT_CSV_FIELDS = (
    "event_id",
    "seq",
    "correlation_id",
    "time",
    "type",
    "job_id",
    "processor_id",
    "payload",
)


class ArtifactError(Exception):
    """A config or artifact file is missing or cannot be parsed."""


def _target(path: str | Path) -> Path:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    return output


def resolve_path(base_dir: Path, raw_path: str | Path) -> Path:
    path = Path(raw_path)
    return path if path.is_absolute() else (base_dir / path).resolve()


def read_mapping(path: str | Path) -> dict[str, Any]:
    """Parse a YAML (``.yaml``/``.yml``) or JSON file whose root is an object."""
    source = Path(path)
    if not source.exists():
        raise ArtifactError(f"config file not found: {source}")
    text = source.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text) if source.suffix.lower() in {".yaml", ".yml"} else json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ArtifactError(f"invalid config syntax: {exc}") from exc
    if not isinstance(data, dict):
        raise ArtifactError(f"config root must be object: {source}")
    return data


def write_mapping(path: str | Path, payload: dict[str, Any]) -> None:
    output = _target(path)
    if output.suffix.lower() in {".yaml", ".yml"}:
        output.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    else:
        write_json(output, payload)


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    _target(path).write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def write_jsonl(path: str | Path, rows: Iterable[dict[str, Any]]) -> None:
    with _target(path).open("w", encoding="utf-8") as f:
        f.writelines(json.dumps(row, ensure_ascii=False) + "\n" for row in rows)


def write_rows_csv(path: str | Path, rows: list[dict[str, Any]]) -> None:
    """Columns are the union of row keys in first-seen order."""
    fieldnames = list(dict.fromkeys(key for row in rows for key in row))
    with _target(path).open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def write_events_csv(path: str | Path, events: Iterable[dict[str, Any]]) -> None:
    rows = [
        {
            **{key: event.get(key) for key in EVENT_CSV_FIELDS[:-1]},
            "payload": json.dumps(event.get("payload", {}), ensure_ascii=False),
        }
        for event in events
    ]
    with _target(path).open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(EVENT_CSV_FIELDS))
        writer.writeheader()
        writer.writerows(rows)

"""I/O exports."""

from .artifacts import (
    ArtifactError,
    read_mapping,
    resolve_path,
    write_events_csv,
    write_json,
    write_jsonl,
    write_mapping,
    write_rows_csv,
)
from .experiment_runner import BatchPlan, BatchRunSummary, ExperimentRunner, parse_scheduler_label, set_by_path
from .loader import ConfigError, ConfigLoader, ValidationIssue
from .schema import CONFIG_SCHEMA

__all__ = [
    "ArtifactError",
    "BatchPlan",
    "BatchRunSummary",
    "CONFIG_SCHEMA",
    "ConfigError",
    "ConfigLoader",
    "ExperimentRunner",
    "ValidationIssue",
    "parse_scheduler_label",
    "read_mapping",
    "resolve_path",
    "set_by_path",
    "write_events_csv",
    "write_json",
    "write_jsonl",
    "write_mapping",
    "write_rows_csv",
]

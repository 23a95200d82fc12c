"""Side-by-side diff of two metrics reports."""

from __future__ import annotations

import math
from typing import Any, Mapping


DEFAULT_SCALAR_KEYS: tuple[str, ...] = (
    "makespan",
    "average_waiting_time",
    "average_turnaround_time",
    "throughput",
    "utilization",
    "jobs_total",
    "jobs_completed",
    "dispatch_count",
    "preempt_count",
    "constrained_jobs",
    "event_count",
)

HIGHER_IS_BETTER = frozenset({"throughput", "utilization", "jobs_completed"})
LOWER_IS_BETTER = frozenset({"makespan", "average_waiting_time", "average_turnaround_time", "preempt_count"})


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _delta(left: Any, right: Any) -> dict[str, float]:
    lhs, rhs = _number(left), _number(right)
    change = rhs - lhs
    return {
        "left": lhs,
        "right": rhs,
        "delta": change,
        "delta_ratio_pct": change / lhs * 100.0 if abs(lhs) > 1e-12 else 0.0,
    }


def _better_side(key: str, delta: float) -> str:
    if delta == 0 or key not in HIGHER_IS_BETTER | LOWER_IS_BETTER:
        return "-"
    improved = delta > 0 if key in HIGHER_IS_BETTER else delta < 0
    return "right" if improved else "left"


def _busy_map(metrics: Mapping[str, Any]) -> dict[str, Any]:
    busy = metrics.get("processor_busy_time")
    # JSON round trips turn integer processor ids into strings.
    return {str(pid): value for pid, value in busy.items()} if isinstance(busy, dict) else {}


def build_compare_report(
    left_metrics: Mapping[str, Any],
    right_metrics: Mapping[str, Any],
    *,
    left_label: str = "left",
    right_label: str = "right",
    scalar_keys: tuple[str, ...] = DEFAULT_SCALAR_KEYS,
) -> dict[str, Any]:
    """Diff ``right`` against ``left``; missing or non-numeric values count as 0.

    Scalar rows carry ``better`` (``left``, ``right`` or ``-``) for metrics
    with a known direction. Processor rows are ordered numerically by id.
    """
    scalars = []
    for key in scalar_keys:
        row = {"metric": key, **_delta(left_metrics.get(key), right_metrics.get(key))}
        row["better"] = _better_side(key, row["delta"])
        scalars.append(row)

    left_busy, right_busy = _busy_map(left_metrics), _busy_map(right_metrics)
    processor_ids = sorted(left_busy.keys() | right_busy.keys(), key=lambda pid: (len(pid), pid))
    return {
        "left_label": left_label,
        "right_label": right_label,
        "scalar_metrics": scalars,
        "processor_busy_time": [
            {"processor_id": pid, **_delta(left_busy.get(pid), right_busy.get(pid))}
            for pid in processor_ids
        ],
    }


def compare_report_to_rows(report: Mapping[str, Any]) -> list[dict[str, Any]]:
    """One CSV row per scalar metric and per processor."""
    rows = [{"category": "scalar", **item} for item in report.get("scalar_metrics", [])]
    rows.extend(
        {"category": "processor_busy_time", "metric": item["processor_id"], **item}
        for item in report.get("processor_busy_time", [])
    )
    return rows

"""Batch experiment runner: parameter matrices and scheduler benchmarks."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from itertools import product
import logging
from pathlib import Path
from typing import Any, Callable

from jobsched_sim.core import SimEngine
from jobsched_sim.model import JobGraph, Processor, ScenarioSpec, SchedulerMode, SchedulerSpec
from jobsched_sim.pipeline import build_scheduler
from jobsched_sim.predictor import create_predictor, load_history
from jobsched_sim.workload import build_workload

from .artifacts import resolve_path, write_json, write_jsonl, write_rows_csv
from .loader import ConfigError, ConfigLoader


logger = logging.getLogger(__name__)

BENCHMARK_ALGORITHMS: tuple[str, ...] = (
    "fcfs",
    "priority",
    "sjf",
    "min_min",
    "max_min",
    "round_robin",
    "hybrid",
)

SUMMARY_KEYS: tuple[str, ...] = (
    "makespan",
    "average_waiting_time",
    "average_turnaround_time",
    "throughput",
    "utilization",
    "jobs_total",
    "jobs_completed",
    "completed",
    "dispatch_count",
    "preempt_count",
    "constrained_jobs",
)

WILDCARDS = frozenset({"*", "[*]"})


@dataclass(slots=True)
class BatchRunSummary:
    summary_csv: Path
    summary_json: Path
    total_runs: int
    succeeded_runs: int
    failed_runs: int


@dataclass(slots=True)
class BatchPlan:
    """A parsed batch file: one base scenario plus a factor matrix."""

    base_path: Path
    base_payload: dict[str, Any]
    factors: dict[str, list[Any]]
    output_dir: Path
    until: int | None = None
    header: dict[str, Any] = field(default_factory=dict)

    def combinations(self) -> list[dict[str, Any]]:
        """Cartesian product of factor values, factor paths in sorted order."""
        paths = sorted(self.factors)
        return [dict(zip(paths, combo)) for combo in product(*(self.factors[p] for p in paths))]


def parse_scheduler_label(label: str) -> SchedulerSpec:
    """``name`` or ``name:mode``, e.g. ``min_min:dependency``."""
    name, _, mode = label.partition(":")
    if not name:
        raise ConfigError(f"invalid scheduler label '{label}'")
    try:
        return SchedulerSpec(name=name, mode=SchedulerMode(mode or "base"))
    except ValueError as exc:
        raise ConfigError(f"invalid scheduler label '{label}': {exc}") from exc


def set_by_path(payload: dict[str, Any], path: str, value: Any) -> None:
    """Assign ``value`` at a dotted path, creating objects on the way.

    A ``*`` segment fans out over every item of a list, so
    ``processors.*.speed_factor`` touches all processors.
    """
    parts = path.split(".")
    if parts[-1] in WILDCARDS:
        raise ConfigError("wildcard cannot be terminal in factor path")
    nodes: list[Any] = [payload]
    for part in parts[:-1]:
        if part in WILDCARDS:
            if not all(isinstance(node, list) for node in nodes):
                raise ConfigError(f"factor path '{path}': wildcard expects a list")
            nodes = [item for node in nodes for item in node]
            continue
        if not all(isinstance(node, dict) for node in nodes):
            raise ConfigError(f"factor path '{path}': '{part}' must address an object")
        nodes = [node.setdefault(part, {}) for node in nodes]
    for node in nodes:
        if not isinstance(node, dict):
            raise ConfigError(f"factor path '{path}' cannot set a key on {type(node).__name__}")
        node[parts[-1]] = value


class ExperimentRunner:
    """Expand matrix factors or scheduler lists, run simulations and persist summaries.

    A failing run never aborts the batch: it is logged and summarized with
    ``status=error``.
    """

    SUPPORTED_VERSION = "0.1"

    def __init__(self, loader: ConfigLoader | None = None) -> None:
        self._loader = loader or ConfigLoader()

    def plan_batch(self, batch_config_path: str, *, output_dir: str | None = None) -> BatchPlan:
        batch_path = Path(batch_config_path)
        raw = self._loader.read(batch_path)
        version = str(raw.get("version", self.SUPPORTED_VERSION))
        if version != self.SUPPORTED_VERSION:
            raise ConfigError(f"unsupported batch version '{version}'")

        base_config = raw.get("base_config")
        if not isinstance(base_config, str) or not base_config:
            raise ConfigError("batch config requires non-empty 'base_config'")
        base_path = resolve_path(batch_path.parent, base_config)

        factors = raw.get("factors")
        if not isinstance(factors, dict) or not factors:
            raise ConfigError("batch config requires non-empty 'factors' object")
        for path, values in factors.items():
            if not isinstance(path, str) or not path:
                raise ConfigError("factor path must be non-empty string")
            if not isinstance(values, list) or not values:
                raise ConfigError(f"factor '{path}' must provide non-empty list")

        until = raw.get("until")
        if until is not None and (isinstance(until, bool) or not isinstance(until, int)):
            raise ConfigError("batch 'until' must be integer when provided")

        out = output_dir or raw.get("output_dir")
        run_dir = (
            resolve_path(batch_path.parent, out)
            if isinstance(out, str) and out
            else (batch_path.parent / "artifacts" / "batch").resolve()
        )
        return BatchPlan(
            base_path=base_path,
            base_payload=self._loader.read(base_path),
            factors={path: list(values) for path, values in factors.items()},
            output_dir=run_dir,
            until=until,
            header={"version": version, "base_config": str(base_path)},
        )

    def run_batch(
        self,
        batch_config_path: str,
        *,
        output_dir: str | None = None,
        summary_csv: str | None = None,
        summary_json: str | None = None,
    ) -> BatchRunSummary:
        plan = self.plan_batch(batch_config_path, output_dir=output_dir)
        plan.output_dir.mkdir(parents=True, exist_ok=True)

        def run_one(combo: dict[str, Any]) -> SimEngine:
            payload = copy.deepcopy(plan.base_payload)
            for path, value in combo.items():
                set_by_path(payload, path, value)
            spec = self._loader.load_data(payload, base_dir=plan.base_path.parent)
            engine = SimEngine()
            engine.build(spec)
            engine.run(until=plan.until)
            return engine

        rows = [
            self._execute(f"run_{idx:03d}", dict(combo), plan.output_dir, lambda c=combo: run_one(c))
            for idx, combo in enumerate(plan.combinations())
        ]
        base_dir = Path(batch_config_path).parent
        return self._write_summaries(
            rows,
            plan.output_dir,
            header={**plan.header, "factors": plan.factors},
            summary_csv=resolve_path(base_dir, summary_csv) if summary_csv else None,
            summary_json=resolve_path(base_dir, summary_json) if summary_json else None,
        )

    def run_benchmark(
        self,
        spec: ScenarioSpec,
        scheduler_specs: list[SchedulerSpec] | None = None,
        *,
        output_dir: str | Path,
    ) -> BatchRunSummary:
        """Run each scheduler over an independent deep copy of one workload."""
        graph, processors = build_workload(spec)
        if scheduler_specs is None:
            scheduler_specs = [
                SchedulerSpec(name=name, mode=spec.scheduler.mode, params=dict(spec.scheduler.params))
                for name in BENCHMARK_ALGORITHMS
            ]
        run_dir = Path(output_dir)
        run_dir.mkdir(parents=True, exist_ok=True)

        def run_one(scheduler_spec: SchedulerSpec) -> SimEngine:
            engine = self._benchmark_engine(spec, scheduler_spec, graph, processors)
            engine.run()
            return engine

        rows = [
            self._execute(
                f"run_{idx:03d}",
                {"scheduler": scheduler_spec.name, "mode": scheduler_spec.mode.value},
                run_dir,
                lambda s=scheduler_spec: run_one(s),
            )
            for idx, scheduler_spec in enumerate(scheduler_specs)
        ]
        return self._write_summaries(
            rows,
            run_dir,
            header={"version": self.SUPPORTED_VERSION, "jobs": len(graph), "processors": len(processors)},
        )

    @staticmethod
    def _benchmark_engine(
        spec: ScenarioSpec,
        scheduler_spec: SchedulerSpec,
        graph: JobGraph,
        processors: list[Processor],
    ) -> SimEngine:
        predictor = None
        if scheduler_spec.mode == SchedulerMode.INTEGRATED:
            predictor = create_predictor(spec.predictor.name, spec.predictor.params)
            if spec.predictor.history_path:
                predictor.add_history(load_history(spec.predictor.history_path).records)
        run_processors = copy.deepcopy(processors)
        for processor in run_processors:
            processor.reset()
        engine = SimEngine()
        engine.load(
            graph.copy(),
            run_processors,
            build_scheduler(scheduler_spec, predictor),
            max_ticks=spec.sim.max_ticks,
        )
        return engine

    @staticmethod
    def _execute(
        run_id: str,
        row: dict[str, Any],
        output_dir: Path,
        simulate: Callable[[], SimEngine],
    ) -> dict[str, Any]:
        row = {"run_id": run_id, **row}
        try:
            engine = simulate()
        except Exception as exc:  # noqa: BLE001 - keep going, the summary records the failure
            logger.warning("%s failed: %s", run_id, exc)
            return {**row, "status": "error", "error": str(exc)}

        metrics = engine.metric_report()
        events_path = output_dir / run_id / "events.jsonl"
        metrics_path = output_dir / run_id / "metrics.json"
        write_jsonl(events_path, (event.model_dump(mode="json") for event in engine.events))
        write_json(metrics_path, metrics)
        logger.info("%s finished, makespan=%s", run_id, metrics.get("makespan"))
        return {
            **row,
            "status": "ok",
            "scheduler_name": metrics.get("scheduler", ""),
            "events_path": str(events_path),
            "metrics_path": str(metrics_path),
            **{key: metrics.get(key) for key in SUMMARY_KEYS},
        }

    @staticmethod
    def _write_summaries(
        rows: list[dict[str, Any]],
        output_dir: Path,
        *,
        header: dict[str, Any],
        summary_csv: Path | None = None,
        summary_json: Path | None = None,
    ) -> BatchRunSummary:
        succeeded = sum(1 for row in rows if row.get("status") == "ok")
        summary = BatchRunSummary(
            summary_csv=summary_csv or output_dir / "summary.csv",
            summary_json=summary_json or output_dir / "summary.json",
            total_runs=len(rows),
            succeeded_runs=succeeded,
            failed_runs=len(rows) - succeeded,
        )
        write_rows_csv(summary.summary_csv, rows)
        write_json(
            summary.summary_json,
            {
                **header,
                "total_runs": summary.total_runs,
                "succeeded_runs": summary.succeeded_runs,
                "failed_runs": summary.failed_runs,
                "runs": rows,
            },
        )
        return summary

"""Command-line front end: validate, run, batch-run, benchmark, compare, gen-history.

Every command prints a one-line ``[OK]`` or ``[ERROR]`` status and returns
0 on success, 1 on bad input and 2 when the run finished but a strict check
(audit, failed batch runs) did not pass.
"""

from __future__ import annotations

import argparse
import logging
from random import Random

from jobsched_sim.analysis import build_audit_report, build_compare_report, compare_report_to_rows
from jobsched_sim.core import SimEngine
from jobsched_sim.io import (
    ArtifactError,
    BatchRunSummary,
    ConfigError,
    ConfigLoader,
    ExperimentRunner,
    parse_scheduler_label,
    read_mapping,
    write_events_csv,
    write_json,
    write_jsonl,
    write_rows_csv,
)
from jobsched_sim.model import DependencyType, JobGraph, ScenarioSpec
from jobsched_sim.predictor import HistoryError, write_history
from jobsched_sim.workload import synthetic_history


logger = logging.getLogger(__name__)

DEFAULT_EVENTS_OUT = "artifacts/events.jsonl"
DEFAULT_METRICS_OUT = "artifacts/metrics.json"


class CommandError(Exception):
    """Input problem reported as ``[ERROR]`` with exit code 1."""


def _load_spec(path: str) -> ScenarioSpec:
    try:
        return ConfigLoader().load(path)
    except ConfigError as exc:
        raise CommandError(f"{path}: {exc}") from exc


def _build_engine(spec: ScenarioSpec) -> SimEngine:
    # Scheduler names and history files are only resolved here.
    engine = SimEngine()
    try:
        engine.build(spec)
    except (ValueError, HistoryError) as exc:
        raise CommandError(str(exc)) from exc
    return engine


def _requires_map(graph: JobGraph) -> dict[int, list[int]]:
    return {
        job.id: [dep.id for dep in graph.dependencies(job.id, DependencyType.REQUIRES)]
        for job in graph
    }


def _report_summary(label: str, summary: BatchRunSummary, strict: bool) -> int:
    print(
        f"[OK] {label} completed, runs={summary.total_runs}, ok={summary.succeeded_runs}, "
        f"failed={summary.failed_runs}, csv={summary.summary_csv}, json={summary.summary_json}"
    )
    if strict and summary.failed_runs:
        print(f"[ERROR] {label}: {summary.failed_runs} run(s) failed and --strict-fail-on-error is set")
        return 2
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    _build_engine(_load_spec(args.config))
    print(f"[OK] {args.config} is a valid scenario")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    if args.until is not None and args.until < 0:
        raise CommandError("--until must be >= 0")
    spec = _load_spec(args.config)
    engine = _build_engine(spec)

    if args.step:
        stop_at = spec.sim.max_ticks if args.until is None else args.until
        while not engine.finished and engine.now < stop_at:
            engine.step()
    engine.run(until=args.until)

    trace = [event.model_dump(mode="json") for event in engine.events]
    report = engine.metric_report()
    write_jsonl(args.events_out, trace)
    write_json(args.metrics_out, report)
    if args.events_csv_out:
        write_events_csv(args.events_csv_out, trace)

    status = 0
    if args.audit_out:
        assert engine.graph is not None
        audit = build_audit_report(trace, requires=_requires_map(engine.graph))
        write_json(args.audit_out, audit)
        if audit["status"] != "pass":
            print(f"[ERROR] trace audit failed, see {args.audit_out}")
            status = 2

    if status == 0:
        print(
            f"[OK] {report.get('scheduler')}: events={len(trace)} now={engine.now} "
            f"makespan={report.get('makespan')} completed={report.get('completed')} "
            f"metrics={args.metrics_out}"
        )
    return status


def cmd_batch_run(args: argparse.Namespace) -> int:
    try:
        summary = ExperimentRunner().run_batch(
            args.batch_config,
            output_dir=args.output_dir,
            summary_csv=args.summary_csv,
            summary_json=args.summary_json,
        )
    except ConfigError as exc:
        raise CommandError(str(exc)) from exc
    return _report_summary("batch", summary, args.strict_fail_on_error)


def cmd_benchmark(args: argparse.Namespace) -> int:
    spec = _load_spec(args.config)
    try:
        labels = [parse_scheduler_label(label) for label in args.scheduler]
    except ConfigError as exc:
        raise CommandError(str(exc)) from exc
    summary = ExperimentRunner().run_benchmark(spec, labels or None, output_dir=args.output_dir)
    return _report_summary("benchmark", summary, args.strict_fail_on_error)


def cmd_compare(args: argparse.Namespace) -> int:
    try:
        left, right = read_mapping(args.left_metrics), read_mapping(args.right_metrics)
    except ArtifactError as exc:
        raise CommandError(str(exc)) from exc

    report = build_compare_report(left, right, left_label=args.left_label, right_label=args.right_label)
    if args.out_json:
        write_json(args.out_json, report)
    if args.out_csv:
        write_rows_csv(args.out_csv, compare_report_to_rows(report))
    print(
        f"[OK] compared {args.left_label}={args.left_metrics} with {args.right_label}={args.right_metrics}, "
        f"json={args.out_json or '-'} csv={args.out_csv or '-'}"
    )
    return 0


def cmd_gen_history(args: argparse.Namespace) -> int:
    if args.count < 1:
        raise CommandError("--count must be >= 1")
    written = write_history(args.out, synthetic_history(Random(args.seed), args.count))
    print(f"[OK] wrote {written} history records to {args.out}")
    return 0


def _strict_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--strict-fail-on-error",
        action="store_true",
        help="exit with 2 if any individual run raised",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobsched-sim", description="Discrete-time job scheduling simulator")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    validate = commands.add_parser("validate", help="check a scenario file and resolve its scheduler")
    validate.add_argument("-c", "--config", required=True, help="scenario YAML/JSON")
    validate.set_defaults(func=cmd_validate)

    run = commands.add_parser("run", help="simulate one scenario")
    run.add_argument("-c", "--config", required=True, help="scenario YAML/JSON")
    run.add_argument("--until", type=int, default=None, help="stop at this tick (capped by sim.max_ticks)")
    run.add_argument("--step", action="store_true", help="advance tick by tick instead of a single run call")
    run.add_argument("--events-out", default=DEFAULT_EVENTS_OUT, help="event trace (JSONL)")
    run.add_argument("--events-csv-out", default=None, help="event trace (CSV)")
    run.add_argument("--metrics-out", default=DEFAULT_METRICS_OUT, help="metrics report (JSON)")
    run.add_argument("--audit-out", default=None, help="trace audit report (JSON); failed audit exits 2")
    run.set_defaults(func=cmd_run)

    batch = commands.add_parser("batch-run", help="run a factor matrix over a base scenario")
    batch.add_argument("-b", "--batch-config", required=True, help="batch YAML/JSON")
    batch.add_argument("--output-dir", default=None, help="per-run artifact root")
    batch.add_argument("--summary-csv", default=None, help="override summary CSV location")
    batch.add_argument("--summary-json", default=None, help="override summary JSON location")
    _strict_flag(batch)
    batch.set_defaults(func=cmd_batch_run)

    bench = commands.add_parser("benchmark", help="run several schedulers over one workload")
    bench.add_argument("-c", "--config", required=True, help="scenario YAML/JSON")
    bench.add_argument(
        "-s",
        "--scheduler",
        action="append",
        default=[],
        help="scheduler label name[:mode]; repeatable, defaults to every base algorithm",
    )
    bench.add_argument("--output-dir", default="artifacts/benchmark", help="per-run artifact root")
    _strict_flag(bench)
    bench.set_defaults(func=cmd_benchmark)

    compare = commands.add_parser("compare", help="diff two metrics reports")
    compare.add_argument("--left-metrics", required=True, help="baseline metrics JSON")
    compare.add_argument("--right-metrics", required=True, help="candidate metrics JSON")
    compare.add_argument("--left-label", default="left")
    compare.add_argument("--right-label", default="right")
    compare.add_argument("--out-json", default=None, help="write the compare report here")
    compare.add_argument("--out-csv", default=None, help="write flattened compare rows here")
    compare.set_defaults(func=cmd_compare)

    history = commands.add_parser("gen-history", help="write a synthetic job history CSV")
    history.add_argument("--out", required=True, help="history CSV path")
    history.add_argument("--count", type=int, default=1000, help="number of records")
    history.add_argument("--seed", type=int, default=42)
    history.set_defaults(func=cmd_gen_history)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except CommandError as exc:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"[ERROR] {exc}")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

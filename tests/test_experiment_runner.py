from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from jobsched_sim.io import ConfigError, ConfigLoader, ExperimentRunner, parse_scheduler_label, set_by_path
from jobsched_sim.model import SchedulerMode, SchedulerSpec


EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


def _write_batch(tmp_path: Path, body: dict) -> Path:
    (tmp_path / "base.yaml").write_text((EXAMPLES / "sjf_basic.yaml").read_text(encoding="utf-8"), encoding="utf-8")
    path = tmp_path / "batch.yaml"
    path.write_text(yaml.safe_dump({"version": "0.1", "base_config": "base.yaml", **body}), encoding="utf-8")
    return path


def test_run_batch_expands_factor_matrix(tmp_path: Path) -> None:
    batch = _write_batch(
        tmp_path,
        {
            "output_dir": "out",
            "factors": {"scheduler.name": ["round_robin"], "scheduler.params.quantum": [1, 2, 3]},
        },
    )
    summary = ExperimentRunner().run_batch(str(batch))
    assert summary.total_runs == 3
    assert summary.failed_runs == 0

    payload = json.loads(summary.summary_json.read_text(encoding="utf-8"))
    quanta = [run["scheduler.params.quantum"] for run in payload["runs"]]
    assert quanta == [1, 2, 3]
    preempts = [run["preempt_count"] for run in payload["runs"]]
    assert preempts[0] >= preempts[1] >= preempts[2]
    metrics = json.loads(Path(payload["runs"][0]["metrics_path"]).read_text(encoding="utf-8"))
    assert metrics["scheduler"] == "Round Robin"


def test_run_batch_until_override(tmp_path: Path) -> None:
    batch = _write_batch(tmp_path, {"output_dir": "out", "until": 2, "factors": {"sim.seed": [1]}})
    summary = ExperimentRunner().run_batch(str(batch))
    payload = json.loads(summary.summary_json.read_text(encoding="utf-8"))
    assert payload["runs"][0]["completed"] is False


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({"factors": {}}, "non-empty 'factors'"),
        ({"factors": {"sim.seed": []}}, "non-empty list"),
        ({"factors": {"sim.seed": [1]}, "until": "soon"}, "'until' must be integer"),
        ({"factors": {"sim.seed": [1]}, "version": "2.0"}, "unsupported batch version"),
    ],
)
def test_run_batch_rejects_bad_config(tmp_path: Path, body: dict, message: str) -> None:
    batch = _write_batch(tmp_path, body)
    with pytest.raises(ConfigError, match=message):
        ExperimentRunner().run_batch(str(batch))


def test_run_benchmark_uses_independent_workload_copies(tmp_path: Path) -> None:
    spec = ConfigLoader().load(str(EXAMPLES / "sjf_basic.yaml"))
    summary = ExperimentRunner().run_benchmark(spec, output_dir=tmp_path / "bench")

    assert summary.total_runs == 7
    assert summary.failed_runs == 0
    payload = json.loads(summary.summary_json.read_text(encoding="utf-8"))
    runs = {run["scheduler"]: run for run in payload["runs"]}
    assert set(runs) == {"fcfs", "priority", "sjf", "min_min", "max_min", "round_robin", "hybrid"}
    assert all(run["jobs_completed"] == 4 for run in payload["runs"])
    assert runs["sjf"]["makespan"] == 7


def test_run_benchmark_integrated_gets_fresh_predictor(tmp_path: Path) -> None:
    spec = ConfigLoader().load(str(EXAMPLES / "sjf_basic.yaml"))
    specs = [
        SchedulerSpec(name="sjf", mode=SchedulerMode.INTEGRATED),
        SchedulerSpec(name="fcfs", mode=SchedulerMode.INTEGRATED),
    ]
    summary = ExperimentRunner().run_benchmark(spec, specs, output_dir=tmp_path)
    payload = json.loads(summary.summary_json.read_text(encoding="utf-8"))
    for run in payload["runs"]:
        metrics = json.loads(Path(run["metrics_path"]).read_text(encoding="utf-8"))
        assert metrics["predictor"]["records"] == 4


def test_parse_scheduler_label() -> None:
    assert parse_scheduler_label("min_min:dependency") == SchedulerSpec(name="min_min", mode=SchedulerMode.DEPENDENCY)
    assert parse_scheduler_label("sjf").mode == SchedulerMode.BASE
    with pytest.raises(ConfigError):
        parse_scheduler_label(":resource")


def test_set_by_path_creates_objects_and_fans_out_over_lists() -> None:
    payload = {"processors": [{"id": 0}, {"id": 1}], "scheduler": {"name": "sjf"}}
    set_by_path(payload, "processors.*.speed_factor", 2.0)
    set_by_path(payload, "scheduler.params.quantum", 3)
    assert [p["speed_factor"] for p in payload["processors"]] == [2.0, 2.0]
    assert payload["scheduler"]["params"] == {"quantum": 3}


@pytest.mark.parametrize(
    ("path", "message"),
    [
        ("processors.*", "terminal"),
        ("processors.0.speed_factor", "must address an object"),
        ("scheduler.*.name", "expects a list"),
        ("scheduler.name.x", "cannot set a key"),
    ],
)
def test_set_by_path_rejects_bad_paths(path: str, message: str) -> None:
    payload = {"processors": [{"id": 0}], "scheduler": {"name": "sjf"}}
    with pytest.raises(ConfigError, match=message):
        set_by_path(payload, path, 1)


def test_run_batch_wildcard_factor(tmp_path: Path) -> None:
    batch = _write_batch(tmp_path, {"output_dir": "out", "factors": {"processors.*.speed_factor": [1.0, 2.0]}})
    summary = ExperimentRunner().run_batch(str(batch))
    payload = json.loads(summary.summary_json.read_text(encoding="utf-8"))
    spans = [run["makespan"] for run in payload["runs"]]
    assert spans[0] > spans[1]

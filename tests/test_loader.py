from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from jobsched_sim.io import ConfigError, ConfigLoader
from jobsched_sim.model import DependencyType, ScenarioSpec, SchedulerMode


def _base_payload() -> dict[str, Any]:
    return {
        "version": "0.1",
        "processors": [{"id": 0, "speed_factor": 1.5}],
        "jobs": [
            {"id": 0, "execution_time": 3, "priority": 7},
            {
                "id": 1,
                "arrival": 2,
                "execution_time": 4,
                "io_bound": True,
                "resources": {"memory": 2048},
                "dependencies": [{"job": 0}, {"job": 2, "type": "prefers"}],
            },
            {"id": 2, "execution_time": 1},
        ],
        "scheduler": {"name": "min_min", "mode": "dependency"},
    }


def test_load_data_builds_scenario_spec() -> None:
    spec = ConfigLoader().load_data(_base_payload())
    assert isinstance(spec, ScenarioSpec)
    assert spec.scheduler.mode == SchedulerMode.DEPENDENCY
    assert spec.jobs[1].dependencies[0].type == DependencyType.REQUIRES
    assert spec.jobs[1].dependencies[1].type == DependencyType.PREFERS
    assert spec.jobs[1].resources is not None
    assert spec.jobs[1].resources.network == 100
    assert spec.jobs[0].priority == 7
    assert spec.sim.max_ticks == 1000
    assert spec.predictor.name == "neural"


def test_missing_version_defaults_to_supported() -> None:
    payload = _base_payload()
    payload.pop("version")
    assert ConfigLoader().load_data(payload).version == "0.1"


def test_unsupported_version_rejected() -> None:
    payload = _base_payload()
    payload["version"] = "9.9"
    with pytest.raises(ConfigError, match="unsupported config version"):
        ConfigLoader().load_data(payload)


@pytest.mark.parametrize(
    ("mutate", "message"),
    [
        (lambda p: p["jobs"][0].update(priority=11), "schema validation failed"),
        (lambda p: p["jobs"][0].update(execution_time=0), "schema validation failed"),
        (lambda p: p.update(extra_key=True), "schema validation failed"),
        (lambda p: p["scheduler"].update(mode="turbo"), "schema validation failed"),
        (lambda p: p["scheduler"].update(params={"quantum": 0}), "schema validation failed"),
        (lambda p: p["jobs"][2].update(id=0), "duplicate jobs.id"),
        (lambda p: p["jobs"][0].update(dependencies=[{"job": 42}]), "unknown dependency"),
        (lambda p: p["jobs"][0].update(dependencies=[{"job": 0}]), "cannot depend on itself"),
        (lambda p: p.update(jobs=[]), "jobs or a generator"),
        (lambda p: p.update(generator={"pattern": "linear"}), "both jobs and a generator"),
        (lambda p: p.update(processors=[{"id": 0}, {"id": 0}]), "duplicate processors.id"),
    ],
)
def test_invalid_payloads(mutate, message: str) -> None:
    payload = _base_payload()
    mutate(payload)
    with pytest.raises(ConfigError, match=message):
        ConfigLoader().load_data(payload)


def test_generator_payload() -> None:
    payload = _base_payload()
    payload.pop("jobs")
    payload["generator"] = {"pattern": "diamond", "count": 6, "seed": 3}
    spec = ConfigLoader().load_data(payload)
    assert spec.generator is not None
    assert spec.generator.pattern == "diamond"
    assert spec.jobs == []


def test_generator_range_checked() -> None:
    payload = _base_payload()
    payload.pop("jobs")
    payload["generator"] = {"min_execution_time": 9, "max_execution_time": 2}
    with pytest.raises(ConfigError, match="max_execution_time"):
        ConfigLoader().load_data(payload)


def test_load_yaml_and_json_files(tmp_path: Path) -> None:
    yaml_path = tmp_path / "scenario.yaml"
    yaml_path.write_text(yaml.safe_dump(_base_payload()), encoding="utf-8")
    json_path = tmp_path / "scenario.json"
    json_path.write_text(json.dumps(_base_payload()), encoding="utf-8")

    loader = ConfigLoader()
    assert loader.load(str(yaml_path)) == loader.load(str(json_path))
    assert loader.validate(str(yaml_path)) == []


def test_relative_history_path_resolves_against_config(tmp_path: Path) -> None:
    payload = _base_payload()
    payload["predictor"] = {"history_path": "data/history.csv"}
    path = tmp_path / "scenario.yaml"
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    spec = ConfigLoader().load(str(path))
    assert spec.predictor.history_path == str((tmp_path / "data" / "history.csv").resolve())


def test_syntax_and_missing_file_errors(tmp_path: Path) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("processors: [", encoding="utf-8")
    loader = ConfigLoader()
    with pytest.raises(ConfigError, match="invalid config syntax"):
        loader.load(str(bad))
    with pytest.raises(ConfigError, match="not found"):
        loader.load(str(tmp_path / "absent.yaml"))

    issues = loader.validate(str(bad))
    assert len(issues) == 1
    assert issues[0].path == str(bad)


def test_save_round_trips(tmp_path: Path) -> None:
    loader = ConfigLoader()
    spec = loader.load_data(_base_payload())
    out = tmp_path / "saved.yaml"
    loader.save(spec, str(out))
    assert loader.load(str(out)) == spec

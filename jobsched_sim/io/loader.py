"""Scenario loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
from pydantic import ValidationError

from jobsched_sim.model import ScenarioSpec

from .artifacts import ArtifactError, read_mapping, resolve_path, write_mapping
from .schema import CONFIG_SCHEMA


MAX_REPORTED_SCHEMA_ERRORS = 8


@dataclass(slots=True)
class ValidationIssue:
    path: str
    message: str


class ConfigError(Exception):
    """Scenario or batch configuration cannot be read or is invalid."""


class ConfigLoader:
    """Turn YAML/JSON scenario files into validated ``ScenarioSpec`` objects.

    Validation runs in two passes: the JSON schema catches structural errors
    with readable paths, then the pydantic model enforces cross-field rules
    (id uniqueness, workload source, execution-time bounds).
    """

    SUPPORTED_VERSION = "0.1"

    def __init__(self) -> None:
        self._validator = jsonschema.Draft202012Validator(CONFIG_SCHEMA)

    def load(self, path: str) -> ScenarioSpec:
        return self.load_data(self.read(path), base_dir=Path(path).parent)

    def load_data(self, payload: dict[str, Any], *, base_dir: Path | None = None) -> ScenarioSpec:
        """Validate a raw payload; relative history paths resolve against ``base_dir``."""
        payload = {**payload, "version": self._check_version(payload)}
        self._check_schema(payload)
        try:
            spec = ScenarioSpec.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc
        if base_dir is not None and spec.predictor.history_path:
            spec.predictor.history_path = str(resolve_path(base_dir, spec.predictor.history_path))
        return spec

    def save(self, spec: ScenarioSpec, path: str) -> None:
        write_mapping(path, spec.model_dump(mode="json", exclude_none=True))

    def validate(self, spec_or_path: ScenarioSpec | str) -> list[ValidationIssue]:
        if isinstance(spec_or_path, ScenarioSpec):
            return []
        try:
            self.load(spec_or_path)
        except ConfigError as exc:
            return [ValidationIssue(path=spec_or_path, message=str(exc))]
        return []

    @staticmethod
    def read(path: str | Path) -> dict[str, Any]:
        try:
            return read_mapping(path)
        except ArtifactError as exc:
            raise ConfigError(str(exc)) from exc

    def _check_version(self, payload: dict[str, Any]) -> str:
        version = str(payload.get("version", self.SUPPORTED_VERSION))
        if version != self.SUPPORTED_VERSION:
            raise ConfigError(f"unsupported config version '{version}'")
        return version

    def _check_schema(self, payload: dict[str, Any]) -> None:
        errors = sorted(
            self._validator.iter_errors(payload),
            key=lambda err: [str(part) for part in err.path],
        )
        if errors:
            details = " | ".join(
                f"{'.'.join(str(part) for part in err.path) or '<root>'}: {err.message}"
                for err in errors[:MAX_REPORTED_SCHEMA_ERRORS]
            )
            raise ConfigError("schema validation failed: " + details)

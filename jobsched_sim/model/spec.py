"""Scenario configuration models and semantic validation."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .job import DependencyType


class SchedulerMode(str, Enum):
    """How the base algorithm is wrapped."""

    BASE = "base"
    DEPENDENCY = "dependency"
    RESOURCE = "resource"
    INTEGRATED = "integrated"


class ResourceDemandSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    memory: int = Field(default=1024, ge=0)
    network: int = Field(default=100, ge=0)
    cpu: int = Field(default=100, ge=0)


class CapacitySpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    memory: int = Field(gt=0)
    network: int = Field(gt=0)
    cpu: int = Field(gt=0)


class DependencySpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    job: int
    type: DependencyType = DependencyType.REQUIRES


class JobSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int = Field(ge=0)
    arrival: int = Field(default=0, ge=0)
    execution_time: int = Field(ge=1)
    estimated_execution_time: Optional[int] = Field(default=None, ge=1)
    priority: int = Field(default=5, ge=1, le=10)
    io_bound: bool = False
    resources: Optional[ResourceDemandSpec] = None
    dependencies: list[DependencySpec] = Field(default_factory=list)


class ProcessorSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int = Field(ge=0)
    speed_factor: float = Field(default=1.0, gt=0)
    capacity: Optional[CapacitySpec] = None


class GeneratorSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pattern: str = "random"
    count: int = Field(default=20, ge=1)
    min_execution_time: int = Field(default=1, ge=1)
    max_execution_time: int = Field(default=20, ge=1)
    max_dependencies: int = Field(default=3, ge=1)
    dag_width: int = Field(default=5, ge=1)
    with_resources: bool = False
    seed: int = 42

    @model_validator(mode="after")
    def validate_range(self) -> "GeneratorSpec":
        if self.max_execution_time < self.min_execution_time:
            raise ValueError("generator.max_execution_time must be >= min_execution_time")
        return self


class SchedulerSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    mode: SchedulerMode = SchedulerMode.BASE
    params: dict = Field(default_factory=dict)


class PredictorSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = "neural"
    history_path: Optional[str] = None
    params: dict = Field(default_factory=dict)


class SimSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_ticks: int = Field(default=1000, ge=1)
    seed: int = 42


class ScenarioSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: str
    processors: list[ProcessorSpec] = Field(min_length=1)
    jobs: list[JobSpec] = Field(default_factory=list)
    generator: Optional[GeneratorSpec] = None
    scheduler: SchedulerSpec
    predictor: PredictorSpec = Field(default_factory=PredictorSpec)
    sim: SimSpec = Field(default_factory=SimSpec)

    @model_validator(mode="after")
    def validate_semantics(self) -> "ScenarioSpec":
        processor_ids = [p.id for p in self.processors]
        if len(processor_ids) != len(set(processor_ids)):
            raise ValueError("duplicate processors.id")

        if not self.jobs and self.generator is None:
            raise ValueError("scenario must define jobs or a generator")
        if self.jobs and self.generator is not None:
            raise ValueError("scenario cannot define both jobs and a generator")

        job_ids = [job.id for job in self.jobs]
        if len(job_ids) != len(set(job_ids)):
            raise ValueError("duplicate jobs.id")
        known = set(job_ids)
        for job in self.jobs:
            for dep in job.dependencies:
                if dep.job not in known:
                    raise ValueError(f"job {job.id} references unknown dependency {dep.job}")
                if dep.job == job.id:
                    raise ValueError(f"job {job.id} cannot depend on itself")
        return self

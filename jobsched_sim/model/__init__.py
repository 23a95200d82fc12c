"""Model package exports."""

from .graph import JobGraph
from .job import (
    Capability,
    DependencyType,
    Job,
    ResourceConstraints,
    ResourceDemand,
)
from .processor import (
    Processor,
    ResourceCapacity,
    ResourceUsageSnapshot,
    ResourceUtilization,
)
from .spec import (
    CapacitySpec,
    DependencySpec,
    GeneratorSpec,
    JobSpec,
    PredictorSpec,
    ProcessorSpec,
    ResourceDemandSpec,
    ScenarioSpec,
    SchedulerMode,
    SchedulerSpec,
    SimSpec,
)

__all__ = [
    "Capability",
    "CapacitySpec",
    "DependencySpec",
    "DependencyType",
    "GeneratorSpec",
    "Job",
    "JobGraph",
    "JobSpec",
    "PredictorSpec",
    "Processor",
    "ProcessorSpec",
    "ResourceCapacity",
    "ResourceConstraints",
    "ResourceDemand",
    "ResourceDemandSpec",
    "ResourceUsageSnapshot",
    "ResourceUtilization",
    "ScenarioSpec",
    "SchedulerMode",
    "SchedulerSpec",
    "SimSpec",
]

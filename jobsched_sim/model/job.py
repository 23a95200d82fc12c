"""Job record, dependency types and resource demand."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag, auto


class DependencyType(str, Enum):
    """Edge type from a dependent job to one of its prerequisites."""

    REQUIRES = "requires"
    PREFERS = "prefers"
    CONFLICTS_WITH = "conflicts_with"


class Capability(Flag):
    """Optional capabilities carried by a job record."""

    NONE = 0
    DEPENDENCIES = auto()
    RESOURCES = auto()


MEMORY_PENALTY = 1.5
NETWORK_PENALTY = 1.3
CPU_PENALTY = 2.0


@dataclass(slots=True)
class ResourceDemand:
    """Memory in MB, network in Mbps, CPU in percent of one core."""

    memory: int = 1024
    network: int = 100
    cpu: int = 100


@dataclass(slots=True)
class ResourceConstraints:
    memory: bool = False
    network: bool = False
    cpu: bool = False

    @property
    def any(self) -> bool:
        return self.memory or self.network or self.cpu

    @property
    def factor(self) -> float:
        """Multiplicative execution-time inflation for the flagged resources."""
        factor = 1.0
        if self.memory:
            factor *= MEMORY_PENALTY
        if self.network:
            factor *= NETWORK_PENALTY
        if self.cpu:
            factor *= CPU_PENALTY
        return factor


@dataclass(slots=True)
class Job:
    """One schedulable job with its mutable simulation state."""

    id: int
    arrival_time: int
    execution_time: int
    priority: int
    io_bound: bool = False
    estimated_execution_time: int = -1
    capabilities: Capability = Capability.NONE
    resources: ResourceDemand | None = None
    constraints: ResourceConstraints = field(default_factory=ResourceConstraints)

    remaining_time: int = -1
    waiting_time: int = 0
    start_time: int = -1
    completion_time: int = -1

    def __post_init__(self) -> None:
        if self.estimated_execution_time < 0:
            self.estimated_execution_time = self.execution_time
        if self.remaining_time < 0:
            self.remaining_time = self.execution_time
        if self.resources is not None:
            self.capabilities |= Capability.DEPENDENCIES | Capability.RESOURCES

    @property
    def tracks_dependencies(self) -> bool:
        return Capability.DEPENDENCIES in self.capabilities

    @property
    def resource_aware(self) -> bool:
        return Capability.RESOURCES in self.capabilities and self.resources is not None

    @property
    def completed(self) -> bool:
        return self.remaining_time == 0

    @property
    def dispatched(self) -> bool:
        return self.start_time != -1

    @property
    def turnaround_time(self) -> int:
        if self.completion_time == -1:
            return -1
        return self.completion_time - self.arrival_time

    def set_estimate(self, value: int) -> None:
        self.estimated_execution_time = max(1, int(value))

    def set_resource_demand(self, memory: int, network: int, cpu: int) -> None:
        self.resources = ResourceDemand(memory=memory, network=network, cpu=cpu)
        self.capabilities |= Capability.DEPENDENCIES | Capability.RESOURCES

    def reset_state(self) -> None:
        """Return the job to its pre-simulation state."""
        self.remaining_time = self.execution_time
        self.waiting_time = 0
        self.start_time = -1
        self.completion_time = -1
        self.constraints = ResourceConstraints()

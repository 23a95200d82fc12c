"""Processor model and per-processor resource ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Optional

from .job import Job, ResourceConstraints


@dataclass(slots=True)
class ResourceUsageSnapshot:
    time: int
    memory: int
    network: int
    cpu: int


@dataclass(slots=True)
class ResourceUtilization:
    memory: float
    network: float
    cpu: float

    @property
    def overall(self) -> float:
        return (self.memory + self.network + self.cpu) / 3.0


@dataclass(slots=True)
class ResourceCapacity:
    """Running balance of available memory/network/CPU on one processor."""

    total_memory: int
    total_network: int
    total_cpu: int
    available_memory: int = -1
    available_network: int = -1
    available_cpu: int = -1

    def __post_init__(self) -> None:
        if self.available_memory < 0:
            self.available_memory = self.total_memory
        if self.available_network < 0:
            self.available_network = self.total_network
        if self.available_cpu < 0:
            self.available_cpu = self.total_cpu

    def fits(self, job: Job) -> bool:
        demand = job.resources
        if demand is None:
            return True
        return (
            self.available_memory >= demand.memory
            and self.available_network >= demand.network
            and self.available_cpu >= demand.cpu
        )

    def shortfall(self, job: Job) -> ResourceConstraints:
        demand = job.resources
        if demand is None:
            return ResourceConstraints()
        return ResourceConstraints(
            memory=self.available_memory < demand.memory,
            network=self.available_network < demand.network,
            cpu=self.available_cpu < demand.cpu,
        )

    def allocate(self, job: Job) -> None:
        demand = job.resources
        if demand is None:
            return
        self.available_memory -= demand.memory
        self.available_network -= demand.network
        self.available_cpu -= demand.cpu

    def release(self, job: Job) -> None:
        demand = job.resources
        if demand is None:
            return
        self.available_memory = min(self.available_memory + demand.memory, self.total_memory)
        self.available_network = min(self.available_network + demand.network, self.total_network)
        self.available_cpu = min(self.available_cpu + demand.cpu, self.total_cpu)

    def reset(self) -> None:
        self.available_memory = self.total_memory
        self.available_network = self.total_network
        self.available_cpu = self.total_cpu


@dataclass(slots=True)
class Processor:
    """A machine that runs at most one job at a time.

    Processors with a ``capacity`` admit resource-aware jobs through the ledger;
    a job that does not fit still runs, slowed by its constraint factor.
    """

    id: int
    speed_factor: float = 1.0
    capacity: Optional[ResourceCapacity] = None
    current_job: Optional[Job] = None
    busy_until: int = 0
    total_busy_time: int = 0
    dispatched_at: int = -1
    slice_work: int = 0
    history: list[ResourceUsageSnapshot] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.capacity is not None and not self.history:
            self._record_usage(0)

    @property
    def resource_aware(self) -> bool:
        return self.capacity is not None

    def is_busy(self, now: int) -> bool:
        return now < self.busy_until

    def processing_time(self, job: Job) -> int:
        return math.ceil(job.execution_time / self.speed_factor)

    def estimate_processing_time(self, job: Job) -> int:
        return math.ceil(job.estimated_execution_time / self.speed_factor)

    def can_accommodate(self, job: Job) -> bool:
        if self.capacity is None or not job.resource_aware:
            return True
        return self.capacity.fits(job)

    def assign_job(self, job: Job, now: int, *, quantum: int | None = None) -> int:
        """Dispatch ``job`` and return the tick at which this processor frees up.

        With ``quantum`` the job runs for at most that much work and is
        re-queued by its scheduler when unfinished.
        """
        if self.is_busy(now):
            raise RuntimeError(f"processor {self.id} is busy until {self.busy_until}")

        work = job.remaining_time if quantum is None else min(job.remaining_time, quantum)
        effective_work = work
        if self.capacity is not None and job.resource_aware:
            if self.capacity.fits(job):
                job.constraints = ResourceConstraints()
                self.capacity.allocate(job)
            else:
                job.constraints = self.capacity.shortfall(job)
                effective_work = math.ceil(work * job.constraints.factor)

        duration = math.ceil(effective_work / self.speed_factor)
        self.current_job = job
        self.busy_until = now + duration
        self.total_busy_time += duration
        self.dispatched_at = now
        self.slice_work = work
        if job.start_time == -1:
            job.start_time = now
        if self.capacity is not None:
            self._record_usage(now)
        return self.busy_until

    def complete_job(self, now: int) -> Optional[Job]:
        """Release the running job; returns it with its remaining work updated."""
        job = self.current_job
        if job is None:
            return None
        job.remaining_time = max(0, job.remaining_time - self.slice_work)
        if job.remaining_time == 0:
            job.completion_time = now
        if self.capacity is not None and job.resource_aware and not job.constraints.any:
            self.capacity.release(job)
        self.current_job = None
        self.slice_work = 0
        if self.capacity is not None:
            self._record_usage(now)
        return job

    def average_utilization(self) -> ResourceUtilization:
        if self.capacity is None or not self.history:
            return ResourceUtilization(0.0, 0.0, 0.0)
        count = len(self.history)
        cap = self.capacity
        return ResourceUtilization(
            memory=sum(s.memory for s in self.history) / count / cap.total_memory,
            network=sum(s.network for s in self.history) / count / cap.total_network,
            cpu=sum(s.cpu for s in self.history) / count / cap.total_cpu,
        )

    def reset(self) -> None:
        self.current_job = None
        self.busy_until = 0
        self.total_busy_time = 0
        self.dispatched_at = -1
        self.slice_work = 0
        self.history = []
        if self.capacity is not None:
            self.capacity.reset()
            self._record_usage(0)

    def _record_usage(self, now: int) -> None:
        cap = self.capacity
        if cap is None:
            return
        self.history.append(
            ResourceUsageSnapshot(
                time=now,
                memory=cap.total_memory - cap.available_memory,
                network=cap.total_network - cap.available_network,
                cpu=cap.total_cpu - cap.available_cpu,
            )
        )

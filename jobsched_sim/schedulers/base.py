"""Scheduler interfaces and base classes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from jobsched_sim.model import Job, JobGraph, Processor


class Algorithm(str, Enum):
    """Tag naming the base algorithm a strategy value implements."""

    FCFS = "fcfs"
    PRIORITY = "priority"
    SJF = "sjf"
    MIN_MIN = "min_min"
    MAX_MIN = "max_min"
    ROUND_ROBIN = "round_robin"
    HYBRID = "hybrid"


@dataclass(frozen=True, slots=True)
class Dispatch:
    """One job placed on one processor during a scheduling call."""

    job_id: int
    processor_id: int
    time: int
    busy_until: int
    constrained: bool = False


@dataclass(slots=True)
class ScheduleContext:
    """Per-call view of the simulation handed to every stage."""

    graph: JobGraph
    processors: list[Processor]
    now: int
    completed_ids: set[int]
    running_ids: set[int]
    dispatches: list[Dispatch] = field(default_factory=list)

    def dispatch(self, job: Job, processor: Processor, *, quantum: int | None = None) -> int:
        busy_until = processor.assign_job(job, self.now, quantum=quantum)
        self.running_ids.add(job.id)
        self.dispatches.append(
            Dispatch(
                job_id=job.id,
                processor_id=processor.id,
                time=self.now,
                busy_until=busy_until,
                constrained=job.constraints.any,
            )
        )
        return busy_until


def running_job_ids(processors: Iterable[Processor]) -> set[int]:
    return {p.current_job.id for p in processors if p.current_job is not None}


def filter_ready(
    jobs: Iterable[Job],
    graph: JobGraph,
    now: int,
    completed_ids: set[int],
    running_ids: set[int],
) -> list[Job]:
    """Jobs that may be dispatched at ``now``, in input order.

    Ready means arrived, not completed, never dispatched, every REQUIRES
    prerequisite completed and no CONFLICTS_WITH target running.
    """
    return [
        job
        for job in jobs
        if job.arrival_time <= now
        and not job.completed
        and job.start_time == -1
        and graph.requirements_met(job.id, completed_ids)
        and not graph.has_conflicts(job.id, running_ids)
    ]


def idle_processors(processors: Iterable[Processor], now: int) -> list[Processor]:
    return [p for p in processors if not p.is_busy(now) and p.current_job is None]


def build_context(
    graph: JobGraph,
    processors: list[Processor],
    now: int,
    completed_ids: Iterable[int],
) -> ScheduleContext:
    return ScheduleContext(
        graph=graph,
        processors=processors,
        now=now,
        completed_ids=set(completed_ids),
        running_ids=running_job_ids(processors),
    )


class IScheduler(ABC):
    """Scheduling interface used by the simulation engine.

    ``schedule`` is called once per tick. It must never dispatch a job whose
    start time is already set, and it places at most one job on each idle
    processor.
    """

    algorithm: Algorithm
    display_name: str = ""

    def __init__(self, params: dict[str, Any] | None = None) -> None:
        self.params = dict(params or {})
        self.last_dispatches: list[Dispatch] = []

    @property
    def name(self) -> str:
        return self.display_name or self.algorithm.value

    def reset(self) -> None:
        """Drop per-run state before a new simulation."""
        self.last_dispatches = []

    def schedule(
        self,
        graph: JobGraph,
        processors: list[Processor],
        now: int,
        completed_ids: Iterable[int],
    ) -> list[Dispatch]:
        ctx = build_context(graph, processors, now, completed_ids)
        self.prepare(ctx)
        ready = filter_ready(graph, graph, now, ctx.completed_ids, ctx.running_ids)
        idle = idle_processors(processors, now)
        if self.should_assign(ready, idle):
            self.assign(ready, idle, ctx)
        self.last_dispatches = list(ctx.dispatches)
        return self.last_dispatches

    def prepare(self, ctx: ScheduleContext) -> None:
        """Hook called before the readiness filter runs."""

    def should_assign(self, ready: list[Job], idle: list[Processor]) -> bool:
        return bool(ready and idle)

    @abstractmethod
    def assign(self, ready: list[Job], idle: list[Processor], ctx: ScheduleContext) -> None:
        """Place ready jobs on idle processors through ``ctx.dispatch``."""


class OrderedScheduler(IScheduler, ABC):
    """List scheduler: sort the ready jobs, then fill idle processors in order.

    The sort is stable, so jobs with equal keys keep their incoming order.
    """

    @abstractmethod
    def sort_key(self, job: Job, ctx: ScheduleContext) -> Any:
        """Return a sortable key. Lower key = dispatched earlier."""

    def assign(self, ready: list[Job], idle: list[Processor], ctx: ScheduleContext) -> None:
        ordered = sorted(ready, key=lambda job: self.sort_key(job, ctx))
        for processor, job in zip(idle, ordered):
            ctx.dispatch(job, processor)

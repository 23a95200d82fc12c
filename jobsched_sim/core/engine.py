"""SimPy-clocked, tick-stepped simulation engine."""

from __future__ import annotations

import logging
from typing import Callable

import simpy

from jobsched_sim.analysis.report import dependency_summary
from jobsched_sim.events import EventBus, EventType, SimEvent
from jobsched_sim.metrics import (
    DispatchMetrics,
    IMetric,
    SchedulingMetrics,
    compute_metrics,
    resource_utilization_report,
)
from jobsched_sim.model import JobGraph, Processor, ScenarioSpec, SchedulerMode
from jobsched_sim.pipeline import build_scheduler
from jobsched_sim.predictor import IRuntimePredictor, create_predictor
from jobsched_sim.predictor.history import load_history
from jobsched_sim.schedulers import IScheduler
from jobsched_sim.workload import build_workload

from .interfaces import ISimEngine


logger = logging.getLogger(__name__)


class SimEngine(ISimEngine):
    """Discrete-time engine; the SimPy environment advances one tick per step.

    Each tick reaps finished slices, calls the scheduler once, then charges a
    unit of waiting time to every arrived job that has never been dispatched.
    """

    DEFAULT_MAX_TICKS = 1000

    def __init__(
        self,
        scheduler: IScheduler | None = None,
        predictor: IRuntimePredictor | None = None,
        metrics: list[IMetric] | None = None,
        *,
        event_id_mode: str = "deterministic",
    ) -> None:
        self._external_scheduler = scheduler
        self._external_predictor = predictor
        self._metrics = metrics or [DispatchMetrics()]
        self._subscribers: list[Callable[[SimEvent], None]] = []
        self._event_id_mode = event_id_mode
        self._event_id_seed: int | None = None

        self._env = simpy.Environment()
        self._event_bus = self._create_event_bus()
        self._events: list[SimEvent] = []
        self._setup_event_pipeline()

        self._graph: JobGraph | None = None
        self._processors: list[Processor] = []
        self._scheduler: IScheduler | None = None
        self._predictor: IRuntimePredictor | None = None
        self._max_ticks = self.DEFAULT_MAX_TICKS
        self._completed_ids: set[int] = set()
        self._announced: set[int] = set()
        self._budget_reported = False

    def subscribe(self, handler: Callable[[SimEvent], None]) -> None:
        if handler in self._subscribers:
            return
        self._subscribers.append(handler)
        self._event_bus.subscribe(handler)

    def build(self, spec: ScenarioSpec) -> None:
        self._event_id_seed = spec.sim.seed
        graph, processors = build_workload(spec)

        predictor = self._external_predictor
        if predictor is None and spec.scheduler.mode == SchedulerMode.INTEGRATED:
            predictor = create_predictor(spec.predictor.name, spec.predictor.params)
        if predictor is not None and spec.predictor.history_path:
            result = load_history(spec.predictor.history_path)
            predictor.add_history(result.records)

        scheduler = self._external_scheduler or build_scheduler(spec.scheduler, predictor)
        self.load(graph, processors, scheduler, max_ticks=spec.sim.max_ticks)
        if predictor is not None:
            self._predictor = predictor

    def load(
        self,
        graph: JobGraph,
        processors: list[Processor],
        scheduler: IScheduler,
        *,
        max_ticks: int = DEFAULT_MAX_TICKS,
    ) -> None:
        """Install an already-built workload; the engine takes ownership of it."""
        if max_ticks < 1:
            raise ValueError("max_ticks must be >= 1")
        self.reset()
        self._graph = graph
        self._processors = sorted(processors, key=lambda p: p.id)
        self._scheduler = scheduler
        self._scheduler.reset()
        self._predictor = getattr(scheduler, "predictor", None)
        self._max_ticks = max_ticks
        self._completed_ids = {job.id for job in graph if job.completed}
        logger.debug(
            "loaded %d jobs on %d processors with %s",
            len(graph),
            len(self._processors),
            scheduler.name,
        )

    def run(self, until: int | None = None) -> SchedulingMetrics:
        if self._graph is None or self._scheduler is None:
            raise RuntimeError("build() or load() must be called before run()")
        horizon = min(until, self._max_ticks) if until is not None else self._max_ticks

        while self.now < horizon and not self.finished:
            self.step()

        if not self.finished and self.now >= self._max_ticks and not self._budget_reported:
            self._budget_reported = True
            remaining = [job.id for job in self._graph if not job.completed]
            logger.warning(
                "tick budget of %d exhausted with %d jobs unfinished", self._max_ticks, len(remaining)
            )
            self._publish(
                EventType.BUDGET_EXHAUSTED,
                payload={"max_ticks": self._max_ticks, "unfinished": remaining},
            )
        return self.metrics

    def step(self) -> None:
        if self._graph is None or self._scheduler is None:
            raise RuntimeError("build() or load() must be called before step()")
        now = self.now
        graph = self._graph

        for job in graph:
            if job.id not in self._announced and job.arrival_time <= now:
                self._announced.add(job.id)
                self._publish(EventType.JOB_ARRIVED, job_id=job.id)

        self._reap(now)

        for dispatch in self._scheduler.schedule(graph, self._processors, now, self._completed_ids):
            self._publish(
                EventType.JOB_DISPATCHED,
                job_id=dispatch.job_id,
                processor_id=dispatch.processor_id,
                payload={"busy_until": dispatch.busy_until, "constrained": dispatch.constrained},
            )
            if dispatch.constrained:
                flags = graph.job(dispatch.job_id).constraints
                resources = [name for name in ("memory", "network", "cpu") if getattr(flags, name)]
                self._publish(
                    EventType.RESOURCE_CONSTRAINED,
                    job_id=dispatch.job_id,
                    processor_id=dispatch.processor_id,
                    payload={"resources": resources, "factor": flags.factor},
                )

        for job in graph:
            if job.arrival_time <= now and not job.completed and job.start_time == -1:
                job.waiting_time += 1

        tick = self._env.timeout(1)
        self._env.run(until=tick)

    def reset(self) -> None:
        self._env = simpy.Environment()
        for metric in self._metrics:
            metric.reset()
        self._event_bus = self._create_event_bus()
        self._events = []
        self._setup_event_pipeline()
        self._graph = None
        self._processors = []
        self._scheduler = None
        self._predictor = None
        self._completed_ids = set()
        self._announced = set()
        self._budget_reported = False

    def _reap(self, now: int) -> None:
        assert self._graph is not None
        for processor in self._processors:
            if processor.current_job is None or processor.is_busy(now):
                continue
            job = processor.complete_job(now)
            if job is None:
                continue
            if job.completed:
                self._completed_ids.add(job.id)
                if job.tracks_dependencies:
                    self._graph.refresh_dependents(job.id)
                self._publish(
                    EventType.JOB_COMPLETED,
                    job_id=job.id,
                    processor_id=processor.id,
                    payload={"turnaround": job.turnaround_time, "waiting": job.waiting_time},
                )
            else:
                self._publish(
                    EventType.JOB_PREEMPTED,
                    job_id=job.id,
                    processor_id=processor.id,
                    payload={"remaining": job.remaining_time},
                )

    def _publish(
        self,
        event_type: EventType,
        *,
        job_id: int | None = None,
        processor_id: int | None = None,
        payload: dict | None = None,
    ) -> SimEvent:
        return self._event_bus.publish(
            event_type=event_type,
            time=self.now,
            correlation_id=f"job-{job_id}" if job_id is not None else "engine",
            job_id=job_id,
            processor_id=processor_id,
            payload=payload,
        )

    def _setup_event_pipeline(self) -> None:
        self._event_bus.subscribe(self._events.append)
        for metric in self._metrics:
            self._event_bus.subscribe(metric.consume)
        for handler in self._subscribers:
            self._event_bus.subscribe(handler)

    def _create_event_bus(self) -> EventBus:
        return EventBus(
            event_id_mode=self._event_id_mode,
            event_id_seed=self._event_id_seed,
        )

    @property
    def events(self) -> list[SimEvent]:
        return list(self._events)

    @property
    def now(self) -> int:
        return int(self._env.now)

    @property
    def graph(self) -> JobGraph | None:
        return self._graph

    @property
    def processors(self) -> list[Processor]:
        return list(self._processors)

    @property
    def scheduler(self) -> IScheduler | None:
        return self._scheduler

    @property
    def predictor(self) -> IRuntimePredictor | None:
        return self._predictor

    @property
    def completed_ids(self) -> set[int]:
        return set(self._completed_ids)

    @property
    def finished(self) -> bool:
        return self._graph is not None and len(self._completed_ids) == len(self._graph)

    @property
    def metrics(self) -> SchedulingMetrics:
        if self._graph is None:
            raise RuntimeError("no workload loaded")
        return compute_metrics(self._graph, self._processors)

    def metric_report(self) -> dict:
        merged: dict = {}
        if self._scheduler is not None:
            merged["scheduler"] = self._scheduler.name
        if self._graph is not None:
            merged.update(self.metrics.to_dict())
        for metric in self._metrics:
            merged.update(metric.report())
        busy = merged.get("processor_busy_time")
        if isinstance(busy, dict):
            for processor in self._processors:
                busy.setdefault(processor.id, 0)
        resources = resource_utilization_report(self._processors)
        if resources:
            merged["resource_utilization"] = resources
        if self._graph is not None:
            merged["dependencies"] = dependency_summary(self._graph)
        if self._predictor is not None:
            merged["predictor"] = self._predictor.accuracy_report()
        return merged

"""Scheduling metrics: the per-run summary and the event-stream counters."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import asdict, dataclass

from jobsched_sim.events import EventType, SimEvent
from jobsched_sim.model import Job, Processor

from .base import IMetric


@dataclass(frozen=True, slots=True)
class SchedulingMetrics:
    """Read-only summary of one simulation run.

    When the tick budget ran out first, ``completed`` is false and the
    turnaround average includes the -1 sentinel of every unfinished job.
    """

    makespan: int
    average_waiting_time: float
    average_turnaround_time: float
    throughput: float
    utilization: float
    jobs_total: int
    jobs_completed: int
    completed: bool

    @property
    def jobs_incomplete(self) -> int:
        return self.jobs_total - self.jobs_completed

    def to_dict(self) -> dict:
        data = asdict(self)
        data["jobs_incomplete"] = self.jobs_incomplete
        return data


def compute_metrics(jobs: Iterable[Job], processors: Iterable[Processor]) -> SchedulingMetrics:
    jobs = list(jobs)
    processors = list(processors)
    count = len(jobs)
    makespan = max(0, max((job.completion_time for job in jobs), default=0))
    finished = sum(1 for job in jobs if job.completion_time != -1)
    busy_total = sum(p.total_busy_time for p in processors)

    if makespan > 0:
        throughput = count / makespan
        utilization = busy_total / (len(processors) * makespan) if processors else 0.0
    else:
        throughput = 0.0
        utilization = 0.0

    return SchedulingMetrics(
        makespan=makespan,
        average_waiting_time=sum(job.waiting_time for job in jobs) / count if count else 0.0,
        average_turnaround_time=sum(job.turnaround_time for job in jobs) / count if count else 0.0,
        throughput=throughput,
        utilization=utilization,
        jobs_total=count,
        jobs_completed=finished,
        completed=finished == count,
    )


def resource_utilization_report(processors: Iterable[Processor]) -> dict:
    """Average ledger utilization per capacity-carrying processor and cluster-wide."""
    per_processor: dict[int, dict[str, float]] = {}
    for processor in processors:
        if not processor.resource_aware:
            continue
        usage = processor.average_utilization()
        per_processor[processor.id] = {
            "memory": usage.memory,
            "network": usage.network,
            "cpu": usage.cpu,
            "overall": usage.overall,
        }
    if not per_processor:
        return {}
    count = len(per_processor)
    cluster = {
        key: sum(values[key] for values in per_processor.values()) / count
        for key in ("memory", "network", "cpu", "overall")
    }
    return {"processors": per_processor, "cluster": cluster}


class DispatchMetrics(IMetric):
    """Aggregate dispatch activity from the event stream."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._arrived = 0
        self._dispatch_count = 0
        self._preempt_count = 0
        self._completed = 0
        self._constrained_jobs: set[int] = set()
        self._constrained_by_resource: dict[str, int] = defaultdict(int)
        self._processor_busy: dict[int, int] = defaultdict(int)
        self._budget_exhausted = False
        self._event_count = 0
        self._max_time = 0

    def consume(self, event: SimEvent) -> None:
        self._event_count += 1
        self._max_time = max(self._max_time, event.time)

        if event.type == EventType.JOB_ARRIVED:
            self._arrived += 1
        elif event.type == EventType.JOB_DISPATCHED:
            self._dispatch_count += 1
            if event.processor_id is not None:
                busy_until = event.payload.get("busy_until")
                if isinstance(busy_until, int):
                    self._processor_busy[event.processor_id] += max(0, busy_until - event.time)
        elif event.type == EventType.JOB_PREEMPTED:
            self._preempt_count += 1
        elif event.type == EventType.JOB_COMPLETED:
            self._completed += 1
        elif event.type == EventType.RESOURCE_CONSTRAINED:
            if event.job_id is not None:
                self._constrained_jobs.add(event.job_id)
            for resource in event.payload.get("resources", []):
                self._constrained_by_resource[str(resource)] += 1
        elif event.type == EventType.BUDGET_EXHAUSTED:
            self._budget_exhausted = True

    def report(self) -> dict:
        return {
            "jobs_arrived": self._arrived,
            "dispatch_count": self._dispatch_count,
            "preempt_count": self._preempt_count,
            "completion_count": self._completed,
            "constrained_jobs": len(self._constrained_jobs),
            "constrained_by_resource": dict(self._constrained_by_resource),
            "processor_busy_time": dict(self._processor_busy),
            "budget_exhausted": self._budget_exhausted,
            "event_count": self._event_count,
            "max_time": self._max_time,
        }

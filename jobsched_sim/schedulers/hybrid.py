"""Hybrid Min-Min/SJF scheduler."""

from __future__ import annotations

from jobsched_sim.model import Job, Processor

from .base import Algorithm, IScheduler, ScheduleContext
from .matrix import completion_matrix, projected_completion


IO_BOUND_THRESHOLD = 0.3
SJF_WEIGHT = 0.6
MIN_MIN_WEIGHT = 0.4


class HybridScheduler(IScheduler):
    """Weighted blend of the SJF and Min-Min signals.

    When I/O-bound jobs are present but make up less than
    ``io_bound_threshold`` of the ready set, each of them first takes its
    best-scoring processor; the weighted pair search then runs over the rest.
    Ties keep the incoming job order and the lowest processor id.
    """

    algorithm = Algorithm.HYBRID
    display_name = "Hybrid Min-Min/SJF Algorithm"

    def __init__(self, params: dict | None = None) -> None:
        super().__init__(params=params)
        self.sjf_weight = float(self.params.get("sjf_weight", SJF_WEIGHT))
        self.min_min_weight = float(self.params.get("min_min_weight", MIN_MIN_WEIGHT))
        self.io_bound_threshold = float(self.params.get("io_bound_threshold", IO_BOUND_THRESHOLD))

    def score(self, job: Job, completion_time: int) -> float:
        return self.sjf_weight * -job.estimated_execution_time + self.min_min_weight * -completion_time

    def assign(self, ready: list[Job], idle: list[Processor], ctx: ScheduleContext) -> None:
        jobs = list(ready)
        processors = sorted(idle, key=lambda processor: processor.id)
        times = completion_matrix(jobs, processors, projected_completion(ctx.now))

        io_bound = [job for job in jobs if job.io_bound]
        if io_bound and len(io_bound) / len(jobs) < self.io_bound_threshold:
            for job in io_bound:
                if not processors:
                    break
                best: tuple[float, Processor] | None = None
                for processor in processors:
                    value = self.score(job, times[(job.id, processor.id)])
                    if best is None or value > best[0]:
                        best = (value, processor)
                assert best is not None
                ctx.dispatch(job, best[1])
                processors.remove(best[1])
            jobs = [job for job in jobs if not job.io_bound]

        while jobs and processors:
            best_pair: tuple[float, Job, Processor] | None = None
            for job in jobs:
                for processor in processors:
                    value = self.score(job, times[(job.id, processor.id)])
                    if best_pair is None or value > best_pair[0]:
                        best_pair = (value, job, processor)
            assert best_pair is not None
            _, job, processor = best_pair
            ctx.dispatch(job, processor)
            jobs.remove(job)
            processors.remove(processor)

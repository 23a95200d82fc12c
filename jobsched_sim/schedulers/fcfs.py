"""First-come first-served scheduler."""

from __future__ import annotations

from jobsched_sim.model import Job

from .base import Algorithm, OrderedScheduler, ScheduleContext


class FCFSScheduler(OrderedScheduler):
    """Dispatch ready jobs in arrival order."""

    algorithm = Algorithm.FCFS
    display_name = "First Come First Served"

    def sort_key(self, job: Job, ctx: ScheduleContext) -> int:  # noqa: ARG002
        return job.arrival_time

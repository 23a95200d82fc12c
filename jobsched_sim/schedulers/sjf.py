"""Shortest-job-first scheduler."""

from __future__ import annotations

from jobsched_sim.model import Job

from .base import Algorithm, OrderedScheduler, ScheduleContext


class SJFScheduler(OrderedScheduler):
    """Smallest estimated execution time first."""

    algorithm = Algorithm.SJF
    display_name = "Shortest Job First"

    def sort_key(self, job: Job, ctx: ScheduleContext) -> int:  # noqa: ARG002
        return job.estimated_execution_time

"""Static priority scheduler."""

from __future__ import annotations

from jobsched_sim.model import Job

from .base import Algorithm, OrderedScheduler, ScheduleContext


class PriorityScheduler(OrderedScheduler):
    """Highest priority value first."""

    algorithm = Algorithm.PRIORITY
    display_name = "Priority Scheduling"

    def sort_key(self, job: Job, ctx: ScheduleContext) -> int:  # noqa: ARG002
        return -job.priority

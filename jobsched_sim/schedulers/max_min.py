"""Max-Min scheduler."""

from __future__ import annotations

from jobsched_sim.model import Job, Processor

from .base import Algorithm, IScheduler, ScheduleContext
from .matrix import max_min_assign, projected_completion


class MaxMinScheduler(IScheduler):
    """Longest job (by its best completion time) goes first, on its best processor."""

    algorithm = Algorithm.MAX_MIN
    display_name = "Max-Min Algorithm"

    def assign(self, ready: list[Job], idle: list[Processor], ctx: ScheduleContext) -> None:
        max_min_assign(ready, idle, ctx, projected_completion(ctx.now))

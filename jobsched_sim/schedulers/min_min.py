"""Min-Min scheduler."""

from __future__ import annotations

from jobsched_sim.model import Job, Processor

from .base import Algorithm, IScheduler, ScheduleContext
from .matrix import min_min_assign, projected_completion


class MinMinScheduler(IScheduler):
    """Smallest projected completion time across all pairs goes first."""

    algorithm = Algorithm.MIN_MIN
    display_name = "Min-Min Algorithm"

    def assign(self, ready: list[Job], idle: list[Processor], ctx: ScheduleContext) -> None:
        min_min_assign(ready, idle, ctx, projected_completion(ctx.now))

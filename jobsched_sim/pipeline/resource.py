"""Resource-aware matching of ready jobs to idle processors."""

from __future__ import annotations

from jobsched_sim.model import Job, JobGraph, Processor
from jobsched_sim.schedulers import IScheduler, ScheduleContext

from .base import SchedulingPipeline


CRITICAL_JOB_BONUS = 100
CRITICAL_PATH_WEIGHT = 5
MEMORY_HEAVY_MB = 8192
NETWORK_HEAVY_MBPS = 1000
CPU_HEAVY_PERCENT = 400
MEMORY_HEAVY_PENALTY = 50
NETWORK_HEAVY_PENALTY = 30
CPU_HEAVY_PENALTY = 40


def efficiency_score(job: Job, graph: JobGraph) -> float:
    """Higher means the job uses its resources more productively."""
    demand = job.resources
    score = job.priority * 10.0
    if job.tracks_dependencies:
        if graph.is_critical(job.id):
            score += CRITICAL_JOB_BONUS
        score += graph.critical_path_length(job.id) * CRITICAL_PATH_WEIGHT
    if demand is None:
        return score

    units = demand.memory / 1024.0 + demand.network / 100.0 + demand.cpu / 100.0
    score += job.execution_time / units if units > 0 else job.execution_time
    if demand.memory > MEMORY_HEAVY_MB:
        score -= MEMORY_HEAVY_PENALTY
    if demand.network > NETWORK_HEAVY_MBPS:
        score -= NETWORK_HEAVY_PENALTY
    if demand.cpu > CPU_HEAVY_PERCENT:
        score -= CPU_HEAVY_PENALTY
    return score


def availability_score(processor: Processor) -> float:
    cap = processor.capacity
    score = processor.speed_factor * 0.5
    if cap is None:
        return score
    return (
        score
        + 0.3 * cap.available_memory / cap.total_memory
        + 0.3 * cap.available_network / cap.total_network
        + 0.4 * cap.available_cpu / cap.total_cpu
    )


class ResourceMatchAssigner:
    """First-fit over ranked processors, forcing the top one when nothing fits.

    Falls back to the base strategy unless every ready job carries a resource
    demand and every idle processor a capacity.
    """

    def __init__(self, base: IScheduler) -> None:
        self.base = base

    def __call__(self, ready: list[Job], idle: list[Processor], ctx: ScheduleContext) -> None:
        if not all(job.resource_aware for job in ready) or not all(p.resource_aware for p in idle):
            self.base.assign(ready, idle, ctx)
            return

        jobs = sorted(ready, key=lambda job: -efficiency_score(job, ctx.graph))
        processors = sorted(idle, key=lambda p: -availability_score(p))
        for job in jobs:
            if not processors:
                break
            chosen = next((p for p in processors if p.can_accommodate(job)), processors[0])
            ctx.dispatch(job, chosen)
            processors.remove(chosen)


def resource_aware(base: IScheduler) -> SchedulingPipeline:
    return SchedulingPipeline(base, label="Resource-Aware", assigner=ResourceMatchAssigner(base))

"""Dependency-aware stages: enhanced priority, critical-first and the adjusted matrix."""

from __future__ import annotations

from jobsched_sim.model import Job, JobGraph, Processor
from jobsched_sim.schedulers import (
    Algorithm,
    IScheduler,
    ScheduleContext,
    max_min_assign,
    min_min_assign,
)
from jobsched_sim.schedulers.matrix import AssignHook, CompletionFn

from .base import Assigner, ReorderStage, SchedulingPipeline


MIN_MIN_CRITICAL_FACTOR = 0.9
MAX_MIN_CRITICAL_FACTOR = 1.1

PRIORITY_SENSITIVE = frozenset({Algorithm.PRIORITY, Algorithm.HYBRID})
MATRIX_ALGORITHMS = frozenset({Algorithm.MIN_MIN, Algorithm.MAX_MIN})


def _tracks_dependencies(ready: list[Job]) -> bool:
    return any(job.tracks_dependencies for job in ready)


def enhanced_priority_order(ready: list[Job], ctx: ScheduleContext) -> list[Job]:
    if not _tracks_dependencies(ready):
        return ready
    graph = ctx.graph
    return sorted(ready, key=lambda job: -graph.priority_score(job.id, ctx.completed_ids))


def critical_first(ready: list[Job], ctx: ScheduleContext) -> list[Job]:
    if not _tracks_dependencies(ready):
        return ready
    graph = ctx.graph
    critical = [job for job in ready if job.tracks_dependencies and graph.is_critical(job.id)]
    if not critical:
        return ready
    critical_ids = {job.id for job in critical}
    return critical + [job for job in ready if job.id not in critical_ids]


def earliest_completion(ctx: ScheduleContext) -> CompletionFn:
    """Projected completion counting from the job's earliest feasible start."""
    graph = ctx.graph

    def completion(job: Job, processor: Processor) -> int:
        start = ctx.now
        if job.tracks_dependencies:
            start = max(ctx.now, graph.earliest_start_time(job.id))
        return start + processor.estimate_processing_time(job)

    return completion


def refresh_dependents(graph: JobGraph) -> AssignHook:
    def hook(job: Job) -> None:
        if job.tracks_dependencies:
            graph.refresh_dependents(job.id)

    return hook


def _critical_adjust(graph: JobGraph, factor: float):
    def adjust(job: Job, value: int) -> int:
        if job.tracks_dependencies and graph.is_critical(job.id):
            return int(value * factor)
        return value

    return adjust


def dependency_matrix_assigner(algorithm: Algorithm) -> Assigner:
    """Min-Min/Max-Min over earliest-start completion times with a critical-path factor."""
    select = min_min_assign if algorithm == Algorithm.MIN_MIN else max_min_assign
    factor = MIN_MIN_CRITICAL_FACTOR if algorithm == Algorithm.MIN_MIN else MAX_MIN_CRITICAL_FACTOR

    def assign(ready: list[Job], idle: list[Processor], ctx: ScheduleContext) -> None:
        select(
            ready,
            idle,
            ctx,
            earliest_completion(ctx),
            adjust=_critical_adjust(ctx.graph, factor),
            on_assign=refresh_dependents(ctx.graph),
        )

    return assign


def dependency_aware(base: IScheduler) -> SchedulingPipeline:
    reorder: list[ReorderStage] = []
    if base.algorithm in PRIORITY_SENSITIVE:
        reorder.append(enhanced_priority_order)
    reorder.append(critical_first)
    assigner = None
    if base.algorithm in MATRIX_ALGORITHMS:
        assigner = dependency_matrix_assigner(base.algorithm)
    return SchedulingPipeline(base, label="Dependency-Aware", reorder=reorder, assigner=assigner)

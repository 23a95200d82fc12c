"""Completion-time matrix selection shared by Min-Min and Max-Min."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from jobsched_sim.model import Job, Processor

from .base import ScheduleContext


CompletionFn = Callable[[Job, Processor], int]
AdjustFn = Callable[[Job, int], int]
AssignHook = Callable[[Job], None]


def projected_completion(now: int) -> CompletionFn:
    """``now`` plus the processor's speed-adjusted estimate."""

    def completion(job: Job, processor: Processor) -> int:
        return now + processor.estimate_processing_time(job)

    return completion


def completion_matrix(
    jobs: Iterable[Job],
    processors: Iterable[Processor],
    completion: CompletionFn,
) -> dict[tuple[int, int], int]:
    processors = list(processors)
    return {
        (job.id, processor.id): completion(job, processor)
        for job in jobs
        for processor in processors
    }


def min_min_assign(
    ready: list[Job],
    idle: list[Processor],
    ctx: ScheduleContext,
    completion: CompletionFn,
    *,
    adjust: AdjustFn | None = None,
    on_assign: AssignHook | None = None,
) -> None:
    """Repeatedly dispatch the globally smallest (job, processor) entry.

    Ties go to the lowest job id, then the lowest processor id.
    """
    jobs = sorted(ready, key=lambda job: job.id)
    processors = sorted(idle, key=lambda processor: processor.id)
    times = completion_matrix(jobs, processors, completion)

    while jobs and processors:
        best: tuple[int, Job, Processor] | None = None
        for job in jobs:
            for processor in processors:
                value = times[(job.id, processor.id)]
                if adjust is not None:
                    value = adjust(job, value)
                if best is None or value < best[0]:
                    best = (value, job, processor)
        assert best is not None
        _, job, processor = best
        ctx.dispatch(job, processor)
        jobs.remove(job)
        processors.remove(processor)
        if on_assign is not None:
            on_assign(job)


def max_min_assign(
    ready: list[Job],
    idle: list[Processor],
    ctx: ScheduleContext,
    completion: CompletionFn,
    *,
    adjust: AdjustFn | None = None,
    on_assign: AssignHook | None = None,
) -> None:
    """Dispatch the job whose best completion time is largest, on its best processor.

    ``adjust`` applies to each job's minimum, not to individual entries.
    """
    jobs = sorted(ready, key=lambda job: job.id)
    processors = sorted(idle, key=lambda processor: processor.id)
    times = completion_matrix(jobs, processors, completion)

    while jobs and processors:
        best: tuple[int, Job, Processor] | None = None
        for job in jobs:
            job_best: tuple[int, Processor] | None = None
            for processor in processors:
                value = times[(job.id, processor.id)]
                if job_best is None or value < job_best[0]:
                    job_best = (value, processor)
            assert job_best is not None
            value, processor = job_best
            if adjust is not None:
                value = adjust(job, value)
            if best is None or value > best[0]:
                best = (value, job, processor)
        assert best is not None
        _, job, processor = best
        ctx.dispatch(job, processor)
        jobs.remove(job)
        processors.remove(processor)
        if on_assign is not None:
            on_assign(job)

"""Integrated scoring: dependencies, resources and predicted runtimes in one pass."""

from __future__ import annotations

import logging
import math

from jobsched_sim.model import Job, Processor
from jobsched_sim.predictor import IRuntimePredictor
from jobsched_sim.schedulers import IScheduler, ScheduleContext

from .base import SchedulingPipeline


logger = logging.getLogger(__name__)

PRIORITY_WEIGHT = 10
FIT_WEIGHT = 100
CANNOT_ACCOMMODATE_PENALTY = 500
CRITICAL_BONUS = 200
CRITICAL_PATH_WEIGHT = 3
DEPENDENT_WEIGHT = 15
PREFERRED_WEIGHT = 25
SPEED_WEIGHT = 50
TARGET_UTILIZATION = 0.7
BELL_WIDTH = 0.3


def resource_fit(job: Job, processor: Processor) -> float:
    """Gaussian of the job's share of processor capacity, peaking at 70%."""
    demand = job.resources
    cap = processor.capacity
    if demand is None or cap is None:
        return 0.0
    shares = (
        demand.memory / cap.total_memory,
        demand.network / cap.total_network,
        demand.cpu / cap.total_cpu,
    )
    average = sum(min(1.0, max(0.0, share)) for share in shares) / 3.0
    return math.exp(-((average - TARGET_UTILIZATION) ** 2) / (2 * BELL_WIDTH * BELL_WIDTH))


def integrated_score(job: Job, processor: Processor, ctx: ScheduleContext) -> float:
    graph = ctx.graph
    score = -float(ctx.now + processor.estimate_processing_time(job))
    score += job.priority * PRIORITY_WEIGHT
    if job.resource_aware and processor.resource_aware:
        score += resource_fit(job, processor) * FIT_WEIGHT
        if not processor.can_accommodate(job):
            score -= CANNOT_ACCOMMODATE_PENALTY
    if job.tracks_dependencies:
        if graph.is_critical(job.id):
            score += CRITICAL_BONUS
        score += graph.critical_path_length(job.id) * CRITICAL_PATH_WEIGHT
        score += graph.dependent_count(job.id) * DEPENDENT_WEIGHT
        score += graph.satisfied_preferred(job.id, ctx.completed_ids) * PREFERRED_WEIGHT
    score += processor.speed_factor * SPEED_WEIGHT
    return score


class PredictorFeed:
    """Record each completed job with the predictor exactly once."""

    def __init__(self, predictor: IRuntimePredictor) -> None:
        self.predictor = predictor
        self._seen: set[int] = set()

    def __call__(self, ctx: ScheduleContext) -> None:
        for job in ctx.graph:
            if job.id not in ctx.completed_ids or job.id in self._seen:
                continue
            if job.completion_time == -1 or job.completion_time > ctx.now:
                continue
            self._seen.add(job.id)
            self.predictor.record_completion(job, num_dependencies=ctx.graph.dependency_count(job.id))

    def reset(self) -> None:
        self._seen.clear()


class PredictedEstimates:
    """Overwrite each ready job's estimate with the predictor's answer."""

    def __init__(self, predictor: IRuntimePredictor) -> None:
        self.predictor = predictor

    def __call__(self, ready: list[Job], ctx: ScheduleContext) -> list[Job]:
        for job in ready:
            predicted = self.predictor.predict(job, num_dependencies=ctx.graph.dependency_count(job.id))
            if predicted != job.estimated_execution_time:
                logger.debug(
                    "job %s estimate %s -> %s", job.id, job.estimated_execution_time, predicted
                )
            job.set_estimate(predicted)
        return ready


def integrated_assign(ready: list[Job], idle: list[Processor], ctx: ScheduleContext) -> None:
    """Consume (job, processor) pairs by descending score.

    Ties go to the lowest job id, then the lowest processor id. Accommodation
    only lowers the score; it never blocks a pair.
    """
    pairs = sorted(
        ((integrated_score(job, processor, ctx), job, processor) for job in ready for processor in idle),
        key=lambda item: (-item[0], item[1].id, item[2].id),
    )
    taken_jobs: set[int] = set()
    taken_processors: set[int] = set()
    for _score, job, processor in pairs:
        if job.id in taken_jobs or processor.id in taken_processors:
            continue
        ctx.dispatch(job, processor)
        taken_jobs.add(job.id)
        taken_processors.add(processor.id)
        if job.tracks_dependencies:
            ctx.graph.refresh_dependents(job.id)


def integrated(base: IScheduler, predictor: IRuntimePredictor) -> SchedulingPipeline:
    pipeline = SchedulingPipeline(
        base,
        label="Integrated-Advanced",
        prepare=[PredictorFeed(predictor)],
        reorder=[PredictedEstimates(predictor)],
        assigner=integrated_assign,
        predictor=predictor,
    )
    return pipeline

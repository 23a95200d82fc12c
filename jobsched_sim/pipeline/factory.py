"""Build a scheduler from its configured name and wrapping mode."""

from __future__ import annotations

from jobsched_sim.model import SchedulerMode, SchedulerSpec
from jobsched_sim.predictor import IRuntimePredictor, create_predictor
from jobsched_sim.schedulers import IScheduler, create_scheduler

from .dependency import dependency_aware
from .integrated import integrated
from .resource import resource_aware


def wrap_scheduler(
    base: IScheduler,
    mode: SchedulerMode | str,
    predictor: IRuntimePredictor | None = None,
) -> IScheduler:
    mode = SchedulerMode(mode)
    if mode == SchedulerMode.BASE:
        return base
    if mode == SchedulerMode.DEPENDENCY:
        return dependency_aware(base)
    if mode == SchedulerMode.RESOURCE:
        return resource_aware(base)
    return integrated(base, predictor or create_predictor("neural"))


def build_scheduler(spec: SchedulerSpec, predictor: IRuntimePredictor | None = None) -> IScheduler:
    base = create_scheduler(spec.name, spec.params)
    return wrap_scheduler(base, spec.mode, predictor)

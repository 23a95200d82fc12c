"""Composable scheduling pipeline over a base strategy."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol

from jobsched_sim.model import Job, Processor
from jobsched_sim.predictor import IRuntimePredictor
from jobsched_sim.schedulers import IScheduler, ScheduleContext


ReorderStage = Callable[[list[Job], ScheduleContext], list[Job]]
Assigner = Callable[[list[Job], list[Processor], ScheduleContext], None]


class PrepareStage(Protocol):
    def __call__(self, ctx: ScheduleContext) -> None: ...

    def reset(self) -> None: ...


class SchedulingPipeline(IScheduler):
    """prepare hooks -> readiness filter -> reorder stages -> assigner.

    The base strategy is held as a value; its ``algorithm`` tag selects the
    behavior of algorithm-specific stages. Without an explicit ``assigner``
    the base strategy's own assignment runs on the reordered ready list.
    """

    def __init__(
        self,
        base: IScheduler,
        *,
        label: str,
        prepare: Sequence[PrepareStage] = (),
        reorder: Sequence[ReorderStage] = (),
        assigner: Assigner | None = None,
        predictor: IRuntimePredictor | None = None,
        params: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(params=params)
        self.base = base
        self.algorithm = base.algorithm
        self.label = label
        self.prepare_stages = list(prepare)
        self.reorder_stages = list(reorder)
        self.assigner = assigner
        self.predictor = predictor

    @property
    def name(self) -> str:
        return f"{self.label} {self.base.name}"

    def reset(self) -> None:
        super().reset()
        self.base.reset()
        for stage in self.prepare_stages:
            stage.reset()

    def prepare(self, ctx: ScheduleContext) -> None:
        for stage in self.prepare_stages:
            stage(ctx)

    def should_assign(self, ready: list[Job], idle: list[Processor]) -> bool:
        return self.base.should_assign(ready, idle)

    def assign(self, ready: list[Job], idle: list[Processor], ctx: ScheduleContext) -> None:
        for stage in self.reorder_stages:
            ready = stage(ready, ctx)
        if self.assigner is None:
            self.base.assign(ready, idle, ctx)
        else:
            self.assigner(ready, idle, ctx)

"""Simulation engine interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from jobsched_sim.events import SimEvent
from jobsched_sim.metrics import SchedulingMetrics
from jobsched_sim.model import ScenarioSpec


class ISimEngine(ABC):
    """Simulation engine contract."""

    @abstractmethod
    def build(self, spec: ScenarioSpec) -> None:
        """Build internal runtime state from a scenario."""

    @abstractmethod
    def run(self, until: int | None = None) -> SchedulingMetrics:
        """Run until every job completes or the tick budget is spent."""

    @abstractmethod
    def step(self) -> None:
        """Run one tick."""

    @abstractmethod
    def reset(self) -> None:
        """Reset engine state."""

    @abstractmethod
    def subscribe(self, handler: Callable[[SimEvent], None]) -> None:
        """Subscribe event handler."""

"""Event-stream metric interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from jobsched_sim.events import SimEvent


class IMetric(ABC):
    """Subscribes to the engine's event bus and contributes keys to the run report."""

    @abstractmethod
    def consume(self, event: SimEvent) -> None:
        """Fold one published event into the running totals."""

    @abstractmethod
    def report(self) -> dict:
        """Flat, JSON-serializable summary merged into ``SimEngine.metric_report``."""

    @abstractmethod
    def reset(self) -> None:
        """Forget everything seen so far; called when the engine reloads."""

"""Scheduler registry and factory."""

from __future__ import annotations

from collections.abc import Callable

from .base import IScheduler
from .fcfs import FCFSScheduler
from .hybrid import HybridScheduler
from .max_min import MaxMinScheduler
from .min_min import MinMinScheduler
from .priority import PriorityScheduler
from .round_robin import RoundRobinScheduler
from .sjf import SJFScheduler


SchedulerFactory = Callable[..., IScheduler]


_REGISTRY: dict[str, SchedulerFactory] = {
    "fcfs": lambda params=None: FCFSScheduler(params=params),
    "first_come_first_served": lambda params=None: FCFSScheduler(params=params),
    "priority": lambda params=None: PriorityScheduler(params=params),
    "sjf": lambda params=None: SJFScheduler(params=params),
    "shortest_job_first": lambda params=None: SJFScheduler(params=params),
    "min_min": lambda params=None: MinMinScheduler(params=params),
    "max_min": lambda params=None: MaxMinScheduler(params=params),
    "round_robin": lambda params=None: RoundRobinScheduler(params=params),
    "rr": lambda params=None: RoundRobinScheduler(params=params),
    "hybrid": lambda params=None: HybridScheduler(params=params),
    "hybrid_min_min_sjf": lambda params=None: HybridScheduler(params=params),
}


def register_scheduler(name: str, factory: SchedulerFactory) -> None:
    _REGISTRY[name.lower()] = factory


def available_schedulers() -> list[str]:
    return sorted(_REGISTRY)


def create_scheduler(name: str, params: dict | None = None) -> IScheduler:
    key = name.lower().replace("-", "_")
    if key not in _REGISTRY:
        raise ValueError(f"unknown scheduler {name}")
    factory = _REGISTRY[key]
    try:
        return factory(params or {})
    except TypeError:
        return factory()

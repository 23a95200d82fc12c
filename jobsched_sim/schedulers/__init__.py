"""Schedulers package exports."""

from .base import (
    Algorithm,
    Dispatch,
    IScheduler,
    OrderedScheduler,
    ScheduleContext,
    build_context,
    filter_ready,
    idle_processors,
    running_job_ids,
)
from .fcfs import FCFSScheduler
from .hybrid import HybridScheduler
from .matrix import completion_matrix, max_min_assign, min_min_assign, projected_completion
from .max_min import MaxMinScheduler
from .min_min import MinMinScheduler
from .priority import PriorityScheduler
from .registry import available_schedulers, create_scheduler, register_scheduler
from .round_robin import RoundRobinScheduler
from .sjf import SJFScheduler

__all__ = [
    "Algorithm",
    "Dispatch",
    "FCFSScheduler",
    "HybridScheduler",
    "IScheduler",
    "MaxMinScheduler",
    "MinMinScheduler",
    "OrderedScheduler",
    "PriorityScheduler",
    "RoundRobinScheduler",
    "SJFScheduler",
    "ScheduleContext",
    "available_schedulers",
    "build_context",
    "completion_matrix",
    "create_scheduler",
    "filter_ready",
    "idle_processors",
    "max_min_assign",
    "min_min_assign",
    "projected_completion",
    "register_scheduler",
    "running_job_ids",
]

"""Metrics exports."""

from .base import IMetric
from .core import DispatchMetrics, SchedulingMetrics, compute_metrics, resource_utilization_report

__all__ = [
    "DispatchMetrics",
    "IMetric",
    "SchedulingMetrics",
    "compute_metrics",
    "resource_utilization_report",
]

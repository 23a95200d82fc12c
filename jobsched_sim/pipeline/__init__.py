"""Composable scheduling pipeline exports."""

from .base import Assigner, ReorderStage, SchedulingPipeline
from .dependency import (
    critical_first,
    dependency_aware,
    dependency_matrix_assigner,
    earliest_completion,
    enhanced_priority_order,
)
from .factory import build_scheduler, wrap_scheduler
from .integrated import (
    PredictedEstimates,
    PredictorFeed,
    integrated,
    integrated_assign,
    integrated_score,
    resource_fit,
)
from .resource import ResourceMatchAssigner, availability_score, efficiency_score, resource_aware

__all__ = [
    "Assigner",
    "PredictedEstimates",
    "PredictorFeed",
    "ReorderStage",
    "ResourceMatchAssigner",
    "SchedulingPipeline",
    "availability_score",
    "build_scheduler",
    "critical_first",
    "dependency_aware",
    "dependency_matrix_assigner",
    "earliest_completion",
    "efficiency_score",
    "enhanced_priority_order",
    "integrated",
    "integrated_assign",
    "integrated_score",
    "resource_aware",
    "resource_fit",
    "wrap_scheduler",
]

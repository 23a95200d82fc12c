"""Synthetic workload generation and scenario building."""

from .builder import build_workload, graph_from_generator, graph_from_specs, processors_from_specs
from .generators import (
    attach_resource_demands,
    available_patterns,
    binary_tree,
    diamond,
    generate_pattern,
    independent,
    layered_dag,
    linear_chain,
    pipelines,
    random_jobs,
    random_processors,
    resource_processors,
    synthetic_history,
)

__all__ = [
    "attach_resource_demands",
    "available_patterns",
    "binary_tree",
    "build_workload",
    "diamond",
    "generate_pattern",
    "graph_from_generator",
    "graph_from_specs",
    "independent",
    "layered_dag",
    "linear_chain",
    "pipelines",
    "random_jobs",
    "random_processors",
    "resource_processors",
    "synthetic_history",
]

"""Workload structure summaries."""

from __future__ import annotations

from typing import Any

from jobsched_sim.model import DependencyType, JobGraph


def dependency_summary(graph: JobGraph) -> dict[str, Any]:
    counts = {dep_type.value: 0 for dep_type in DependencyType}
    for job in graph:
        for dep_type in graph.dependency_map(job.id).values():
            counts[dep_type.value] += 1
    critical = [job.id for job in graph if job.tracks_dependencies and graph.is_critical(job.id)]
    total_jobs = len(graph)
    return {
        "total_dependencies": sum(counts.values()),
        "by_type": counts,
        "critical_jobs": len(critical),
        "critical_ratio": len(critical) / total_jobs if total_jobs else 0.0,
        "max_critical_path_length": graph.max_critical_path_length(),
    }

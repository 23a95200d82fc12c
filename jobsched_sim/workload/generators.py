"""Seeded synthetic workloads: job sets, DAG patterns, processors and history.

Every generator takes an explicit ``random.Random``; none of them touches a
process-wide generator.
"""

from __future__ import annotations

from collections.abc import Callable
from random import Random

from jobsched_sim.model import DependencyType, Job, JobGraph, Processor, ResourceCapacity
from jobsched_sim.predictor import JobHistoryRecord


SPEED_FACTORS = (0.5, 1.0, 1.5, 2.0, 2.5, 3.0)
MEMORY_CAPACITIES = (4096, 8192, 16384, 32768, 65536, 131072)
NETWORK_CAPACITIES = (100, 250, 500, 1000, 2000, 10000)
CPU_CAPACITIES = (100, 200, 400, 600, 800, 1600)

PIPELINE_STAGES = 5


def _job(rng: Random, job_id: int, arrival: int, min_exec: int, max_exec: int) -> Job:
    execution = rng.randint(min_exec, max_exec)
    priority = rng.randint(1, 10)
    return Job(id=job_id, arrival_time=arrival, execution_time=execution, priority=priority)


def random_jobs(
    rng: Random,
    count: int,
    *,
    min_exec: int = 1,
    max_exec: int = 20,
    io_bound_ratio: float = 0.0,
) -> list[Job]:
    """Independent jobs arriving over the first half of ``count`` ticks."""
    jobs: list[Job] = []
    for job_id in range(count):
        arrival = rng.randrange(max(1, count // 2))
        job = _job(rng, job_id, arrival, min_exec, max_exec)
        if io_bound_ratio > 0:
            job.io_bound = rng.random() < io_bound_ratio
        jobs.append(job)
    return jobs


def random_processors(rng: Random, count: int, *, base_speed: float = 1.0) -> list[Processor]:
    """Plain processors with speeds within +/-20% of ``base_speed``."""
    return [Processor(id=idx, speed_factor=base_speed * (0.8 + rng.random() * 0.4)) for idx in range(count)]


def resource_processors(count: int) -> list[Processor]:
    """Processors cycling through six capacity tiers, slowest and smallest first."""
    processors: list[Processor] = []
    for idx in range(count):
        tier = idx % len(SPEED_FACTORS)
        processors.append(
            Processor(
                id=idx,
                speed_factor=SPEED_FACTORS[tier],
                capacity=ResourceCapacity(
                    total_memory=MEMORY_CAPACITIES[tier],
                    total_network=NETWORK_CAPACITIES[tier],
                    total_cpu=CPU_CAPACITIES[tier],
                ),
            )
        )
    return processors


def layered_dag(
    rng: Random,
    count: int,
    *,
    max_dependencies: int = 3,
    dag_width: int = 5,
    min_exec: int = 1,
    max_exec: int = 20,
) -> JobGraph:
    """Jobs split into layers; each job past the first layer links to the previous one.

    Edge types are drawn 70% REQUIRES, 20% PREFERS and 10% CONFLICTS_WITH.
    """
    graph = JobGraph(
        _job(rng, job_id, rng.randrange(max(1, count // 3)), min_exec, max_exec)
        for job_id in range(count)
    )
    layers = max(2, count // dag_width)
    per_layer = count // layers
    if per_layer == 0:
        return graph
    for layer in range(1, layers):
        start = layer * per_layer
        end = min(count, (layer + 1) * per_layer)
        prev_start = (layer - 1) * per_layer
        for job_id in range(start, end):
            for _ in range(1 + rng.randrange(min(max_dependencies, per_layer))):
                prereq = prev_start + rng.randrange(start - prev_start)
                roll = rng.random()
                if roll < 0.7:
                    dep_type = DependencyType.REQUIRES
                elif roll < 0.9:
                    dep_type = DependencyType.PREFERS
                else:
                    dep_type = DependencyType.CONFLICTS_WITH
                graph.add_dependency(job_id, prereq, dep_type)
    return graph


def _fresh_graph(rng: Random, count: int, min_exec: int, max_exec: int) -> JobGraph:
    return JobGraph(_job(rng, job_id, 0, min_exec, max_exec) for job_id in range(count))


def linear_chain(rng: Random, count: int, *, min_exec: int = 1, max_exec: int = 10) -> JobGraph:
    graph = _fresh_graph(rng, count, min_exec, max_exec)
    for job_id in range(1, count):
        graph.add_dependency(job_id, job_id - 1)
    return graph


def binary_tree(rng: Random, count: int, *, min_exec: int = 1, max_exec: int = 10) -> JobGraph:
    graph = _fresh_graph(rng, count, min_exec, max_exec)
    for job_id in range(1, count):
        graph.add_dependency(job_id, (job_id - 1) // 2)
    return graph


def diamond(rng: Random, count: int, *, min_exec: int = 1, max_exec: int = 10) -> JobGraph:
    """Entry job, ``count - 2`` parallel middle jobs, one exit job."""
    if count < 4:
        raise ValueError("diamond pattern requires at least 4 jobs")
    graph = _fresh_graph(rng, count, min_exec, max_exec)
    exit_id = count - 1
    for job_id in range(1, exit_id):
        graph.add_dependency(job_id, 0)
        graph.add_dependency(exit_id, job_id)
    return graph


def pipelines(rng: Random, count: int, *, min_exec: int = 1, max_exec: int = 10) -> JobGraph:
    """Independent five-stage chains; leftover jobs stay unlinked."""
    graph = _fresh_graph(rng, count, min_exec, max_exec)
    for pipe in range(max(1, count // PIPELINE_STAGES)):
        for stage in range(1, PIPELINE_STAGES):
            job_id = pipe * PIPELINE_STAGES + stage
            if job_id < count:
                graph.add_dependency(job_id, job_id - 1)
    return graph


def independent(rng: Random, count: int, *, min_exec: int = 1, max_exec: int = 20) -> JobGraph:
    return JobGraph(random_jobs(rng, count, min_exec=min_exec, max_exec=max_exec))


PatternFactory = Callable[..., JobGraph]

_PATTERNS: dict[str, PatternFactory] = {
    "independent": independent,
    "random": layered_dag,
    "layered": layered_dag,
    "linear": linear_chain,
    "tree": binary_tree,
    "diamond": diamond,
    "pipeline": pipelines,
}


def available_patterns() -> list[str]:
    return sorted(_PATTERNS)


def generate_pattern(pattern: str, rng: Random, count: int, **kwargs) -> JobGraph:
    key = pattern.strip().lower()
    if key not in _PATTERNS:
        raise ValueError(f"unknown workload pattern {pattern}")
    return _PATTERNS[key](rng, count, **kwargs)


def attach_resource_demands(graph: JobGraph, rng: Random) -> None:
    """Give every job a demand between 0.5-8 GB, 10-1000 Mbps and 10-400% CPU."""
    for job in graph:
        job.set_resource_demand(
            memory=512 + rng.randrange(7680),
            network=10 + rng.randrange(990),
            cpu=10 + rng.randrange(390),
        )


def synthetic_history(rng: Random, count: int) -> list[JobHistoryRecord]:
    """Completed-job records whose actual runtimes deviate from the estimate.

    Roughly 10% are off by 3-5x and 20% by 1.5-3x; heavy memory or network
    demand inflates the actual time by half again.
    """
    records: list[JobHistoryRecord] = []
    for job_id in range(count):
        estimated = rng.randint(1, 20)
        if rng.random() < 0.1:
            error = 3.0 + rng.random() * 2.0
        elif rng.random() < 0.3:
            error = 1.5 + rng.random() * 1.5
        else:
            error = 0.8 + rng.random() * 0.4
        actual = max(1, round(estimated * error))
        priority = rng.randint(1, 10)
        io_bound = rng.random() < 0.3
        num_dependencies = rng.randrange(4)
        memory = 512 + rng.randrange(7680)
        network = 10 + rng.randrange(990)
        if memory > 4096 or network > 500:
            actual = int(actual * 1.5)
        records.append(
            JobHistoryRecord(
                job_id=job_id,
                estimated_time=estimated,
                actual_time=actual,
                priority=priority,
                io_bound=io_bound,
                num_dependencies=num_dependencies,
                memory_requirement=memory,
                network_requirement=network,
            )
        )
    return records

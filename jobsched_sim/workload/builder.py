"""Turn a validated scenario into a job graph and a processor list."""

from __future__ import annotations

from collections.abc import Iterable
from random import Random

from jobsched_sim.model import (
    GeneratorSpec,
    Job,
    JobGraph,
    JobSpec,
    Processor,
    ProcessorSpec,
    ResourceCapacity,
    ScenarioSpec,
)

from .generators import attach_resource_demands, generate_pattern


def graph_from_specs(job_specs: Iterable[JobSpec]) -> JobGraph:
    job_specs = list(job_specs)
    graph = JobGraph()
    for spec in job_specs:
        job = Job(
            id=spec.id,
            arrival_time=spec.arrival,
            execution_time=spec.execution_time,
            priority=spec.priority,
            io_bound=spec.io_bound,
            estimated_execution_time=spec.estimated_execution_time or spec.execution_time,
        )
        if spec.resources is not None:
            job.set_resource_demand(
                memory=spec.resources.memory,
                network=spec.resources.network,
                cpu=spec.resources.cpu,
            )
        graph.add_job(job)
    for spec in job_specs:
        for dep in spec.dependencies:
            graph.add_dependency(spec.id, dep.job, dep.type)
    return graph


def processors_from_specs(processor_specs: Iterable[ProcessorSpec]) -> list[Processor]:
    processors: list[Processor] = []
    for spec in sorted(processor_specs, key=lambda item: item.id):
        capacity = None
        if spec.capacity is not None:
            capacity = ResourceCapacity(
                total_memory=spec.capacity.memory,
                total_network=spec.capacity.network,
                total_cpu=spec.capacity.cpu,
            )
        processors.append(Processor(id=spec.id, speed_factor=spec.speed_factor, capacity=capacity))
    return processors


def graph_from_generator(spec: GeneratorSpec) -> JobGraph:
    rng = Random(spec.seed)
    kwargs: dict = {"min_exec": spec.min_execution_time, "max_exec": spec.max_execution_time}
    if spec.pattern.strip().lower() in {"random", "layered"}:
        kwargs.update(max_dependencies=spec.max_dependencies, dag_width=spec.dag_width)
    graph = generate_pattern(spec.pattern, rng, spec.count, **kwargs)
    if spec.with_resources:
        attach_resource_demands(graph, rng)
    return graph


def build_workload(spec: ScenarioSpec) -> tuple[JobGraph, list[Processor]]:
    if spec.generator is not None:
        graph = graph_from_generator(spec.generator)
    else:
        graph = graph_from_specs(spec.jobs)
    return graph, processors_from_specs(spec.processors)

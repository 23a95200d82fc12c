from __future__ import annotations

from random import Random

import pytest

from jobsched_sim.model import DependencyType, GeneratorSpec
from jobsched_sim.workload import (
    available_patterns,
    binary_tree,
    generate_pattern,
    graph_from_generator,
    independent,
    layered_dag,
    pipelines,
    random_processors,
    resource_processors,
    synthetic_history,
)


def test_patterns_are_reproducible_for_a_seed() -> None:
    for pattern in available_patterns():
        left = generate_pattern(pattern, Random(11), 12)
        right = generate_pattern(pattern, Random(11), 12)
        assert [j.execution_time for j in left] == [j.execution_time for j in right]
        assert [left.dependency_map(j.id) for j in left] == [right.dependency_map(j.id) for j in right]


def test_unknown_pattern_raises() -> None:
    with pytest.raises(ValueError, match="unknown workload pattern"):
        generate_pattern("spiral", Random(0), 5)


def test_diamond_needs_four_jobs() -> None:
    with pytest.raises(ValueError, match="at least 4"):
        generate_pattern("diamond", Random(0), 3)


def test_binary_tree_parent_links() -> None:
    graph = binary_tree(Random(0), 7)
    assert [d.id for d in graph.dependencies(6)] == [2]
    assert [d.id for d in graph.dependents(0)] == [1, 2]


def test_pipelines_are_independent_chains() -> None:
    graph = pipelines(Random(0), 12)
    assert [d.id for d in graph.dependencies(4)] == [3]
    assert graph.dependencies(5) == []
    assert graph.dependencies(11) == []
    assert [d.id for d in graph.dependencies(9)] == [8]


def test_layered_dag_links_only_to_previous_layer() -> None:
    graph = layered_dag(Random(4), 20, max_dependencies=3, dag_width=5)
    per_layer = 20 // 4
    for job in graph:
        layer = job.id // per_layer
        for prereq_id, dep_type in graph.dependency_map(job.id).items():
            assert prereq_id // per_layer == layer - 1
            assert isinstance(dep_type, DependencyType)


def test_independent_jobs_have_no_edges() -> None:
    graph = independent(Random(2), 10)
    assert all(graph.dependency_count(job.id) == 0 for job in graph)
    assert all(job.arrival_time < 5 for job in graph)


def test_generator_spec_with_resources() -> None:
    graph = graph_from_generator(GeneratorSpec(pattern="linear", count=5, with_resources=True, seed=3))
    assert len(graph) == 5
    assert all(job.resource_aware for job in graph)
    assert all(512 <= job.resources.memory < 8192 for job in graph if job.resources)


def test_processor_generators() -> None:
    plain = random_processors(Random(1), 4)
    assert all(0.8 <= p.speed_factor <= 1.2 for p in plain)
    tiers = resource_processors(7)
    assert [p.speed_factor for p in tiers] == [0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 0.5]
    assert tiers[2].capacity is not None
    assert tiers[2].capacity.total_memory == 16384


def test_synthetic_history_is_seeded() -> None:
    left = synthetic_history(Random(8), 50)
    right = synthetic_history(Random(8), 50)
    assert left == right
    assert all(record.actual_time >= 1 for record in left)
    assert len({record.job_id for record in left}) == 50

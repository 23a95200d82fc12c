from __future__ import annotations

from random import Random

import pytest

from jobsched_sim.model import Capability, DependencyType, Job, JobGraph
from jobsched_sim.schedulers import filter_ready
from jobsched_sim.workload import diamond, linear_chain


def _job(job_id: int, execution: int, *, arrival: int = 0, priority: int = 5) -> Job:
    return Job(id=job_id, arrival_time=arrival, execution_time=execution, priority=priority)


def test_job_defaults_estimate_and_remaining_to_execution_time() -> None:
    job = _job(0, 7)
    assert job.estimated_execution_time == 7
    assert job.remaining_time == 7
    assert job.start_time == -1
    assert job.completion_time == -1
    assert job.turnaround_time == -1
    assert job.capabilities == Capability.NONE


def test_set_estimate_clamps_to_one() -> None:
    job = _job(0, 5)
    job.set_estimate(0)
    assert job.estimated_execution_time == 1
    job.set_estimate(-4)
    assert job.estimated_execution_time == 1


def test_resource_demand_enables_both_capabilities() -> None:
    job = _job(0, 5)
    job.set_resource_demand(memory=2048, network=50, cpu=150)
    assert job.resource_aware
    assert job.tracks_dependencies


def test_diamond_exit_critical_path() -> None:
    graph = JobGraph([_job(0, 3), _job(1, 4), _job(2, 9), _job(3, 2), _job(4, 5)])
    for middle in (1, 2, 3):
        graph.add_dependency(middle, 0)
        graph.add_dependency(4, middle)

    assert graph.critical_path_length(4) == 3 + 9 + 5
    assert graph.critical_path_length(0) == 3
    assert graph.max_critical_path_length() == 17


def test_generated_diamond_matches_closed_form() -> None:
    graph = diamond(Random(3), 6)
    entry = graph.job(0).execution_time
    exit_exec = graph.job(5).execution_time
    longest_middle = max(graph.job(i).execution_time for i in range(1, 5))
    assert graph.critical_path_length(5) == entry + longest_middle + exit_exec


def test_linear_chain_critical_path_is_sum() -> None:
    graph = linear_chain(Random(1), 6, min_exec=3, max_exec=3)
    assert graph.critical_path_length(5) == 18
    assert graph.earliest_start_time(5) == 15
    assert all(graph.is_critical(job_id) for job_id in range(5))
    assert not graph.is_critical(5)


def test_critical_path_propagates_when_edge_added_late() -> None:
    graph = JobGraph([_job(0, 2), _job(1, 3), _job(2, 4)])
    graph.add_dependency(2, 1)
    assert graph.critical_path_length(2) == 7
    graph.add_dependency(1, 0)
    assert graph.critical_path_length(1) == 5
    assert graph.critical_path_length(2) == 9


def test_only_requires_edges_feed_critical_path() -> None:
    graph = JobGraph([_job(0, 10), _job(1, 2)])
    graph.add_dependency(1, 0, DependencyType.PREFERS)
    assert graph.critical_path_length(1) == 2
    assert graph.earliest_start_time(1) == 0


def test_earliest_start_uses_actual_completion_after_refresh() -> None:
    graph = JobGraph([_job(0, 4), _job(1, 2, arrival=1)])
    graph.add_dependency(1, 0)
    assert graph.earliest_start_time(1) == 4

    first = graph.job(0)
    first.start_time = 0
    first.completion_time = 7
    first.remaining_time = 0
    graph.refresh_dependents(0)
    assert graph.earliest_start_time(1) == 7


def test_self_dependency_rejected() -> None:
    graph = JobGraph([_job(0, 1)])
    with pytest.raises(ValueError, match="itself"):
        graph.add_dependency(0, 0)


def test_duplicate_job_rejected() -> None:
    graph = JobGraph([_job(0, 1)])
    with pytest.raises(ValueError, match="duplicate"):
        graph.add_job(_job(0, 2))


def test_priority_score_counts_dependents_path_and_preferred() -> None:
    graph = JobGraph([_job(0, 2, priority=3), _job(1, 4, priority=6), _job(2, 1, priority=1)])
    graph.add_dependency(1, 0)
    graph.add_dependency(1, 2, DependencyType.PREFERS)

    assert graph.priority_score(0, set()) == pytest.approx(3 + 0.1 * 1 + 0.2 * 2)
    assert graph.priority_score(1, set()) == pytest.approx(6 + 0.2 * 6)
    assert graph.priority_score(1, {2}) == pytest.approx(6 + 0.2 * 6 + 0.5)


def test_filter_ready_checks_arrival_requires_and_conflicts() -> None:
    graph = JobGraph(
        [
            _job(0, 2),
            _job(1, 2),
            _job(2, 2, arrival=5),
            _job(3, 2),
            _job(4, 2),
        ]
    )
    graph.add_dependency(1, 0)
    graph.add_dependency(3, 4, DependencyType.CONFLICTS_WITH)

    ready = filter_ready(graph, graph, 0, completed_ids=set(), running_ids={4})
    assert [job.id for job in ready] == [0, 4]

    ready = filter_ready(graph, graph, 0, completed_ids={0}, running_ids=set())
    assert [job.id for job in ready] == [0, 1, 3, 4]


def test_filter_ready_skips_dispatched_and_completed_jobs() -> None:
    graph = JobGraph([_job(0, 2), _job(1, 2), _job(2, 2)])
    graph.job(0).start_time = 0
    graph.job(1).remaining_time = 0
    ready = filter_ready(graph, graph, 3, completed_ids={1}, running_ids=set())
    assert [job.id for job in ready] == [2]


def test_graph_copy_is_independent_and_reset() -> None:
    graph = JobGraph([_job(0, 3), _job(1, 2)])
    graph.add_dependency(1, 0)
    source_job = graph.job(0)
    source_job.start_time = 0
    source_job.remaining_time = 0
    source_job.completion_time = 3

    clone = graph.copy()
    assert clone.job(0) is not source_job
    assert clone.job(0).completion_time == -1
    assert clone.job(0).remaining_time == 3
    assert clone.dependency_map(1) == {0: DependencyType.REQUIRES}
    assert graph.job(0).completion_time == 3


def test_sink_first_lattice_builds_quickly_and_correctly() -> None:
    layers, width = 40, 2

    def job_id(layer: int, offset: int) -> int:
        # Sinks get the lowest ids, so both jobs and edges arrive sink-first.
        return (layers - 1 - layer) * width + offset

    graph = JobGraph([_job(i, 1) for i in range(layers * width)])
    for layer in reversed(range(1, layers)):
        for offset in range(width):
            for prev in range(width):
                graph.add_dependency(job_id(layer, offset), job_id(layer - 1, prev))

    for layer in range(layers):
        for offset in range(width):
            assert graph.critical_path_length(job_id(layer, offset)) == layer + 1
            assert graph.earliest_start_time(job_id(layer, offset)) == layer
    assert graph.max_critical_path_length() == layers

    sink = job_id(layers - 1, 0)
    for job in graph:
        job.completion_time = 99
    for job in graph:
        graph.refresh_earliest_start(job.id)
    assert graph.earliest_start_time(sink) == 99

    clone = graph.copy()
    assert clone.earliest_start_time(sink) == layers - 1
    clone.recalculate_all()
    assert clone.critical_path_length(sink) == layers
    assert clone.earliest_start_time(sink) == layers - 1


def test_is_critical_compares_dependent_path_minus_own_execution() -> None:
    short_head = JobGraph([_job(0, 2), _job(1, 5)])
    short_head.add_dependency(1, 0)
    # cp(1) - exec(0) = 7 - 2 = 5, which differs from cp(0) = 2.
    assert not short_head.is_critical(0)

    even = JobGraph([_job(0, 3), _job(1, 3)])
    even.add_dependency(1, 0)
    assert even.is_critical(0)

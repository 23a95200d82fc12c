"""Index-based job dependency graph."""

from __future__ import annotations

from collections import deque
from copy import deepcopy
from collections.abc import Iterable, Iterator

from .job import Capability, DependencyType, Job


class JobGraph:
    """Slab of jobs plus typed dependency edges stored as index pairs.

    ``_edges[i]`` maps prerequisite slab index to edge type for job ``i``;
    ``_dependents[j]`` is the reverse relation used only for propagation.
    REQUIRES edges are assumed to form a DAG; cycles are not detected.
    """

    def __init__(self, jobs: Iterable[Job] = ()) -> None:
        self._jobs: list[Job] = []
        self._slot: dict[int, int] = {}
        self._edges: list[dict[int, DependencyType]] = []
        self._dependents: list[set[int]] = []
        self._critical_path: list[int] = []
        self._earliest_start: list[int] = []
        for job in jobs:
            self.add_job(job)

    def __iter__(self) -> Iterator[Job]:
        return iter(self._jobs)

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._slot

    @property
    def jobs(self) -> list[Job]:
        return list(self._jobs)

    def job(self, job_id: int) -> Job:
        return self._jobs[self._index(job_id)]

    def add_job(self, job: Job) -> Job:
        if job.id in self._slot:
            raise ValueError(f"duplicate job id {job.id}")
        self._slot[job.id] = len(self._jobs)
        self._jobs.append(job)
        self._edges.append({})
        self._dependents.append(set())
        self._critical_path.append(job.execution_time)
        self._earliest_start.append(job.arrival_time)
        return job

    def add_dependency(
        self,
        dependent_id: int,
        prerequisite_id: int,
        dep_type: DependencyType = DependencyType.REQUIRES,
    ) -> None:
        dependent = self._index(dependent_id)
        prerequisite = self._index(prerequisite_id)
        if dependent == prerequisite:
            raise ValueError(f"job {dependent_id} cannot depend on itself")
        self._edges[dependent][prerequisite] = DependencyType(dep_type)
        self._dependents[prerequisite].add(dependent)
        self._jobs[dependent].capabilities |= Capability.DEPENDENCIES
        self._jobs[prerequisite].capabilities |= Capability.DEPENDENCIES
        self._recalculate_from(dependent)

    def dependencies(self, job_id: int, dep_type: DependencyType | None = None) -> list[Job]:
        edges = self._edges[self._index(job_id)]
        return [
            self._jobs[idx]
            for idx in sorted(edges, key=lambda i: self._jobs[i].id)
            if dep_type is None or edges[idx] == dep_type
        ]

    def dependency_map(self, job_id: int) -> dict[int, DependencyType]:
        edges = self._edges[self._index(job_id)]
        return {self._jobs[idx].id: dep_type for idx, dep_type in edges.items()}

    def dependency_count(self, job_id: int) -> int:
        return len(self._edges[self._index(job_id)])

    def dependents(self, job_id: int) -> list[Job]:
        return sorted(
            (self._jobs[idx] for idx in self._dependents[self._index(job_id)]),
            key=lambda job: job.id,
        )

    def dependent_count(self, job_id: int) -> int:
        return len(self._dependents[self._index(job_id)])

    def critical_path_length(self, job_id: int) -> int:
        return self._critical_path[self._index(job_id)]

    def earliest_start_time(self, job_id: int) -> int:
        return self._earliest_start[self._index(job_id)]

    def max_critical_path_length(self) -> int:
        return max(self._critical_path, default=0)

    def requirements_met(self, job_id: int, completed_ids: set[int]) -> bool:
        edges = self._edges[self._index(job_id)]
        return all(
            self._jobs[idx].id in completed_ids
            for idx, dep_type in edges.items()
            if dep_type == DependencyType.REQUIRES
        )

    def has_conflicts(self, job_id: int, running_ids: set[int]) -> bool:
        edges = self._edges[self._index(job_id)]
        return any(
            self._jobs[idx].id in running_ids
            for idx, dep_type in edges.items()
            if dep_type == DependencyType.CONFLICTS_WITH
        )

    def satisfied_preferred(self, job_id: int, completed_ids: set[int]) -> int:
        edges = self._edges[self._index(job_id)]
        return sum(
            1
            for idx, dep_type in edges.items()
            if dep_type == DependencyType.PREFERS and self._jobs[idx].id in completed_ids
        )

    def is_critical(self, job_id: int) -> bool:
        """True when, for some dependent, its critical path length minus this
        job's execution time equals this job's critical path length.

        The comparison subtracts this job's own execution time, not the
        dependent's, so it only matches the longest-chain reading when the
        two execution times are equal.
        """
        idx = self._index(job_id)
        own_exec = self._jobs[idx].execution_time
        return any(
            self._critical_path[dep] - own_exec == self._critical_path[idx]
            for dep in self._dependents[idx]
        )

    def priority_score(self, job_id: int, completed_ids: set[int]) -> float:
        idx = self._index(job_id)
        return (
            self._jobs[idx].priority
            + 0.1 * len(self._dependents[idx])
            + 0.2 * self._critical_path[idx]
            + 0.5 * self.satisfied_preferred(job_id, completed_ids)
        )

    def refresh_earliest_start(self, job_id: int) -> int:
        idx = self._index(job_id)
        self._earliest_start[idx] = self._compute_earliest_start(idx)
        return self._earliest_start[idx]

    def refresh_dependents(self, job_id: int) -> None:
        for dep in self._dependents[self._index(job_id)]:
            self._earliest_start[dep] = self._compute_earliest_start(dep)

    def recalculate_all(self) -> None:
        for idx in self._topological(range(len(self._jobs)), force_starts=False):
            self._critical_path[idx] = self._compute_critical_path(idx)
            self._earliest_start[idx] = self._compute_earliest_start(idx)

    def copy(self, *, reset: bool = True) -> "JobGraph":
        """Deep copy for an independent simulation run."""
        clone = deepcopy(self)
        if reset:
            for job in clone._jobs:
                job.reset_state()
            for idx in clone._topological(range(len(clone._jobs)), force_starts=False):
                clone._earliest_start[idx] = clone._compute_earliest_start(idx)
        return clone

    def _index(self, job_id: int) -> int:
        try:
            return self._slot[job_id]
        except KeyError as exc:
            raise KeyError(f"unknown job id {job_id}") from exc

    def _compute_critical_path(self, idx: int) -> int:
        longest = 0
        for prereq, dep_type in self._edges[idx].items():
            if dep_type == DependencyType.REQUIRES:
                longest = max(longest, self._critical_path[prereq])
        return longest + self._jobs[idx].execution_time

    def _compute_earliest_start(self, idx: int) -> int:
        earliest = self._jobs[idx].arrival_time
        for prereq, dep_type in self._edges[idx].items():
            if dep_type != DependencyType.REQUIRES:
                continue
            prereq_job = self._jobs[prereq]
            if prereq_job.completion_time == -1:
                projected = self._earliest_start[prereq] + prereq_job.execution_time
            else:
                projected = prereq_job.completion_time
            earliest = max(earliest, projected)
        return earliest

    def _topological(self, starts: Iterable[int], *, force_starts: bool = True) -> list[int]:
        # Kahn order over everything reachable from ``starts``. Forced starts are
        # emitted first even when they sit on a cycle; other cycle members are dropped.
        starts = list(starts)
        reachable = set(starts)
        stack = list(starts)
        while stack:
            for dep in self._dependents[stack.pop()]:
                if dep not in reachable:
                    reachable.add(dep)
                    stack.append(dep)

        pending = {idx: sum(1 for prereq in self._edges[idx] if prereq in reachable) for idx in reachable}
        forced = set(starts) if force_starts else set()
        queue = deque(idx for idx in sorted(reachable) if idx in forced or pending[idx] == 0)
        order: list[int] = []
        while queue:
            idx = queue.popleft()
            order.append(idx)
            for dep in sorted(self._dependents[idx]):
                if dep in forced:
                    continue
                pending[dep] -= 1
                if pending[dep] == 0:
                    queue.append(dep)
        return order

    def _recalculate_from(self, start: int) -> None:
        for idx in self._topological([start]):
            self._critical_path[idx] = self._compute_critical_path(idx)
            self._earliest_start[idx] = self._compute_earliest_start(idx)

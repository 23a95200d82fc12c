"""Runtime predictor abstractions and the history record they learn from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

from jobsched_sim.model import Job


HISTORY_FIELDS: tuple[str, ...] = (
    "JobId",
    "EstimatedTime",
    "ActualTime",
    "Priority",
    "IsIOBound",
    "NumDependencies",
    "MemoryReq",
    "NetworkReq",
)


@dataclass(frozen=True, slots=True)
class JobHistoryRecord:
    """Immutable snapshot of one completed job and its observed runtime."""

    job_id: int
    estimated_time: int
    actual_time: int
    priority: int
    io_bound: bool
    num_dependencies: int
    memory_requirement: int
    network_requirement: int

    @classmethod
    def from_job(cls, job: Job, *, num_dependencies: int = 0) -> Optional["JobHistoryRecord"]:
        if job.completion_time == -1 or job.start_time == -1:
            return None
        demand = job.resources
        return cls(
            job_id=job.id,
            estimated_time=job.estimated_execution_time,
            actual_time=job.completion_time - job.start_time,
            priority=job.priority,
            io_bound=job.io_bound,
            num_dependencies=num_dependencies,
            memory_requirement=demand.memory if demand else 0,
            network_requirement=demand.network if demand else 0,
        )

    def to_row(self) -> list[Any]:
        return [
            self.job_id,
            self.estimated_time,
            self.actual_time,
            self.priority,
            "true" if self.io_bound else "false",
            self.num_dependencies,
            self.memory_requirement,
            self.network_requirement,
        ]


class IRuntimePredictor(ABC):
    """Execution-time prediction plugin used by the integrated pipeline."""

    @abstractmethod
    def predict(self, job: Job, *, num_dependencies: int = 0) -> int:
        """Predict the execution time of ``job``."""

    @abstractmethod
    def record(self, record: JobHistoryRecord) -> None:
        """Add one completed-job observation."""

    @property
    @abstractmethod
    def history_size(self) -> int:
        """Number of observations seen so far."""

    def record_completion(self, job: Job, *, num_dependencies: int = 0) -> bool:
        record = JobHistoryRecord.from_job(job, num_dependencies=num_dependencies)
        if record is None:
            return False
        self.record(record)
        return True

    def add_history(self, records: Iterable[JobHistoryRecord]) -> int:
        count = 0
        for record in records:
            self.record(record)
            count += 1
        return count

    def accuracy_report(self) -> dict:
        return {"status": "unsupported", "records": self.history_size}

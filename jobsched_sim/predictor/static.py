"""Static-estimate predictor."""

from __future__ import annotations

from jobsched_sim.model import Job

from .base import IRuntimePredictor, JobHistoryRecord


class StaticEstimatePredictor(IRuntimePredictor):
    """Always answer with the job's own estimate; history is only counted."""

    def __init__(self) -> None:
        self._records: list[JobHistoryRecord] = []

    @property
    def history_size(self) -> int:
        return len(self._records)

    def predict(self, job: Job, *, num_dependencies: int = 0) -> int:  # noqa: ARG002
        return job.estimated_execution_time

    def record(self, record: JobHistoryRecord) -> None:
        self._records.append(record)

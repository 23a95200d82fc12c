"""Quantum-based round-robin scheduler."""

from __future__ import annotations

from collections import deque
import logging

from jobsched_sim.model import Job, Processor

from .base import Algorithm, IScheduler, ScheduleContext


logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2


class RoundRobinScheduler(IScheduler):
    """FIFO queue; each dispatch runs at most ``quantum`` units of work.

    The queue is updated on every tick. A job whose slice ended unfinished
    goes to the back of the queue, behind jobs that became ready on the same
    tick.
    """

    algorithm = Algorithm.ROUND_ROBIN
    display_name = "Round Robin"

    def __init__(self, params: dict | None = None) -> None:
        super().__init__(params=params)
        self.quantum = int(self.params.get("quantum", DEFAULT_QUANTUM))
        if self.quantum < 1:
            raise ValueError("round_robin quantum must be >= 1")
        self._queue: deque[Job] = deque()
        self._in_flight: dict[int, tuple[Job, Processor]] = {}

    @property
    def queued_ids(self) -> list[int]:
        return [job.id for job in self._queue]

    def reset(self) -> None:
        super().reset()
        self._queue.clear()
        self._in_flight.clear()

    def should_assign(self, ready: list[Job], idle: list[Processor]) -> bool:  # noqa: ARG002
        return True

    def assign(self, ready: list[Job], idle: list[Processor], ctx: ScheduleContext) -> None:
        self._enqueue(ready)
        self._collect_finished_slices()
        self._dispatch_from_queue(idle, ctx)

    def _enqueue(self, ready: list[Job]) -> None:
        known = {job.id for job in self._queue} | set(self._in_flight)
        for job in ready:
            if job.id not in known:
                self._queue.append(job)
                known.add(job.id)

    def _collect_finished_slices(self) -> None:
        ended = [
            (job, processor)
            for job, processor in self._in_flight.values()
            if processor.current_job is not job
        ]
        ended.sort(key=lambda item: (item[1].busy_until, item[1].id))
        for job, _processor in ended:
            del self._in_flight[job.id]
            if not job.completed:
                logger.debug("job %s re-queued with %s units remaining", job.id, job.remaining_time)
                self._queue.append(job)

    def _dispatch_from_queue(self, idle: list[Processor], ctx: ScheduleContext) -> None:
        free = list(idle)
        blocked: list[Job] = []
        while free and self._queue:
            job = self._queue.popleft()
            if ctx.graph.has_conflicts(job.id, ctx.running_ids):
                blocked.append(job)
                continue
            processor = free.pop(0)
            ctx.dispatch(job, processor, quantum=self.quantum)
            self._in_flight[job.id] = (job, processor)
        self._queue.extendleft(reversed(blocked))

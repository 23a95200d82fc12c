"""In-process publish/subscribe for simulation events."""

from __future__ import annotations

from random import Random
from typing import Callable
import uuid

from .types import EventType, SimEvent


EventHandler = Callable[[SimEvent], None]


class EventBus:
    """Stamp each event with a sequence number and an id, then fan it out.

    Handlers run synchronously in subscription order. Id modes:
    ``deterministic`` gives ``evt-00000000`` style ids derived from the
    sequence number, ``seeded_random`` gives 128-bit hex ids replayable from
    ``event_id_seed`` and ``random`` gives uuid4 strings.
    """

    VALID_EVENT_ID_MODES = frozenset({"deterministic", "random", "seeded_random"})

    def __init__(
        self,
        *,
        event_id_mode: str = "deterministic",
        event_id_seed: int | None = None,
    ) -> None:
        mode = event_id_mode.strip().lower()
        if mode not in self.VALID_EVENT_ID_MODES:
            raise ValueError(f"unknown event_id_mode {event_id_mode}")
        self.event_id_mode = mode
        self._seed = event_id_seed
        self._rng = Random(event_id_seed)
        self._subscribers: list[EventHandler] = []
        self._next_seq = 0

    @property
    def published(self) -> int:
        return self._next_seq

    def subscribe(self, handler: EventHandler) -> None:
        self._subscribers.append(handler)

    def publish(
        self,
        *,
        event_type: EventType,
        time: int,
        correlation_id: str,
        job_id: int | None = None,
        processor_id: int | None = None,
        payload: dict | None = None,
    ) -> SimEvent:
        seq = self._next_seq
        self._next_seq += 1
        event = SimEvent(
            event_id=self._event_id(seq),
            seq=seq,
            correlation_id=correlation_id,
            time=time,
            type=event_type,
            job_id=job_id,
            processor_id=processor_id,
            payload=payload or {},
        )
        for handler in tuple(self._subscribers):
            handler(event)
        return event

    def reset(self) -> None:
        """Drop subscribers and restart numbering and the id generator."""
        self._next_seq = 0
        self._subscribers.clear()
        self._rng.seed(self._seed)

    def _event_id(self, seq: int) -> str:
        if self.event_id_mode == "deterministic":
            return f"evt-{seq:08d}"
        if self.event_id_mode == "seeded_random":
            return f"{self._rng.getrandbits(128):032x}"
        return str(uuid.uuid4())

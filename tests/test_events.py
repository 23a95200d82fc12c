from __future__ import annotations

import json

from jobsched_sim.events import EventBus, EventType
from jobsched_sim.metrics import DispatchMetrics


def test_deterministic_ids_and_sequence() -> None:
    bus = EventBus()
    seen = []
    bus.subscribe(seen.append)
    first = bus.publish(event_type=EventType.JOB_ARRIVED, time=0, correlation_id="job-1", job_id=1)
    second = bus.publish(event_type=EventType.JOB_DISPATCHED, time=0, correlation_id="job-1", job_id=1)
    assert [first.event_id, second.event_id] == ["evt-00000000", "evt-00000001"]
    assert [event.seq for event in seen] == [0, 1]
    assert json.loads(second.to_json())["type"] == "JobDispatched"


def test_seeded_random_ids_repeat_for_same_seed() -> None:
    left = EventBus(event_id_mode="seeded_random", event_id_seed=5)
    right = EventBus(event_id_mode="seeded_random", event_id_seed=5)
    ids_left = [left.publish(event_type=EventType.JOB_ARRIVED, time=0, correlation_id="engine").event_id for _ in range(3)]
    ids_right = [right.publish(event_type=EventType.JOB_ARRIVED, time=0, correlation_id="engine").event_id for _ in range(3)]
    assert ids_left == ids_right
    assert len(set(ids_left)) == 3


def test_dispatch_metrics_counts_events() -> None:
    bus = EventBus()
    metric = DispatchMetrics()
    bus.subscribe(metric.consume)
    bus.publish(event_type=EventType.JOB_ARRIVED, time=0, correlation_id="job-0", job_id=0)
    bus.publish(
        event_type=EventType.JOB_DISPATCHED,
        time=1,
        correlation_id="job-0",
        job_id=0,
        processor_id=2,
        payload={"busy_until": 4, "constrained": True},
    )
    bus.publish(
        event_type=EventType.RESOURCE_CONSTRAINED,
        time=1,
        correlation_id="job-0",
        job_id=0,
        processor_id=2,
        payload={"resources": ["cpu", "network"], "factor": 2.6},
    )
    bus.publish(event_type=EventType.JOB_COMPLETED, time=4, correlation_id="job-0", job_id=0, processor_id=2)

    report = metric.report()
    assert report["jobs_arrived"] == 1
    assert report["dispatch_count"] == 1
    assert report["completion_count"] == 1
    assert report["processor_busy_time"] == {2: 3}
    assert report["constrained_by_resource"] == {"cpu": 1, "network": 1}
    assert report["max_time"] == 4
    assert report["event_count"] == 4

    metric.reset()
    assert metric.report()["event_count"] == 0

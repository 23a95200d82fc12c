from __future__ import annotations

from jobsched_sim.analysis import build_audit_report


def _dispatch(event_id: str, time: int, job_id: int, processor_id: int, busy_until: int) -> dict:
    return {
        "event_id": event_id,
        "type": "JobDispatched",
        "time": time,
        "job_id": job_id,
        "processor_id": processor_id,
        "payload": {"busy_until": busy_until, "constrained": False},
    }


def _complete(event_id: str, time: int, job_id: int, processor_id: int) -> dict:
    return {
        "event_id": event_id,
        "type": "JobCompleted",
        "time": time,
        "job_id": job_id,
        "processor_id": processor_id,
        "payload": {},
    }


def test_audit_passes_for_sequential_dispatches() -> None:
    events = [
        _dispatch("e1", 0, 0, 0, 3),
        _complete("e2", 3, 0, 0),
        _dispatch("e3", 3, 1, 0, 5),
        _complete("e4", 5, 1, 0),
    ]
    report = build_audit_report(events, requires={1: [0]})
    assert report["status"] == "pass"
    assert report["checks"]["issue_count"] == 0
    assert report["checks"]["jobs_completed"] == 2


def test_audit_detects_busy_processor_dispatch() -> None:
    events = [
        _dispatch("e1", 0, 0, 0, 4),
        _dispatch("e2", 2, 1, 0, 6),
    ]
    report = build_audit_report(events)
    assert report["status"] == "fail"
    assert [issue["rule"] for issue in report["issues"]] == ["processor_exclusive"]
    assert report["issues"][0]["event_id"] == "e2"


def test_audit_detects_requires_violation() -> None:
    events = [
        _dispatch("e1", 0, 0, 0, 3),
        _dispatch("e2", 0, 1, 1, 2),
    ]
    report = build_audit_report(events, requires={1: [0]})
    assert report["status"] == "fail"
    assert report["issues"][0]["rule"] == "requires_order"


def test_audit_detects_double_dispatch_and_orphan_completion() -> None:
    events = [
        _dispatch("e1", 0, 0, 0, 3),
        _dispatch("e2", 0, 0, 1, 3),
        _complete("e3", 4, 7, 1),
    ]
    report = build_audit_report(events)
    rules = [issue["rule"] for issue in report["issues"]]
    assert rules == ["single_dispatch", "completion_after_dispatch"]


def test_audit_allows_redispatch_after_preemption() -> None:
    events = [
        _dispatch("e1", 0, 0, 0, 2),
        {"event_id": "e2", "type": "JobPreempted", "time": 2, "job_id": 0, "processor_id": 0, "payload": {}},
        _dispatch("e3", 2, 0, 0, 3),
        _complete("e4", 3, 0, 0),
    ]
    assert build_audit_report(events)["status"] == "pass"

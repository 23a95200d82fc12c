"""Post-simulation audit checks over the event stream."""

from __future__ import annotations

from typing import Any


def _issue(rule: str, message: str, event: dict[str, Any]) -> dict[str, Any]:
    return {
        "rule": rule,
        "severity": "error",
        "message": message,
        "event_id": event.get("event_id"),
        "time": event.get("time"),
        "job_id": event.get("job_id"),
        "processor_id": event.get("processor_id"),
    }


def build_audit_report(
    events: list[dict[str, Any]],
    *,
    requires: dict[int, list[int]] | None = None,
) -> dict[str, Any]:
    """Check dispatch/completion consistency of one run.

    ``requires`` maps a job id to its REQUIRES prerequisites; when given,
    dispatching a job before all of them completed is reported.
    """
    issues: list[dict[str, Any]] = []
    processor_busy_until: dict[int, int] = {}
    running: set[int] = set()
    dispatched_once: set[int] = set()
    completed: set[int] = set()
    dispatches = 0

    for event in events:
        event_type = event.get("type")
        job_id = event.get("job_id")
        processor_id = event.get("processor_id")
        time = int(event.get("time", 0))

        if event_type == "JobDispatched":
            dispatches += 1
            if processor_id is not None and time < processor_busy_until.get(processor_id, 0):
                issues.append(_issue("processor_exclusive", "processor dispatched while busy", event))
            busy_until = event.get("payload", {}).get("busy_until")
            if processor_id is not None and isinstance(busy_until, int):
                processor_busy_until[processor_id] = busy_until
            if job_id in running:
                issues.append(_issue("single_dispatch", "job dispatched while already running", event))
            if job_id in completed:
                issues.append(_issue("single_dispatch", "completed job dispatched again", event))
            if requires and job_id in requires:
                missing = [dep for dep in requires[job_id] if dep not in completed]
                if missing:
                    issues.append(
                        _issue("requires_order", f"dispatched before prerequisites {missing} completed", event)
                    )
            if job_id is not None:
                running.add(job_id)
                dispatched_once.add(job_id)

        elif event_type == "JobPreempted":
            running.discard(job_id)

        elif event_type == "JobCompleted":
            if job_id not in dispatched_once:
                issues.append(_issue("completion_after_dispatch", "job completed without dispatch", event))
            running.discard(job_id)
            if job_id is not None:
                completed.add(job_id)

    return {
        "status": "pass" if not issues else "fail",
        "issues": issues,
        "checks": {
            "dispatch_count": dispatches,
            "jobs_dispatched": len(dispatched_once),
            "jobs_completed": len(completed),
            "issue_count": len(issues),
        },
    }

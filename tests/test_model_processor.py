from __future__ import annotations

import pytest

from jobsched_sim.model import Job, Processor, ResourceCapacity


def _resource_job(job_id: int, execution: int, *, memory: int, network: int, cpu: int) -> Job:
    job = Job(id=job_id, arrival_time=0, execution_time=execution, priority=5)
    job.set_resource_demand(memory=memory, network=network, cpu=cpu)
    return job


def _capacity_processor(memory: int = 4096, network: int = 1000, cpu: int = 200) -> Processor:
    return Processor(
        id=0,
        speed_factor=1.0,
        capacity=ResourceCapacity(total_memory=memory, total_network=network, total_cpu=cpu),
    )


def test_processing_time_rounds_up_by_speed() -> None:
    processor = Processor(id=0, speed_factor=1.5)
    job = Job(id=0, arrival_time=0, execution_time=5, priority=1, estimated_execution_time=4)
    assert processor.processing_time(job) == 4
    assert processor.estimate_processing_time(job) == 3


def test_assign_and_complete_plain_job() -> None:
    processor = Processor(id=0, speed_factor=2.0)
    job = Job(id=0, arrival_time=0, execution_time=5, priority=1)

    busy_until = processor.assign_job(job, 3)
    assert busy_until == 6
    assert job.start_time == 3
    assert processor.is_busy(5)
    assert not processor.is_busy(6)

    finished = processor.complete_job(6)
    assert finished is job
    assert job.completed
    assert job.completion_time == 6
    assert processor.current_job is None
    assert processor.total_busy_time == 3


def test_assign_to_busy_processor_raises() -> None:
    processor = Processor(id=0)
    processor.assign_job(Job(id=0, arrival_time=0, execution_time=4, priority=1), 0)
    with pytest.raises(RuntimeError, match="busy"):
        processor.assign_job(Job(id=1, arrival_time=0, execution_time=1, priority=1), 2)


def test_ledger_is_conserved_for_unconstrained_job() -> None:
    processor = _capacity_processor()
    cap = processor.capacity
    assert cap is not None
    before = (cap.available_memory, cap.available_network, cap.available_cpu)
    job = _resource_job(0, 3, memory=1024, network=100, cpu=100)

    processor.assign_job(job, 0)
    assert (cap.available_memory, cap.available_network, cap.available_cpu) == (3072, 900, 100)
    assert not job.constraints.any

    processor.complete_job(3)
    assert (cap.available_memory, cap.available_network, cap.available_cpu) == before


def test_over_subscription_degrades_instead_of_rejecting() -> None:
    processor = _capacity_processor(memory=4096, network=1000, cpu=200)
    cap = processor.capacity
    assert cap is not None
    job = _resource_job(0, 4, memory=8192, network=100, cpu=100)

    busy_until = processor.assign_job(job, 0)
    assert job.constraints.memory
    assert not job.constraints.network
    assert not job.constraints.cpu
    assert job.constraints.factor == pytest.approx(1.5)
    assert busy_until == 6
    assert cap.available_memory == 4096

    processor.complete_job(6)
    assert job.completed
    assert cap.available_memory == 4096


def test_all_constraints_multiply() -> None:
    processor = _capacity_processor(memory=512, network=50, cpu=50)
    job = _resource_job(0, 2, memory=1024, network=100, cpu=100)
    busy_until = processor.assign_job(job, 0)
    assert job.constraints.factor == pytest.approx(1.5 * 1.3 * 2.0)
    assert busy_until == 8


def test_can_accommodate_ignores_plain_jobs_and_processors() -> None:
    plain_job = Job(id=0, arrival_time=0, execution_time=1, priority=1)
    assert _capacity_processor(memory=1).can_accommodate(plain_job)
    heavy = _resource_job(1, 1, memory=999_999, network=1, cpu=1)
    assert Processor(id=1).can_accommodate(heavy)
    assert not _capacity_processor().can_accommodate(heavy)


def test_quantum_slice_leaves_remaining_work() -> None:
    processor = Processor(id=0)
    job = Job(id=0, arrival_time=0, execution_time=5, priority=1)
    assert processor.assign_job(job, 0, quantum=2) == 2
    processor.complete_job(2)
    assert job.remaining_time == 3
    assert not job.completed
    assert job.start_time == 0
    assert job.completion_time == -1


def test_average_utilization_tracks_history() -> None:
    processor = _capacity_processor(memory=4096, network=1000, cpu=200)
    job = _resource_job(0, 2, memory=2048, network=500, cpu=100)
    processor.assign_job(job, 0)
    processor.complete_job(2)
    usage = processor.average_utilization()
    # Snapshots: initial, after assign, after complete.
    assert usage.memory == pytest.approx(2048 / 3 / 4096)
    assert usage.cpu == pytest.approx(100 / 3 / 200)
    assert Processor(id=1).average_utilization().overall == 0.0

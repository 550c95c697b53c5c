"""Tests for the round-robin dispatch loop.

Every test drives the dispatcher with SimulatedLifecycle and a zero tick
length, so schedules are deterministic and nothing sleeps.
"""

from collections import deque

import pytest

from core.errors import JobNotFoundError, SpawnError
from core.job import FinishReason, JobState
from core.lifecycle import SimulatedLifecycle
from core.scheduler_base import EventType
from schedulers.round_robin import RoundRobinDispatcher
from utils.input_parser import InputParser

from conftest import make_jobs, simulated_dispatcher


class TestCanonicalSchedule:
    """Five jobs arriving one tick apart with services 5,4,3,2,1."""

    def test_gantt_sequence(self, canonical_jobs):
        result = simulated_dispatcher(canonical_jobs).run()
        assert result['sequence'] == [1, 1, 2, 1, 3, 2, 4, 1, 5, 3, 2, 4, 1, 3, 2]

    def test_completion_times(self, canonical_jobs):
        result = simulated_dispatcher(canonical_jobs).run()
        completions = {s.job_id: s.completion_time for s in result['job_statistics']}
        assert completions == {1: 13, 2: 15, 3: 14, 4: 12, 5: 9}

    def test_turnaround_and_waiting(self, canonical_jobs):
        result = simulated_dispatcher(canonical_jobs).run()
        turnaround = {s.job_id: s.turnaround_time for s in result['job_statistics']}
        waiting = {s.job_id: s.waiting_time for s in result['job_statistics']}
        assert turnaround == {1: 13, 2: 14, 3: 12, 4: 9, 5: 5}
        assert waiting == {1: 8, 2: 10, 3: 9, 4: 7, 5: 4}

    def test_averages(self, canonical_jobs):
        stats = simulated_dispatcher(canonical_jobs).run()['statistics']
        assert stats['avg_waiting_time'] == pytest.approx(7.6)
        assert stats['avg_turnaround_time'] == pytest.approx(10.6)
        assert stats['avg_response_time'] == pytest.approx(2.0)
        assert stats['cpu_utilization'] == pytest.approx(100.0)
        assert stats['context_switches'] == 13
        assert stats['total_time'] == 15

    def test_lifecycle_actions_for_first_ticks(self, canonical_jobs):
        dispatcher = simulated_dispatcher(canonical_jobs)
        dispatcher.run()
        assert dispatcher.lifecycle.actions[:5] == [
            ("start", 1),
            ("suspend", 1),
            ("start", 2),
            ("suspend", 2),
            ("resume", 1),
        ]
        assert dispatcher.lifecycle.live_handles() == []

    def test_input_jobs_are_not_mutated(self, canonical_jobs):
        simulated_dispatcher(canonical_jobs).run()
        assert all(j.state == JobState.NOT_STARTED for j in canonical_jobs)
        assert [j.remaining for j in canonical_jobs] == [5, 4, 3, 2, 1]


class TestSmallScenarios:

    def test_single_job_runs_uncontended(self):
        dispatcher = simulated_dispatcher(make_jobs((0, 1, 3)))
        result = dispatcher.run()
        assert result['sequence'] == [1, 1, 1]
        assert result['job_statistics'][0].waiting_time == 0
        assert result['job_statistics'][0].completion_time == 3
        assert dispatcher.lifecycle.actions == [("start", 1), ("terminate", 1)]

    def test_two_jobs_same_arrival_keep_load_order(self):
        result = simulated_dispatcher(make_jobs((0, 1, 2), (0, 2, 1))).run()
        assert result['sequence'] == [1, 2, 1]
        completions = {s.job_id: s.completion_time for s in result['job_statistics']}
        assert completions == {1: 3, 2: 2}

    def test_last_quantum_finishes_even_with_waiters(self):
        dispatcher = simulated_dispatcher(make_jobs((0, 1, 2), (0, 2, 3)))
        result = dispatcher.run()
        assert result['sequence'] == [1, 2, 1, 2, 2]
        # J1 is preempted once, then finishes at tick 3 although J2 is waiting
        assert dispatcher.lifecycle.actions.count(("suspend", 1)) == 1
        completions = {s.job_id: s.completion_time for s in result['job_statistics']}
        assert completions == {1: 3, 2: 5}

    def test_preempted_job_queues_ahead_of_next_tick_arrival(self):
        # J1 is preempted at the end of tick 0, J3 is admitted at tick 1
        result = simulated_dispatcher(make_jobs((0, 1, 2), (0, 2, 2), (1, 3, 1))).run()
        assert result['sequence'] == [1, 2, 1, 3, 2]

    def test_arrival_does_not_preempt_quantum_already_started(self):
        dispatcher = simulated_dispatcher(make_jobs((0, 1, 3), (1, 2, 1)))
        result = dispatcher.run()
        assert result['sequence'] == [1, 1, 2, 1]
        assert dispatcher.lifecycle.actions[:3] == [("start", 1), ("suspend", 1), ("start", 2)]
        completions = {s.job_id: s.completion_time for s in result['job_statistics']}
        assert completions == {1: 4, 2: 3}

    def test_arrival_during_quantum_waits_for_quantum_end(self, canonical_jobs):
        dispatcher = simulated_dispatcher(canonical_jobs)
        dispatcher.execute_one_step()
        # J2 arrives at tick 1; J1 had no contender when its first quantum ended
        assert dispatcher.running_job.id == 1
        assert dispatcher.ready_queue == deque()
        dispatcher.execute_one_step()
        assert [j.id for j in dispatcher.ready_queue] == [2, 1]
        assert dispatcher.running_job is None

    def test_idle_ticks_before_first_arrival(self):
        result = simulated_dispatcher(make_jobs((2, 1, 1))).run()
        assert result['sequence'] == [None, None, 1]
        stats = result['job_statistics'][0]
        assert stats.completion_time == 3
        assert stats.turnaround_time == 1
        assert stats.waiting_time == 0
        assert result['statistics']['cpu_utilization'] == pytest.approx(100 / 3)

    def test_idle_gap_between_jobs(self):
        result = simulated_dispatcher(make_jobs((0, 1, 1), (3, 2, 1))).run()
        assert result['sequence'] == [1, None, None, 2]

    def test_non_contiguous_job_ids(self):
        result = simulated_dispatcher(make_jobs((0, 42, 1), (0, 7, 1))).run()
        assert result['sequence'] == [42, 7]

    def test_empty_job_list(self):
        result = simulated_dispatcher([]).run()
        assert result['sequence'] == []
        assert result['statistics']['total_time'] == 0

    def test_unsorted_input_is_stably_sorted_by_arrival(self):
        dispatcher = simulated_dispatcher(make_jobs((2, 3, 1), (0, 1, 1), (0, 2, 1)))
        assert [j.id for j in dispatcher.arrival_queue] == [1, 2, 3]


class TestAdmission:

    def test_admit_moves_due_jobs_in_arrival_order(self, canonical_jobs):
        dispatcher = simulated_dispatcher(canonical_jobs)
        assert dispatcher.admit(2) == 3
        assert [j.id for j in dispatcher.ready_queue] == [1, 2, 3]
        assert [j.id for j in dispatcher.arrival_queue] == [4, 5]

    def test_admit_is_idempotent_per_tick(self, canonical_jobs):
        dispatcher = simulated_dispatcher(canonical_jobs)
        dispatcher.admit(1)
        before = list(dispatcher.ready_queue)
        assert dispatcher.admit(1) == 0
        assert list(dispatcher.ready_queue) == before

    def test_admit_logs_arrival_without_gantt_entry(self, canonical_jobs):
        dispatcher = simulated_dispatcher(canonical_jobs)
        dispatcher.admit(0)
        assert dispatcher.events[-1].event_type == EventType.ARRIVAL
        assert dispatcher.events[-1].job_id == 1
        assert dispatcher.recorder.gantt_chart == []


class TestInvariants:

    @pytest.mark.parametrize("seed", [1, 2, 3, 7, 11, 42])
    def test_random_workloads(self, seed):
        jobs = InputParser.generate_random_jobs(num_jobs=6, max_arrival=8, max_service=4, seed=seed)
        dispatcher = simulated_dispatcher(jobs)

        while not dispatcher.execute_one_step():
            running = [j for j in dispatcher.jobs if j.state == JobState.RUNNING]
            assert len(running) <= 1

        sequence = dispatcher.recorder.sequence()
        assert sequence[-1] is not None
        for job in jobs:
            assert sequence.count(job.id) == job.total_service

        for s in dispatcher.recorder.job_statistics():
            assert s.waiting_time >= 0
            assert s.turnaround_time == s.waiting_time + s.total_service

    def test_remaining_never_increases(self, canonical_jobs):
        dispatcher = simulated_dispatcher(canonical_jobs)
        previous = {j.id: j.remaining for j in dispatcher.jobs}
        while not dispatcher.execute_one_step():
            for job in dispatcher.jobs:
                assert job.remaining <= previous[job.id]
                previous[job.id] = job.remaining
        assert all(j.remaining == 0 for j in dispatcher.jobs)


class TestLifecycleFailures:

    def test_worker_exiting_early_counts_as_completion(self):
        dispatcher = simulated_dispatcher(make_jobs((0, 1, 3), (0, 2, 1)), early_exits={1: 1})
        result = dispatcher.run()
        assert result['sequence'] == [1, 2]
        job = next(j for j in dispatcher.jobs if j.id == 1)
        assert job.finish_reason == FinishReason.EXITED_EARLY
        assert job.finish_time == 1
        assert job.remaining == 0
        assert job.waiting_time == 0

    def test_vanished_worker_on_resume_is_terminated(self):
        dispatcher = simulated_dispatcher(make_jobs((0, 1, 2), (0, 2, 2)))
        dispatcher.execute_one_step()
        dispatcher.execute_one_step()
        dispatcher.lifecycle.vanish(1)
        while not dispatcher.execute_one_step():
            pass

        # the cell stays empty for the tick in which the resume failed
        assert dispatcher.recorder.sequence() == [1, 2, None, 2]
        job = next(j for j in dispatcher.jobs if j.id == 1)
        assert job.state == JobState.TERMINATED
        assert job.finish_reason == FinishReason.LOST
        assert job.finish_time == 2
        assert job.waiting_time == 1

    def test_vanished_worker_on_suspend_is_not_requeued(self):
        class NoPollLifecycle(SimulatedLifecycle):
            def has_exited(self, handle):
                return False

        dispatcher = RoundRobinDispatcher(make_jobs((0, 1, 3), (1, 2, 1)),
                                          NoPollLifecycle(), tick_seconds=0.0)
        dispatcher.execute_one_step()
        dispatcher.lifecycle.vanish(1)
        result = dispatcher.run()

        assert result['sequence'] == [1, 1, 2]
        job = next(j for j in dispatcher.jobs if j.id == 1)
        assert job.finish_reason == FinishReason.LOST
        assert job.finish_time == 2
        assert job not in dispatcher.ready_queue

    def test_spawn_error_aborts_and_stops_live_workers(self):
        dispatcher = simulated_dispatcher(make_jobs((0, 1, 3), (1, 2, 1)), spawn_failures=[2])
        with pytest.raises(SpawnError) as excinfo:
            dispatcher.run()
        assert excinfo.value.job_id == 2
        assert dispatcher.lifecycle.live_handles() == []
        assert ("terminate", 1) in dispatcher.lifecycle.actions

    def test_simulated_resume_of_exited_handle_raises(self):
        lifecycle = SimulatedLifecycle()
        handle = lifecycle.start(make_jobs((0, 1, 1))[0])
        lifecycle.terminate(handle)
        with pytest.raises(JobNotFoundError):
            lifecycle.resume(handle)

    def test_timeout_guard_stops_runaway_loop(self):
        dispatcher = RoundRobinDispatcher(make_jobs((0, 1, 50)), SimulatedLifecycle(),
                                          tick_seconds=0.0, max_ticks=5)
        result = dispatcher.run()
        assert len(result['gantt_chart']) == 5
        assert dispatcher.events[-1].event_type == EventType.TIMEOUT
        assert dispatcher.lifecycle.live_handles() == []
        assert dispatcher.execute_one_step() is True

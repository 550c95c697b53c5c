"""
Round Robin 디스패처 (퀀텀 = 1)
각 작업은 실제 프로세스(또는 가짜 핸들)에 대응되며,
다른 작업이 대기 중이면 매 퀀텀마다 선점된다.
"""

from typing import List, Optional

from core.errors import JobNotFoundError
from core.job import Job, JobState, FinishReason
from core.lifecycle import LifecycleController, ProcessLifecycle
from core.scheduler_base import BaseDispatcher, EventType, QUANTUM, TICK_SECONDS, MAX_TICKS


class RoundRobinDispatcher(BaseDispatcher):
    """
    Round Robin 디스패처

    tick t마다 순서가 고정됨:
    1. 도착 처리 (도착 시간 ≤ t)
    2. 디스패치 셀이 비었으면 준비 큐 맨 앞 작업 시작 또는 재개
    3. 모든 큐와 셀이 비었으면 종료 (마지막 유휴 tick은 기록하지 않음)
    4. Gantt 기록 후 한 퀀텀 실행
    5. 퀀텀이 끝난 시점(t+1)에 차감 → 종료 / 조기 종료 / 선점 / 계속

    선점 판단은 t까지 도착한 작업만 보므로, 퀀텀 도중 도착한 작업이
    이미 시작된 퀀텀을 소급해서 빼앗지 않는다.
    """

    def __init__(self, jobs: List[Job], lifecycle: Optional[LifecycleController] = None,
                 tick_seconds: float = TICK_SECONDS, max_ticks: int = MAX_TICKS):
        super().__init__(jobs, lifecycle or ProcessLifecycle(),
                         f"Round Robin (Q={QUANTUM})", tick_seconds, max_ticks)

    def select_next_job(self) -> Optional[Job]:
        """준비 큐 맨 앞 작업 (FIFO)"""
        if not self.ready_queue:
            return None
        return self.ready_queue.popleft()

    def charge_running_job(self):
        """실행 중인 작업에 한 퀀텀을 차감하고 종료/선점 여부 결정"""
        job = self.running_job
        if job is None:
            return

        finished = job.charge(QUANTUM)

        # 종료 검사가 선점 검사보다 먼저
        if finished:
            self.lifecycle.terminate(job.handle)
            self.running_job = None
            self.finish_job(job, EventType.FINISH, FinishReason.COMPLETED,
                            f"J{job.id} finished (completed)")
        elif self.lifecycle.has_exited(job.handle):
            self.running_job = None
            self.finish_job(job, EventType.EARLY_EXIT, FinishReason.EXITED_EARLY,
                            f"J{job.id} finished (exited on its own, remaining={job.remaining})")
        elif self.ready_queue:
            self.running_job = None
            try:
                self.lifecycle.suspend(job.handle)
            except JobNotFoundError:
                self.finish_job(job, EventType.LOST, FinishReason.LOST,
                                f"J{job.id} worker vanished before suspend → Terminated")
                return
            job.state = JobState.SUSPENDED
            self.ready_queue.append(job)
            self.log_event(EventType.PREEMPTION,
                           f"J{job.id} preempted (remaining={job.remaining}) → Ready Queue", job)
        # 대기 중인 작업이 없으면 다음 tick에도 계속 실행

    def dispatch_next_job(self):
        """디스패치 셀이 비었으면 다음 작업 시작 또는 재개"""
        if self.running_job is not None:
            return

        job = self.select_next_job()
        if job is None:
            return

        if job.state == JobState.NOT_STARTED:
            # SpawnError는 치명적 오류로 그대로 전파
            job.handle = self.lifecycle.start(job)
            job.state = JobState.RUNNING
            job.start_time = self.current_time
            self.running_job = job
            self.log_event(EventType.START,
                           f"J{job.id} started ({self.lifecycle.describe(job.handle)})", job)
        elif job.state == JobState.SUSPENDED:
            try:
                self.lifecycle.resume(job.handle)
            except JobNotFoundError:
                # 셀은 이번 tick 동안 비어 있음
                self.finish_job(job, EventType.LOST, FinishReason.LOST,
                                f"J{job.id} worker vanished before resume → Terminated")
                return
            job.state = JobState.RUNNING
            self.running_job = job
            self.log_event(EventType.RESUME,
                           f"J{job.id} resumed ({self.lifecycle.describe(job.handle)})", job)
        else:
            raise ValueError(f"J{job.id}: 준비 큐에 있을 수 없는 상태입니다: {job.state.value}")

    def execute_one_step(self) -> bool:
        """한 tick 실행"""
        if self.done or self.timed_out:
            return True

        # 1. 도착 처리
        self.admit(self.current_time)

        # 2. 다음 작업 디스패치
        self.dispatch_next_job()

        # 3. 종료 조건 (기록 전에 검사)
        if self.is_simulation_complete():
            self.done = True
            self.log_event(EventType.INFO, f"===== {self.name} Dispatch Completed =====")
            return True

        if self.current_time >= self.max_ticks:
            self.log_event(EventType.TIMEOUT, "WARNING: Simulation timeout")
            self.timed_out = True
            self.shutdown()
            return True

        # 4. Gantt 기록 및 한 퀀텀 실행
        self.recorder.record(self.current_time, self.running_job)
        running_handle = self.running_job.handle if self.running_job else None
        self.lifecycle.wait_quantum(running_handle, self.tick_seconds)
        self.current_time += 1

        # 5. 퀀텀 종료 시점에 차감 및 종료/선점 결정
        self.charge_running_job()
        return False

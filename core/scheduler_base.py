"""
디스패처 기본 프레임워크 및 이벤트 관리
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, List, Optional

from .job import Job, JobState, create_job_copy
from .lifecycle import LifecycleController
from .timeline import TimelineRecorder

# 시뮬레이션 설정
QUANTUM = 1  # 타임 슬라이스 (tick)
TICK_SECONDS = 1.0  # 한 tick의 실제 시간 (실제 프로세스 모드)
MAX_TICKS = 10000  # 무한 루프 방지


class EventType(Enum):
    """디스패처 이벤트 타입"""
    ARRIVAL = "Arrival"
    START = "Start"
    RESUME = "Resume"
    PREEMPTION = "Preemption"
    FINISH = "Finish"
    EARLY_EXIT = "Early Exit"
    LOST = "Lost"
    TIMEOUT = "Timeout"
    INFO = "Info"


@dataclass
class Event:
    """시뮬레이션 이벤트"""
    time: int
    event_type: EventType
    job_id: Optional[int] = None
    description: str = ""


class BaseDispatcher:
    """
    기본 디스패처 클래스
    도착 큐, 준비 큐, 디스패치 셀(실행 중인 작업)을 소유하고
    도착 처리, 이벤트 로그, 결과 수집 등 공통 기능 제공
    """

    def __init__(self, jobs: List[Job], lifecycle: LifecycleController,
                 name: str = "Base Dispatcher", tick_seconds: float = TICK_SECONDS,
                 max_ticks: int = MAX_TICKS):
        # 도착 시간 기준 안정 정렬 (같은 도착 시간은 로드 순서 유지)
        self.jobs = sorted((create_job_copy(j) for j in jobs), key=lambda j: j.arrival_time)
        self.lifecycle = lifecycle
        self.lifecycle.set_tick(tick_seconds)
        self.name = name
        self.tick_seconds = tick_seconds
        self.max_ticks = max_ticks
        self.current_time = 0
        self.done = False
        self.timed_out = False

        self.arrival_queue: Deque[Job] = deque(self.jobs)
        self.ready_queue: Deque[Job] = deque()
        self.running_job: Optional[Job] = None  # 디스패치 셀

        self.recorder = TimelineRecorder()

        # 이벤트 로그
        self.event_log: List[str] = []
        self.events: List[Event] = []
        self.verbose = False

    def log_event(self, event_type: EventType, message: str, job: Optional[Job] = None):
        """이벤트 로그 기록"""
        log_entry = f"[T={self.current_time:3d}] {message}"
        self.event_log.append(log_entry)
        self.events.append(Event(self.current_time, event_type,
                                 job.id if job is not None else None, message))
        if self.verbose:
            print(log_entry)

    def admit(self, tick: int) -> int:
        """
        도착 시간이 tick 이하인 작업을 준비 큐 뒤로 이동

        Returns:
            이동한 작업 수
        """
        moved = 0
        while self.arrival_queue and self.arrival_queue[0].arrival_time <= tick:
            job = self.arrival_queue.popleft()
            self.ready_queue.append(job)
            moved += 1
            self.log_event(EventType.ARRIVAL,
                           f"J{job.id} arrived (service={job.total_service}) → Ready Queue", job)
        return moved

    def finish_job(self, job: Job, event_type: EventType, reason, message: str):
        """종료 전이: 상태 변경 및 완료 시간 기록 (완료 시간 = 현재 tick)"""
        job.mark_terminated(self.current_time, reason)
        self.recorder.record_completion(job, self.current_time)
        self.log_event(event_type,
                       f"{message} (TT={job.turnaround_time}, WT={job.waiting_time})", job)

    def is_simulation_complete(self) -> bool:
        """도착 큐, 준비 큐, 디스패치 셀이 모두 비었는지 확인"""
        return not self.arrival_queue and not self.ready_queue and self.running_job is None

    def live_jobs(self) -> List[Job]:
        """실행 컨텍스트가 살아있는 작업"""
        return [j for j in self.jobs
                if j.handle is not None and j.state in (JobState.RUNNING, JobState.SUSPENDED)]

    def shutdown(self):
        """살아있는 모든 작업 프로세스 종료 (중단 시 고아 프로세스 방지)"""
        for job in self.live_jobs():
            self.lifecycle.terminate(job.handle)
            job.handle = None
        self.running_job = None

    def execute_one_step(self) -> bool:
        """
        한 tick 실행 (하위 클래스에서 구현)

        Returns:
            시뮬레이션 완료 여부
        """
        raise NotImplementedError("Subclasses must implement execute_one_step()")

    def run(self, verbose: bool = False) -> Dict:
        """
        디스패치 루프 실행

        Args:
            verbose: 이벤트 로그를 발생 즉시 출력할지 여부

        Returns:
            시뮬레이션 결과 딕셔너리
        """
        self.verbose = verbose
        completed = False
        try:
            while not self.execute_one_step():
                pass
            completed = True
        finally:
            if not completed:
                self.shutdown()

        return self.get_results()

    def get_current_snapshot(self) -> Dict:
        """
        현재 시뮬레이션 상태 스냅샷 반환 (실시간 뷰용)
        """
        return {
            'time': self.current_time,
            'running': self.running_job,
            'ready_queue': list(self.ready_queue),
            'arrival_queue': list(self.arrival_queue),
            'terminated': list(self.recorder.completed),
            'latest_gantt_entry': self.recorder.gantt_chart[-1] if self.recorder.gantt_chart else None,
            'latest_log': self.event_log[-1] if self.event_log else ""
        }

    def get_results(self) -> Dict:
        """
        시뮬레이션 결과 반환

        Returns:
            결과 딕셔너리 (통계, Gantt Chart, 로그 등)
        """
        return {
            'algorithm': self.name,
            'statistics': self.recorder.calculate_averages(),
            'gantt_chart': self.recorder.gantt_chart,
            'sequence': self.recorder.sequence(),
            'job_statistics': self.recorder.job_statistics(),
            'event_log': self.event_log,
            'jobs': self.jobs
        }

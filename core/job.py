"""
작업(Job) 및 작업 제어 블록 관리 모듈
"""

from enum import Enum
from typing import Any, Optional


class JobState(Enum):
    """작업 생명주기 상태"""
    NOT_STARTED = "Not Started"
    RUNNING = "Running"
    SUSPENDED = "Suspended"
    TERMINATED = "Terminated"


class FinishReason(Enum):
    """작업 종료 사유"""
    COMPLETED = "completed"  # 서비스 시간 소진
    EXITED_EARLY = "exited early"  # 작업 프로세스가 먼저 종료됨
    LOST = "lost"  # 재개/중단 대상 프로세스가 사라짐


class Job:
    """
    작업 제어 블록
    각 작업의 정적 정보와 실행 상태를 관리
    """

    def __init__(self, job_id: int, arrival_time: int, total_service: int):
        """
        작업 초기화

        Args:
            job_id: 작업 ID (연속적이거나 0부터 시작한다고 가정하지 않음)
            arrival_time: 도착 시간 (tick)
            total_service: 필요한 총 CPU 시간 (tick)
        """
        self.id = job_id
        self.arrival_time = arrival_time
        self.total_service = total_service

        # 실행 상태 (디스패처만 변경)
        self.remaining = total_service
        self.state = JobState.NOT_STARTED
        self.handle: Optional[Any] = None  # 실행 핸들 (최초 시작 전에는 None)

        # 통계 정보
        self.start_time: Optional[int] = None  # 첫 실행 시간
        self.finish_time: Optional[int] = None  # 완료 시간
        self.service_received = 0  # 실제로 차감된 실행 시간
        self.finish_reason: Optional[FinishReason] = None

    def charge(self, time_units: int = 1) -> bool:
        """
        한 퀀텀 실행 시간 차감

        Returns:
            남은 시간이 0이 되었는지 여부
        """
        if self.state != JobState.RUNNING:
            raise ValueError(f"Job {self.id}: 실행 중이 아닌 작업에는 시간을 차감할 수 없습니다.")
        if self.remaining <= 0:
            raise ValueError(f"Job {self.id}: 남은 서비스 시간이 없습니다.")

        self.remaining -= time_units
        self.service_received += time_units
        return self.remaining == 0

    def mark_terminated(self, finish_time: int, reason: FinishReason):
        """종료 처리 (완료 시간은 한 번만 기록)"""
        if self.state == JobState.TERMINATED:
            raise ValueError(f"Job {self.id}: 이미 종료된 작업입니다.")
        self.state = JobState.TERMINATED
        self.remaining = 0
        self.finish_time = finish_time
        self.finish_reason = reason
        self.handle = None

    def is_completed(self) -> bool:
        """작업이 종료되었는지 확인"""
        return self.state == JobState.TERMINATED

    @property
    def turnaround_time(self) -> Optional[int]:
        if self.finish_time is None:
            return None
        return self.finish_time - self.arrival_time

    @property
    def waiting_time(self) -> Optional[int]:
        if self.finish_time is None:
            return None
        return self.turnaround_time - self.service_received

    @property
    def response_time(self) -> Optional[int]:
        if self.start_time is None:
            return None
        return self.start_time - self.arrival_time

    def __repr__(self):
        return f"J{self.id}[{self.state.value}]"

    def __str__(self):
        return f"Job {self.id}: State={self.state.value}, Arrival={self.arrival_time}, " \
               f"Remaining={self.remaining}/{self.total_service}"


def create_job_copy(job: Job) -> Job:
    """
    실행 상태가 초기화된 작업 복사본 생성
    같은 작업 목록으로 시뮬레이션을 여러 번 독립적으로 수행하기 위함
    """
    return Job(job.id, job.arrival_time, job.total_service)

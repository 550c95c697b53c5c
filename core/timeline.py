"""
Gantt 타임라인 및 통계 기록 모듈
"""

from dataclasses import dataclass
from typing import Dict, List, Optional
from .job import Job


@dataclass
class GanttEntry:
    """Gantt Chart 엔트리 (job_id가 None이면 CPU 유휴)"""
    job_id: Optional[int]
    start_time: int
    end_time: int

    @property
    def is_idle(self) -> bool:
        return self.job_id is None

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class JobStatistics:
    """작업별 통계"""
    job_id: int
    arrival_time: int
    total_service: int
    service_received: int
    start_time: Optional[int]
    completion_time: int
    turnaround_time: int
    waiting_time: int
    response_time: Optional[int]
    finish_reason: str


class TimelineRecorder:
    """
    tick 단위 실행 기록과 최종 통계 계산

    기록 순서는 항상 tick 순서와 같아야 하며, 완료 시간은 종료 전이가
    일어날 때 한 번만 기록한다.
    """

    def __init__(self):
        self.gantt_chart: List[GanttEntry] = []
        self.completed: List[Job] = []
        self.context_switches = 0
        self.cpu_busy_time = 0
        self._last_job_id: Optional[int] = None

    def record(self, tick: int, job: Optional[Job]):
        """현재 tick의 점유 작업 기록"""
        if self.gantt_chart and self.gantt_chart[-1].start_time >= tick:
            raise ValueError(f"타임라인은 tick 순서대로 기록되어야 합니다: {tick}")

        job_id = job.id if job is not None else None
        self.gantt_chart.append(GanttEntry(job_id, tick, tick + 1))

        if job is not None:
            self.cpu_busy_time += 1
            if self._last_job_id is not None and self._last_job_id != job_id:
                self.context_switches += 1
            self._last_job_id = job_id

    def record_completion(self, job: Job, tick: int):
        """완료 시간 기록"""
        if job in self.completed:
            raise ValueError(f"Job {job.id}의 완료 시간은 이미 기록되었습니다.")
        if job.finish_time != tick:
            raise ValueError(f"Job {job.id}: 완료 시간이 종료 전이와 일치하지 않습니다.")
        self.completed.append(job)

    @property
    def total_time(self) -> int:
        return len(self.gantt_chart)

    def sequence(self) -> List[Optional[int]]:
        """tick 순서의 점유 작업 ID 목록"""
        return [entry.job_id for entry in self.gantt_chart]

    def segments(self) -> List[GanttEntry]:
        """연속된 동일 점유 구간을 하나로 병합 (차트 그리기용)"""
        merged: List[GanttEntry] = []
        for entry in self.gantt_chart:
            if merged and merged[-1].job_id == entry.job_id \
                    and merged[-1].end_time == entry.start_time:
                merged[-1] = GanttEntry(entry.job_id, merged[-1].start_time, entry.end_time)
            else:
                merged.append(GanttEntry(entry.job_id, entry.start_time, entry.end_time))
        return merged

    def job_statistics(self) -> List[JobStatistics]:
        """완료된 작업별 통계 (작업 ID 순)"""
        stats = []
        for job in sorted(self.completed, key=lambda j: j.id):
            stats.append(JobStatistics(
                job_id=job.id,
                arrival_time=job.arrival_time,
                total_service=job.total_service,
                service_received=job.service_received,
                start_time=job.start_time,
                completion_time=job.finish_time,
                turnaround_time=job.turnaround_time,
                waiting_time=job.waiting_time,
                response_time=job.response_time,
                finish_reason=job.finish_reason.value if job.finish_reason else "",
            ))
        return stats

    def calculate_averages(self) -> Dict:
        """평균 계산"""
        count = len(self.completed)
        if count == 0:
            return {
                'avg_waiting_time': 0,
                'avg_turnaround_time': 0,
                'avg_response_time': 0,
                'cpu_utilization': 0,
                'context_switches': 0,
                'total_time': self.total_time
            }

        responses = [j.response_time for j in self.completed if j.response_time is not None]
        return {
            'avg_waiting_time': sum(j.waiting_time for j in self.completed) / count,
            'avg_turnaround_time': sum(j.turnaround_time for j in self.completed) / count,
            'avg_response_time': sum(responses) / len(responses) if responses else 0,
            'cpu_utilization': (self.cpu_busy_time / self.total_time * 100)
                               if self.total_time > 0 else 0,
            'context_switches': self.context_switches,
            'total_time': self.total_time
        }

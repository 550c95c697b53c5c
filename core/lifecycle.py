"""
작업 실행 컨텍스트 생명주기 제어

디스패처와 작업 프로세스 사이의 인터페이스는 세 가지 시그널
(중단/재개/종료)과 종료 여부 확인뿐이다.
- ProcessLifecycle: 실제 OS 프로세스 + POSIX 시그널
- SimulatedLifecycle: 메모리 내 가짜 핸들 (테스트/웹 시뮬레이션용, sleep 없음)
"""

import os
import signal
import subprocess
import sys
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import SpawnError, LifecycleError, JobNotFoundError
from .job import Job

# 작업 프로그램 실행 설정
WORKER_MODULE = "worker.jobprog"
START_SETTLE_SECONDS = 0.1  # 시작 후 프로세스가 살아있는지 확인하기 전 대기
RESUME_SETTLE_SECONDS = 0.05
TERMINATE_TIMEOUT_SECONDS = 2.0  # 이 시간 안에 종료되지 않으면 SIGKILL


class LifecycleController:
    """
    실행 컨텍스트 제어 인터페이스
    핸들은 디스패처 입장에서 불투명한 값
    """

    tick_seconds = 1.0

    def set_tick(self, seconds: float):
        """한 tick(퀀텀)의 실제 시간 설정 - 디스패처가 생성 시 호출"""
        self.tick_seconds = seconds

    def start(self, job: Job) -> Any:
        """작업의 총 서비스 시간으로 새 실행 컨텍스트 생성"""
        raise NotImplementedError("Subclasses must implement start()")

    def resume(self, handle: Any):
        """중단된 컨텍스트 재개"""
        raise NotImplementedError("Subclasses must implement resume()")

    def suspend(self, handle: Any):
        """실행 중인 컨텍스트 중단"""
        raise NotImplementedError("Subclasses must implement suspend()")

    def terminate(self, handle: Any):
        """컨텍스트 종료 후 자원이 완전히 회수될 때까지 대기"""
        raise NotImplementedError("Subclasses must implement terminate()")

    def has_exited(self, handle: Any) -> bool:
        """비차단 종료 여부 확인"""
        raise NotImplementedError("Subclasses must implement has_exited()")

    def wait_quantum(self, handle: Optional[Any], seconds: float):
        """한 퀀텀 동안 대기 (handle은 그동안 실행되는 컨텍스트)"""
        raise NotImplementedError("Subclasses must implement wait_quantum()")

    def describe(self, handle: Any) -> str:
        return f"pid={handle.pid}"


class ProcessLifecycle(LifecycleController):
    """실제 작업 프로세스 제어 (POSIX 전용)"""

    def __init__(self, worker_command: Optional[List[str]] = None,
                 start_settle: float = START_SETTLE_SECONDS,
                 resume_settle: float = RESUME_SETTLE_SECONDS,
                 terminate_timeout: float = TERMINATE_TIMEOUT_SECONDS):
        self.worker_command = worker_command or [sys.executable, "-m", WORKER_MODULE]
        self.start_settle = start_settle
        self.resume_settle = resume_settle
        self.terminate_timeout = terminate_timeout
        # pid -> 마지막 시작/재개 시각 (이번 퀀텀에서 이미 실행된 시간 계산용)
        self._continued_at: Dict[int, float] = {}

    def build_command(self, job: Job) -> List[str]:
        """작업 프로그램 명령: 서비스 시간을 tick 길이에 맞춰 초 단위로 전달"""
        return self.worker_command + [f"{job.total_service * self.tick_seconds:g}"]

    def start(self, job: Job) -> subprocess.Popen:
        command = self.build_command(job)
        try:
            # 새 세션: 터미널의 Ctrl+C가 작업 프로세스에 직접 전달되지 않도록
            handle = subprocess.Popen(command, start_new_session=True)
        except OSError as e:
            raise SpawnError(job.id, str(e)) from e
        self._continued_at[handle.pid] = time.monotonic()

        time.sleep(self.start_settle)
        if handle.poll() is not None and handle.returncode != 0:
            raise SpawnError(job.id, f"worker exited with status {handle.returncode}")
        return handle

    def _send(self, handle: subprocess.Popen, sig: int):
        if handle.poll() is not None:
            raise JobNotFoundError(handle.pid)
        try:
            os.kill(handle.pid, sig)
        except ProcessLookupError as e:
            raise JobNotFoundError(handle.pid) from e
        except OSError as e:
            raise LifecycleError(f"cannot deliver signal {sig} to pid={handle.pid}: {e}") from e

    def resume(self, handle: subprocess.Popen):
        self._send(handle, signal.SIGCONT)
        self._continued_at[handle.pid] = time.monotonic()
        time.sleep(self.resume_settle)

    def suspend(self, handle: subprocess.Popen):
        # SIGTSTP는 고아 프로세스 그룹에서 무시되므로 SIGSTOP 사용
        self._send(handle, signal.SIGSTOP)

    def terminate(self, handle: subprocess.Popen):
        self._continued_at.pop(handle.pid, None)
        if handle.poll() is None:
            try:
                os.kill(handle.pid, signal.SIGINT)
                # 중단된 프로세스는 재개되어야 SIGINT를 처리함
                os.kill(handle.pid, signal.SIGCONT)
            except ProcessLookupError:
                pass  # 그 사이에 종료됨 - 아래 wait()에서 회수
            except OSError as e:
                raise LifecycleError(f"cannot terminate pid={handle.pid}: {e}") from e

        try:
            handle.wait(timeout=self.terminate_timeout)
        except subprocess.TimeoutExpired:
            handle.kill()
            handle.wait()

    def has_exited(self, handle: subprocess.Popen) -> bool:
        return handle.poll() is not None

    def wait_quantum(self, handle: Optional[subprocess.Popen], seconds: float):
        # 시작/재개 직후의 대기 시간도 작업 실행 시간이므로 퀀텀에서 뺀다
        continued_at = self._continued_at.pop(handle.pid, None) if handle is not None else None
        if continued_at is not None:
            seconds -= time.monotonic() - continued_at
        if seconds > 0:
            time.sleep(seconds)


@dataclass
class SimulatedHandle:
    """가짜 실행 컨텍스트"""
    pid: int
    job_id: int
    service: int
    state: str = "running"  # running, stopped, exited
    progress: int = 0
    exit_after: Optional[int] = None


class SimulatedLifecycle(LifecycleController):
    """
    메모리 내 생명주기 제어 (결정적, 실제 대기 없음)

    Args:
        early_exits: {작업 ID: tick 수} - 해당 작업의 프로세스가 그만큼 실행 후 스스로 종료
        spawn_failures: 시작 시 SpawnError를 발생시킬 작업 ID 목록
    """

    def __init__(self, early_exits: Optional[Dict[int, int]] = None,
                 spawn_failures: Optional[Iterable[int]] = None):
        self.early_exits = dict(early_exits or {})
        self.spawn_failures = set(spawn_failures or [])
        self.handles: Dict[int, SimulatedHandle] = {}
        self.actions: List[Tuple[str, int]] = []  # (동작, 작업 ID)
        self._next_pid = 1000

    def start(self, job: Job) -> SimulatedHandle:
        if job.id in self.spawn_failures:
            raise SpawnError(job.id, "simulated spawn failure")

        self._next_pid += 1
        handle = SimulatedHandle(self._next_pid, job.id, job.total_service,
                                 exit_after=self.early_exits.get(job.id))
        self.handles[handle.pid] = handle
        self.actions.append(("start", job.id))
        return handle

    def _require_live(self, handle: SimulatedHandle):
        if handle.state == "exited":
            raise JobNotFoundError(handle.pid)

    def resume(self, handle: SimulatedHandle):
        self._require_live(handle)
        handle.state = "running"
        self.actions.append(("resume", handle.job_id))

    def suspend(self, handle: SimulatedHandle):
        self._require_live(handle)
        handle.state = "stopped"
        self.actions.append(("suspend", handle.job_id))

    def terminate(self, handle: SimulatedHandle):
        handle.state = "exited"
        self.actions.append(("terminate", handle.job_id))

    def has_exited(self, handle: SimulatedHandle) -> bool:
        return handle.state == "exited"

    def wait_quantum(self, handle: Optional[SimulatedHandle], seconds: float):
        if handle is None or handle.state != "running":
            return
        handle.progress += 1
        limit = handle.exit_after if handle.exit_after is not None else handle.service
        if handle.progress >= limit:
            handle.state = "exited"

    def vanish(self, job_id: int):
        """작업 프로세스가 외부 요인으로 사라진 상황 재현"""
        for handle in self.handles.values():
            if handle.job_id == job_id:
                handle.state = "exited"

    def live_handles(self) -> List[SimulatedHandle]:
        return [h for h in self.handles.values() if h.state != "exited"]

"""
디스패처 예외 정의
"""


class DispatcherError(Exception):
    """디스패처 관련 예외의 기본 클래스"""


class SpawnError(DispatcherError):
    """작업 프로세스를 생성할 수 없음 (치명적 오류 - 시뮬레이션 중단)"""

    def __init__(self, job_id: int, reason: str):
        super().__init__(f"Job {job_id}: cannot spawn worker ({reason})")
        self.job_id = job_id
        self.reason = reason


class LifecycleError(DispatcherError):
    """시그널 전달 실패 (치명적 오류)"""


class JobNotFoundError(LifecycleError):
    """
    대상 실행 컨텍스트가 이미 사라짐

    디스패처는 이를 작업 완료로 간주하고 계속 진행한다.
    """

    def __init__(self, pid: int):
        super().__init__(f"execution context pid={pid} no longer exists")
        self.pid = pid


class MalformedRecordError(ValueError):
    """작업 목록의 잘못된 레코드 (해당 라인만 건너뜀)"""

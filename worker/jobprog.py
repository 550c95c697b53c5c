"""
작업 프로그램: service_time 초 동안 실행 후 스스로 종료

사용법: python -m worker.jobprog [service_time]
service_time이 없으면 종료 시그널을 받을 때까지 실행

시그널 동작:
    SIGSTOP / SIGTSTP - 중단 (기본 동작)
    SIGCONT           - 재개 (기본 동작)
    SIGINT / SIGTERM  - 즉시 정상 종료
"""

import os
import signal
import sys
import time
from typing import List, Optional

PROGRESS_STEP = 0.1  # 진행 단위 (초)
STOP_TOLERANCE = 1.5  # 한 단위가 step * 이 값보다 오래 걸리면 도중에 중단된 것으로 간주


def _handle_terminate(signum, frame):
    raise KeyboardInterrupt


def run(service_time: Optional[float], step: float = PROGRESS_STEP) -> int:
    """
    작업 실행

    중단된 동안에도 sleep 마감 시각은 지나가므로, 중단이 끼어든 단위는
    진행으로 세지 않는다. 재개할 때마다 최대 한 단위를 손해 보지만
    디스패처가 준 실행 시간보다 먼저 끝나지는 않는다.
    """
    print(f"[job pid={os.getpid()}] started, service_time={service_time}", flush=True)

    if service_time is None:
        while True:
            time.sleep(step)

    needed = round(service_time / step)
    done = 0
    while done < needed:
        begin = time.monotonic()
        time.sleep(step)
        if time.monotonic() - begin <= step * STOP_TOLERANCE:
            done += 1

    print(f"[job pid={os.getpid()}] finished normally", flush=True)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    service_time = None
    if argv:
        try:
            service_time = float(argv[0])
        except ValueError:
            print(f"Usage: jobprog [service_time] (got {argv[0]!r})", file=sys.stderr)
            return 1
        if service_time <= 0:
            return 0

    signal.signal(signal.SIGTERM, _handle_terminate)
    try:
        return run(service_time)
    except KeyboardInterrupt:
        print(f"[job pid={os.getpid()}] terminated", flush=True)
        return 0


if __name__ == "__main__":
    sys.exit(main())

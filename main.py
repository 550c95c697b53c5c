#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Round Robin 작업 디스패처 - 메인 실행 파일
"""

import argparse
import os
import sys
import traceback
from typing import Dict, List, Optional

from core.errors import DispatcherError
from core.lifecycle import ProcessLifecycle, SimulatedLifecycle
from core.scheduler_base import TICK_SECONDS, MAX_TICKS
from schedulers.round_robin import RoundRobinDispatcher
from utils.input_parser import InputParser
from utils.visualization import Visualizer

DEFAULT_JOBS_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "jobs.csv")


def print_banner():
    """배너 출력"""
    print("\n" + "="*80)
    print(" "*22 + "Round Robin 작업 디스패처 (Quantum = 1)")
    print("="*80 + "\n")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Round Robin job dispatcher (quantum = 1)")
    parser.add_argument("jobs_file", nargs="?", default=DEFAULT_JOBS_FILE,
                        help="작업 목록 파일 (도착시간,작업ID,서비스시간)")
    parser.add_argument("--simulated", action="store_true",
                        help="실제 프로세스 대신 메모리 내 시뮬레이션 사용")
    parser.add_argument("--tick", type=float, default=None,
                        help=f"tick 길이(초), 기본값: 실제 {TICK_SECONDS} / 시뮬레이션 0")
    parser.add_argument("--max-ticks", type=int, default=MAX_TICKS,
                        help=f"무한 루프 방지용 최대 tick 수 (기본값: {MAX_TICKS})")
    parser.add_argument("--output", default="dispatch_results",
                        help="결과 저장 디렉토리")
    parser.add_argument("--no-chart", action="store_true", help="Gantt 차트 이미지 생성 안 함")
    parser.add_argument("--quiet", action="store_true", help="이벤트 로그 실시간 출력 안 함")
    return parser


def save_results(result: Dict, output_dir: str = "dispatch_results", chart: bool = True):
    """결과 저장"""
    os.makedirs(output_dir, exist_ok=True)

    if chart:
        visualizer = Visualizer()
        save_path = os.path.join(output_dir, "gantt_round_robin.png")
        visualizer.draw_gantt_chart(result['gantt_chart'], result['algorithm'],
                                    save_path=save_path, show=False)

    results_file = os.path.join(output_dir, "results.txt")
    save_results_to_file(result, results_file)


def save_results_to_file(result: Dict, filename: str):
    """결과를 텍스트 파일로 저장"""
    with open(filename, 'w', encoding='utf-8') as f:
        f.write("="*80 + "\n")
        f.write(f"디스패치 결과 - {result['algorithm']}\n")
        f.write("="*80 + "\n\n")

        f.write(Visualizer.format_gantt_chart(result['gantt_chart']) + "\n\n")

        f.write(f"{'Job':<6} {'도착':>6} {'서비스':>8} {'완료':>6} {'반환':>6} {'대기':>6}\n")
        f.write("-"*80 + "\n")
        for s in result['job_statistics']:
            f.write(f"J{s.job_id:<5} "
                    f"{s.arrival_time:>6} "
                    f"{s.total_service:>8} "
                    f"{s.completion_time:>6} "
                    f"{s.turnaround_time:>6} "
                    f"{s.waiting_time:>6}\n")

        stats = result['statistics']
        f.write("-"*80 + "\n")
        f.write(f"평균 반환 시간: {stats['avg_turnaround_time']:.2f}\n")
        f.write(f"평균 대기 시간: {stats['avg_waiting_time']:.2f}\n\n")

        f.write("이벤트 로그:\n")
        for line in result['event_log']:
            f.write(line + "\n")

    print(f"[완료] 결과가 {filename}에 저장되었습니다")


def main(argv: Optional[List[str]] = None) -> int:
    """메인 함수"""
    args = build_arg_parser().parse_args(argv)
    print_banner()

    print(f"'{args.jobs_file}'에서 작업 로딩 중...")
    jobs = InputParser.parse_file(args.jobs_file)
    if not jobs:
        print("\n[오류] 작업 로드 실패 또는 파일이 비어있습니다.")
        return 1

    InputParser.print_job_table(jobs)

    if args.simulated:
        lifecycle = SimulatedLifecycle()
        tick = 0.0 if args.tick is None else args.tick
    else:
        lifecycle = ProcessLifecycle()
        tick = TICK_SECONDS if args.tick is None else args.tick

    dispatcher = RoundRobinDispatcher(jobs, lifecycle, tick_seconds=tick, max_ticks=args.max_ticks)
    try:
        result = dispatcher.run(verbose=not args.quiet)
    except DispatcherError as e:
        print(f"\n[오류] 디스패치 중단: {e}", file=sys.stderr)
        return 1

    if dispatcher.timed_out:
        print(f"\n[경고] {args.max_ticks} tick 안에 끝나지 않아 디스패치를 중단했습니다 "
              f"(완료 {len(result['job_statistics'])}/{len(result['jobs'])})")
    else:
        print("\nDispatcher done (all jobs completed)")
    visualizer = Visualizer()
    visualizer.print_gantt_chart(result['gantt_chart'])
    visualizer.print_statistics_table(result)
    save_results(result, args.output, chart=not args.no_chart)
    return 1 if dispatcher.timed_out else 0


def cli() -> int:
    """콘솔 진입점: 사용자 중단 및 예기치 않은 오류 처리"""
    try:
        return main()
    except KeyboardInterrupt:
        # 디스패처가 살아있는 작업 프로세스를 모두 종료한 뒤 여기 도달
        print("\n\n사용자에 의해 디스패치가 중단되었습니다.")
        print("="*80 + "\n")
        return 130
    except Exception as e:
        print(f"\n\n[오류] 예기치 않은 오류: {e}")
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(cli())

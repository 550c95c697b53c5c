"""
작업 목록 파서 및 작업 생성 모듈
"""

import random
from typing import Iterable, List, Optional, Set
from core.errors import MalformedRecordError
from core.job import Job


class InputParser:
    """작업 목록 파일 파서"""

    @staticmethod
    def parse_file(filename: str) -> List[Job]:
        """
        파일에서 작업 정보 읽기

        파일 형식: 도착시간,작업ID,서비스시간
        예: 0,1,5

        Args:
            filename: 입력 파일 경로

        Returns:
            작업 리스트 (파일 순서 유지)
        """
        try:
            with open(filename, 'r', encoding='utf-8') as f:
                jobs = InputParser.parse_lines(f)
        except FileNotFoundError:
            print(f"오류: 파일 '{filename}'을 찾을 수 없습니다")
            return []

        print(f"{filename}에서 {len(jobs)}개의 작업을 성공적으로 로드했습니다")
        return jobs

    @staticmethod
    def parse_lines(lines: Iterable[str]) -> List[Job]:
        """
        라인 단위 파싱
        잘못된 레코드는 경고 후 건너뛰고 나머지는 계속 로드
        """
        jobs = []
        seen_ids: Set[int] = set()

        for line_no, line in enumerate(lines, 1):
            line = line.strip()

            # 주석 및 빈 줄 제거
            if not line or line.startswith('#'):
                continue

            try:
                job = InputParser._create_job_from_parts(InputParser._parse_line(line))
                if job.id in seen_ids:
                    raise MalformedRecordError(f"중복된 작업 ID: {job.id}")
            except MalformedRecordError as e:
                print(f"경고: {line_no}번째 라인 파싱 실패: {line}")
                print(f"오류: {e}")
                continue

            seen_ids.add(job.id)
            jobs.append(job)

        return jobs

    @staticmethod
    def _parse_line(line: str) -> List[str]:
        """CSV 라인 분리"""
        return [part.strip() for part in line.split(',')]

    @staticmethod
    def _create_job_from_parts(parts: List[str]) -> Job:
        """파싱된 부분에서 작업 객체 생성"""
        if len(parts) < 3:
            raise MalformedRecordError(f"잘못된 형식: 3개 필드가 필요하지만 {len(parts)}개만 있습니다")

        try:
            arrival_time = int(parts[0])
            job_id = int(parts[1])
            service = int(parts[2])
        except ValueError as e:
            raise MalformedRecordError(f"숫자 필드 변환 오류: {e}") from e

        if arrival_time < 0:
            raise MalformedRecordError(f"도착 시간은 0 이상이어야 합니다: {arrival_time}")
        if service <= 0:
            raise MalformedRecordError(f"서비스 시간은 양수여야 합니다: {service}")

        return Job(job_id, arrival_time, service)

    @staticmethod
    def generate_random_jobs(num_jobs: int = 5,
                             max_arrival: int = 10,
                             max_service: int = 5,
                             seed: Optional[int] = None) -> List[Job]:
        """
        랜덤 작업 생성 (도착 시간 순 정렬)

        Args:
            num_jobs: 생성할 작업 수
            max_arrival: 최대 도착 시간
            max_service: 최대 서비스 시간
            seed: 랜덤 시드
        """
        rng = random.Random(seed)

        jobs = [Job(i, rng.randint(0, max_arrival), rng.randint(1, max_service))
                for i in range(1, num_jobs + 1)]
        jobs.sort(key=lambda j: j.arrival_time)

        print(f"{num_jobs}개의 랜덤 작업을 생성했습니다")
        return jobs

    @staticmethod
    def save_jobs_to_file(jobs: List[Job], filename: str):
        """
        작업 리스트를 파일로 저장

        Args:
            jobs: 저장할 작업 리스트
            filename: 출력 파일 경로
        """
        with open(filename, 'w', encoding='utf-8') as f:
            f.write("# Round Robin Dispatcher Job List\n")
            f.write("# Format: ArrivalTime,JobID,ServiceTime\n")

            for job in jobs:
                f.write(f"{job.arrival_time},{job.id},{job.total_service}\n")

        print(f"{len(jobs)}개의 작업을 {filename}에 성공적으로 저장했습니다")

    @staticmethod
    def print_job_table(jobs: List[Job]):
        """작업 요약 정보 출력"""
        print("\n" + "="*20 + " JOB TABLE " + "="*20)
        print(f"{'Job ID':>7} | {'Arrival':>7} | {'CPU Burst':>9}")
        print("-"*8 + "+" + "-"*9 + "+" + "-"*11)

        for job in jobs:
            print(f"{job.id:>7} | {job.arrival_time:>7} | {job.total_service:>9}")

        print("="*51 + "\n")

"""
시각화 모듈: Gantt Chart 및 통계 출력
"""

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from typing import Dict, List, Optional
from core.timeline import GanttEntry, JobStatistics


class Visualizer:
    """디스패치 결과 시각화"""

    def __init__(self):
        # 작업별 색상 설정
        self.colors = plt.cm.Set3.colors
        self.idle_color = '#CCCCCC'

    def draw_gantt_chart(self, gantt_data: List[GanttEntry], algorithm_name: str,
                         save_path: Optional[str] = None, show: bool = True):
        """
        Gantt Chart 그리기

        Args:
            gantt_data: Gantt Chart 데이터 (tick 단위 또는 병합된 구간)
            algorithm_name: 알고리즘 이름
            save_path: 저장 경로 (None이면 저장 안 함)
            show: 화면에 표시할지 여부
        """
        if not gantt_data:
            print(f"{algorithm_name}에 대한 Gantt 차트 데이터가 없습니다")
            return

        fig, ax = plt.subplots(figsize=(16, 6))

        # 작업 ID 추출 (유일한 값만)
        unique_ids = sorted(set(entry.job_id for entry in gantt_data if not entry.is_idle))
        id_to_y = {job_id: idx for idx, job_id in enumerate(unique_ids)}

        for entry in gantt_data:
            if entry.is_idle:
                # CPU 유휴 시간은 축 아래에 회색으로 표시
                ax.barh(-1, entry.duration, left=entry.start_time, height=0.4,
                        color=self.idle_color, edgecolor='black', linewidth=0.5)
                continue

            y_pos = id_to_y[entry.job_id]
            color = self.colors[unique_ids.index(entry.job_id) % len(self.colors)]

            ax.barh(y_pos, entry.duration, left=entry.start_time, height=0.8,
                    color=color, edgecolor='black', linewidth=0.5)
            ax.text(entry.start_time + entry.duration / 2, y_pos, f'J{entry.job_id}',
                    ha='center', va='center', fontsize=8, fontweight='bold')

        # 축 설정
        ax.set_yticks(range(len(unique_ids)))
        ax.set_yticklabels([f'J{job_id}' for job_id in unique_ids])
        ax.set_xlabel('Time', fontsize=12)
        ax.set_ylabel('Job', fontsize=12)
        ax.set_title(f'Gantt Chart - {algorithm_name}', fontsize=14, fontweight='bold')
        ax.grid(axis='x', alpha=0.3)

        legend_elements = [
            mpatches.Patch(color=self.colors[0], label='Running'),
            mpatches.Patch(color=self.idle_color, label='Idle')
        ]
        ax.legend(handles=legend_elements, loc='upper right')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Gantt 차트가 {save_path}에 저장되었습니다")

        if show:
            plt.show()
        else:
            plt.close(fig)

    @staticmethod
    def format_gantt_chart(gantt_data: List[GanttEntry]) -> str:
        """tick 단위 콘솔 Gantt Chart 문자열"""
        time_row = "Time:  " + "".join(f"{entry.start_time:<4}" for entry in gantt_data)
        cpu_row = "CPU:   " + "".join(" -  " if entry.is_idle else f"J{entry.job_id:<3}"
                                      for entry in gantt_data)
        return "\n".join([
            "=" * 20 + " GANTT CHART " + "=" * 20,
            time_row.rstrip(),
            cpu_row.rstrip(),
            "=" * 53
        ])

    def print_gantt_chart(self, gantt_data: List[GanttEntry]):
        print("\n" + self.format_gantt_chart(gantt_data) + "\n")

    def print_statistics_table(self, results: Dict):
        """
        작업별 통계와 평균을 표 형식으로 출력

        Args:
            results: 디스패처 실행 결과
        """
        job_stats: List[JobStatistics] = results['job_statistics']
        stats = results['statistics']

        print(f"\n{'='*80}")
        print(f"작업 통계 - {results['algorithm']}")
        print(f"{'='*80}")
        print(f"{'Job':<6} {'도착':>6} {'서비스':>8} {'시작':>6} {'완료':>6} "
              f"{'반환':>6} {'대기':>6} {'응답':>6}  {'종료 사유'}")
        print(f"{'-'*80}")

        for s in job_stats:
            start = s.start_time if s.start_time is not None else 'N/A'
            response = s.response_time if s.response_time is not None else 'N/A'
            print(f"J{s.job_id:<5} "
                  f"{s.arrival_time:>6} "
                  f"{s.total_service:>8} "
                  f"{start:>6} "
                  f"{s.completion_time:>6} "
                  f"{s.turnaround_time:>6} "
                  f"{s.waiting_time:>6} "
                  f"{response:>6}  {s.finish_reason}")

        print(f"{'-'*80}")
        print(f"평균 반환 시간: {stats['avg_turnaround_time']:.2f}   "
              f"평균 대기 시간: {stats['avg_waiting_time']:.2f}   "
              f"평균 응답 시간: {stats['avg_response_time']:.2f}")
        print(f"CPU 이용률: {stats['cpu_utilization']:.2f}%   "
              f"문맥전환: {stats['context_switches']}   "
              f"총 시간: {stats['total_time']}")
        print(f"{'='*80}\n")

"""
Round Robin 작업 디스패처 - FastAPI 백엔드
웹에서는 실제 프로세스 대신 시뮬레이션 생명주기 제어를 사용
"""

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import List, Optional, Dict
import asyncio
import json

from core.errors import DispatcherError
from core.job import Job
from core.lifecycle import SimulatedLifecycle
from core.scheduler_base import MAX_TICKS
from schedulers.round_robin import RoundRobinDispatcher

app = FastAPI(
    title="Round Robin Job Dispatcher",
    description="Round Robin (Quantum = 1) 작업 디스패처 시뮬레이터",
    version="1.0.0"
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

SAMPLE_JOBS = [
    {"id": 1, "arrival_time": 0, "service": 5},
    {"id": 2, "arrival_time": 1, "service": 4},
    {"id": 3, "arrival_time": 2, "service": 3},
    {"id": 4, "arrival_time": 3, "service": 2},
    {"id": 5, "arrival_time": 4, "service": 1},
]


# Pydantic 모델
class JobInput(BaseModel):
    id: int
    arrival_time: int = Field(ge=0)
    service: int = Field(gt=0)


class SimulationRequest(BaseModel):
    jobs: List[JobInput]
    early_exits: Dict[int, int] = {}
    max_ticks: int = Field(default=MAX_TICKS, gt=0)


class GanttEntryOut(BaseModel):
    job_id: Optional[int]
    start_time: int
    end_time: int


class JobResult(BaseModel):
    job_id: int
    arrival_time: int
    service: int
    completion_time: int
    turnaround_time: int
    waiting_time: int
    response_time: Optional[int]
    finish_reason: str


class SimulationResult(BaseModel):
    algorithm: str
    gantt_chart: List[GanttEntryOut]
    sequence: List[Optional[int]]
    jobs: List[JobResult]
    statistics: Dict[str, float]
    event_log: List[str]


def create_job_objects(job_inputs: List[JobInput]) -> List[Job]:
    """JobInput을 Job 객체로 변환 (중복 ID 거부)"""
    ids = [j.id for j in job_inputs]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ValueError(f"Duplicate job ids: {duplicates}")
    return [Job(j.id, j.arrival_time, j.service) for j in job_inputs]


def run_dispatcher(jobs: List[Job], early_exits: Optional[Dict[int, int]] = None,
                   max_ticks: int = MAX_TICKS) -> Dict:
    """디스패처 실행 및 결과 반환"""
    dispatcher = RoundRobinDispatcher(jobs, SimulatedLifecycle(early_exits=early_exits),
                                      tick_seconds=0.0, max_ticks=max_ticks)
    result = dispatcher.run()

    return {
        'algorithm': result['algorithm'],
        'gantt_chart': [
            {'job_id': e.job_id, 'start_time': e.start_time, 'end_time': e.end_time}
            for e in result['gantt_chart']
        ],
        'sequence': result['sequence'],
        'jobs': [
            {
                'job_id': s.job_id,
                'arrival_time': s.arrival_time,
                'service': s.total_service,
                'completion_time': s.completion_time,
                'turnaround_time': s.turnaround_time,
                'waiting_time': s.waiting_time,
                'response_time': s.response_time,
                'finish_reason': s.finish_reason
            }
            for s in result['job_statistics']
        ],
        'statistics': result['statistics'],
        'event_log': result['event_log']
    }


@app.get("/")
async def root():
    return {"message": "Round Robin Job Dispatcher API", "version": "1.0.0"}


@app.get("/jobs/sample")
async def get_sample_jobs():
    """샘플 작업 목록 반환 (5개 작업)"""
    return {"jobs": SAMPLE_JOBS}


@app.post("/simulate", response_model=SimulationResult)
async def simulate(request: SimulationRequest):
    """디스패치 시뮬레이션 실행"""
    try:
        jobs = create_job_objects(request.jobs)
        return run_dispatcher(jobs, request.early_exits, request.max_ticks)
    except (DispatcherError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))


# WebSocket을 통한 실시간 시뮬레이션
class RealtimeSimulator:
    def __init__(self, jobs: List[Job], early_exits: Optional[Dict[int, int]] = None):
        self.dispatcher = RoundRobinDispatcher(jobs, SimulatedLifecycle(early_exits=early_exits),
                                               tick_seconds=0.0)
        self.is_complete = False
        self.last_gantt_index = 0
        self.last_log_index = 0

    def step(self) -> Dict:
        """한 tick 실행 및 상태 반환"""
        if self.is_complete:
            return {'complete': True}

        is_complete = self.dispatcher.execute_one_step()
        gantt_chart = self.dispatcher.recorder.gantt_chart

        # 새로운 Gantt 엔트리
        new_gantt = [
            {'job_id': e.job_id, 'start_time': e.start_time, 'end_time': e.end_time}
            for e in gantt_chart[self.last_gantt_index:]
        ]
        self.last_gantt_index = len(gantt_chart)

        # 새로운 로그
        new_logs = self.dispatcher.event_log[self.last_log_index:]
        self.last_log_index = len(self.dispatcher.event_log)

        running = None
        if self.dispatcher.running_job:
            j = self.dispatcher.running_job
            running = {'job_id': j.id, 'remaining': j.remaining}

        ready_queue = [
            {'job_id': j.id, 'remaining': j.remaining}
            for j in self.dispatcher.ready_queue
        ]

        stats = {
            'current_time': self.dispatcher.current_time,
            'completed': len(self.dispatcher.recorder.completed),
            'total': len(self.dispatcher.jobs)
        }

        if is_complete:
            self.is_complete = True
            stats['final'] = self.dispatcher.recorder.calculate_averages()

        return {
            'complete': is_complete,
            'running': running,
            'ready_queue': ready_queue,
            'new_gantt': new_gantt,
            'new_logs': new_logs,
            'stats': stats
        }


@app.websocket("/ws/realtime")
async def websocket_realtime(websocket: WebSocket):
    """실시간 시뮬레이션 WebSocket 엔드포인트"""
    await websocket.accept()
    simulator = None
    jobs_message = None

    try:
        while True:
            data = await websocket.receive_text()
            message = json.loads(data)

            action = message.get('action')

            if action in ('init', 'reset'):
                if action == 'init':
                    jobs_message = message
                if jobs_message is None:
                    await websocket.send_json({'type': 'error', 'message': 'not initialized'})
                    continue

                jobs = create_job_objects([JobInput(**j) for j in jobs_message.get('jobs', [])])
                early_exits = {int(k): v for k, v in jobs_message.get('early_exits', {}).items()}
                simulator = RealtimeSimulator(jobs, early_exits)

                await websocket.send_json({
                    'type': 'initialized',
                    'algorithm': simulator.dispatcher.name,
                    'job_count': len(jobs)
                })

            elif action == 'step':
                if simulator:
                    result = simulator.step()
                    await websocket.send_json({
                        'type': 'step_result',
                        **result
                    })

            elif action == 'run':
                # 자동 실행 (속도 조절 가능)
                if simulator:
                    speed = message.get('speed', 1.0)
                    if not isinstance(speed, (int, float)) or speed <= 0:
                        await websocket.send_json({'type': 'error',
                                                   'message': 'speed must be a positive number'})
                        continue
                    delay = 1.0 / speed

                    while not simulator.is_complete:
                        result = simulator.step()
                        await websocket.send_json({
                            'type': 'step_result',
                            **result
                        })

                        if result['complete']:
                            break

                        await asyncio.sleep(delay)

    except WebSocketDisconnect:
        pass
    except (DispatcherError, ValueError) as e:
        await websocket.send_json({'type': 'error', 'message': str(e)})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

import matplotlib

matplotlib.use("Agg")

import pytest

from core.job import Job
from core.lifecycle import SimulatedLifecycle
from schedulers.round_robin import RoundRobinDispatcher


def make_jobs(*records):
    """(도착시간, 작업ID, 서비스시간) 튜플로 작업 생성"""
    return [Job(job_id, arrival, service) for arrival, job_id, service in records]


def simulated_dispatcher(jobs, **lifecycle_kwargs):
    lifecycle = SimulatedLifecycle(**lifecycle_kwargs)
    return RoundRobinDispatcher(jobs, lifecycle, tick_seconds=0.0)


@pytest.fixture
def canonical_jobs():
    return make_jobs((0, 1, 5), (1, 2, 4), (2, 3, 3), (3, 4, 2), (4, 5, 1))

"""
Core modules for Round Robin Job Dispatcher
"""

from .job import Job, JobState, FinishReason, create_job_copy
from .errors import (DispatcherError, SpawnError, LifecycleError,
                     JobNotFoundError, MalformedRecordError)
from .lifecycle import LifecycleController, ProcessLifecycle, SimulatedLifecycle, SimulatedHandle
from .timeline import GanttEntry, JobStatistics, TimelineRecorder
from .scheduler_base import BaseDispatcher, EventType, Event

__all__ = [
    'Job',
    'JobState',
    'FinishReason',
    'create_job_copy',
    'DispatcherError',
    'SpawnError',
    'LifecycleError',
    'JobNotFoundError',
    'MalformedRecordError',
    'LifecycleController',
    'ProcessLifecycle',
    'SimulatedLifecycle',
    'SimulatedHandle',
    'GanttEntry',
    'JobStatistics',
    'TimelineRecorder',
    'BaseDispatcher',
    'EventType',
    'Event'
]

"""
Job Dispatchers
"""

from .round_robin import RoundRobinDispatcher

__all__ = [
    'RoundRobinDispatcher'
]

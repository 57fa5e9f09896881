"""Recompute pipeline: queueing, batch fan-out and the RQ worker."""

from .batch import run_batch, BatchResult
from .queue import RecomputeQueue, process_recompute_task, dispatch_recompute

__all__ = [
    'run_batch',
    'BatchResult',
    'RecomputeQueue',
    'process_recompute_task',
    'dispatch_recompute',
]

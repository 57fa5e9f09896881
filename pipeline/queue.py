#!/usr/bin/env python3
"""
Recompute Queue - schedules recomputation after profile or job edits.

Features:
- Redis Queue (RQ) for async processing across worker processes
- Sync mode (in-process) when the async queue is disabled or Redis is down;
  tasks run on a background thread owned by the queue so the save that
  triggered them returns immediately (``inline`` runs them on the caller)
- Retry policy for transient failures

Task payloads are plain dicts so they survive pickling into Redis:
    {"kind": "pair", "candidate_id": ..., "job_id": ...}
    {"kind": "job", "job_id": ...}
    {"kind": "candidate", "candidate_id": ...}
"""

from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Optional, Set
import logging
import os
import threading

from redis import Redis
from redis.exceptions import RedisError
from rq import Queue, Retry

from core.config_loader import RecomputeConfig

logger = logging.getLogger(__name__)

TASK_PAIR = 'pair'
TASK_JOB = 'job'
TASK_CANDIDATE = 'candidate'


def dispatch_recompute(match_service, task: Dict[str, Any]) -> Dict[str, Any]:
    """Run one recompute task against a MatchService; returns a picklable summary."""
    kind = task.get('kind')
    if kind == TASK_PAIR:
        view = match_service.recompute(task['candidate_id'], task['job_id'])
        return {
            'kind': kind,
            'match_id': view.id,
            'composite_score': view.composite_score,
            'input_version': view.input_version,
        }
    if kind == TASK_JOB:
        result = match_service.recompute_job(task['job_id'])
        return {'kind': kind, **result.to_dict()}
    if kind == TASK_CANDIDATE:
        result = match_service.recompute_candidate(task['candidate_id'])
        return {'kind': kind, **result.to_dict()}
    raise ValueError(f"Unknown recompute task kind: {kind!r}")


# Worker task - must be at module level for RQ
def process_recompute_task(task: Dict[str, Any]) -> Dict[str, Any]:
    """
    Process a recompute task (called by RQ worker).

    Builds its own AppContext from the config file named by MATCHING_CONFIG
    (default config.yaml) so the job payload stays small.
    """
    from core.app_context import AppContext
    from core.config_loader import load_config

    config = load_config(os.environ.get('MATCHING_CONFIG', 'config.yaml'))
    # the worker is the async side; never re-enqueue from inside it
    config.recompute.use_async_queue = False
    config.recompute.inline = True
    ctx = AppContext.build(config)
    try:
        logger.info(f"Processing recompute task {task}")
        return dispatch_recompute(ctx.match_service, task)
    finally:
        ctx.close()


class RecomputeQueue:
    def __init__(
        self,
        config: RecomputeConfig,
        sync_handler: Optional[Callable[[Dict[str, Any]], Any]] = None,
        redis_conn: Optional[Redis] = None
    ):
        """
        Args:
            config: recompute section of the app config
            sync_handler: runs a task in-process (sync mode)
            redis_conn: pre-built Redis connection (tests); built from config otherwise
        """
        self.config = config
        self.sync_handler = sync_handler
        self.redis_conn = None
        self.queue = None
        self.async_mode = False
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

        if not config.use_async_queue:
            logger.info("Async queue disabled via config. Using sync mode.")
            return

        redis_url = config.redis_url or os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
        try:
            self.redis_conn = redis_conn or Redis.from_url(redis_url)
            # Validate connection with ping before using
            self.redis_conn.ping()
            self.queue = Queue(config.queue_name, connection=self.redis_conn)
            self.async_mode = True
            logger.info(f"Recompute queue '{config.queue_name}' connected to Redis")
        except RedisError as e:
            logger.error(f"Redis connection failed: {e}. Falling back to sync mode.")
            self.redis_conn = None
            self.queue = None

    def enqueue_pair(self, candidate_id: str, job_id: str) -> Any:
        return self._submit({'kind': TASK_PAIR, 'candidate_id': candidate_id, 'job_id': job_id})

    def enqueue_job(self, job_id: str) -> Any:
        return self._submit({'kind': TASK_JOB, 'job_id': job_id})

    def enqueue_candidate(self, candidate_id: str) -> Any:
        return self._submit({'kind': TASK_CANDIDATE, 'candidate_id': candidate_id})

    def _submit(self, task: Dict[str, Any]) -> Any:
        """
        Returns the RQ job id in async mode. In sync mode returns a Future for
        the task summary, or the summary itself when config.inline is set.
        """
        if self.async_mode:
            retry_policy = Retry(max=3, interval=[10, 30, 60])
            job = self.queue.enqueue(
                process_recompute_task,
                task,
                job_timeout=self.config.job_timeout,
                result_ttl=86400,
                retry=retry_policy
            )
            logger.info(f"Queued recompute {task['kind']} as job {job.id}")
            return job.id

        if self.sync_handler is None:
            raise RuntimeError("Sync mode needs a sync_handler")
        if self.config.inline:
            return self.sync_handler(task)

        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='recompute')
            future = self._executor.submit(self.sync_handler, task)
            self._pending.add(future)
        future.add_done_callback(lambda f: self._task_done(task, f))
        logger.info(f"Scheduled recompute {task['kind']} in background")
        return future

    def _task_done(self, task: Dict[str, Any], future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            logger.warning(f"Recompute {task} cancelled")
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Background recompute {task} failed: {error}", exc_info=error)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for background tasks scheduled so far; True when all finished."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_tasks: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait_for_tasks)

    def get_queue_status(self) -> Dict[str, Any]:
        if not self.async_mode:
            with self._lock:
                pending = len(self._pending)
            return {'mode': 'sync', 'pending': pending}
        return {
            'mode': 'async',
            'queue': self.config.queue_name,
            'queued': len(self.queue),
            'failed': self.queue.failed_job_registry.count,
        }

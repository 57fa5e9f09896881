#!/usr/bin/env python3
"""
Batch recompute - fan a list of (candidate, job) pairs out over a bounded
thread pool.

Each unit runs in its own unit of work, so one failing pair never rolls back
the others; failures are logged and counted.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Sequence, Tuple
import logging
import time

logger = logging.getLogger(__name__)

Pair = Tuple[str, str]


@dataclass
class BatchResult:
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'errors': dict(self.errors),
        }


def run_batch(
    pairs: Sequence[Pair],
    recompute: Callable[[str, str], Any],
    max_workers: int = 4,
    label: str = "batch"
) -> BatchResult:
    result = BatchResult(total=len(pairs))
    if not pairs:
        logger.info(f"{label}: nothing to recompute")
        return result

    start = time.time()
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {executor.submit(recompute, c, j): (c, j) for c, j in pairs}
        for future in as_completed(futures):
            candidate_id, job_id = futures[future]
            try:
                future.result()
                result.succeeded += 1
            except Exception as e:
                logger.exception(f"{label}: recompute failed for {candidate_id}/{job_id}")
                result.failed += 1
                result.errors[f"{candidate_id}/{job_id}"] = str(e)

    elapsed = time.time() - start
    logger.info(
        f"{label}: {result.succeeded}/{result.total} recomputed, "
        f"{result.failed} failed in {elapsed:.2f}s"
    )
    return result

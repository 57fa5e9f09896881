#!/usr/bin/env python3
"""
RQ Worker for match recomputation.

Processes recompute tasks queued by RecomputeQueue.

Usage:
    python -m pipeline.worker
    python -m pipeline.worker --burst
    python -m pipeline.worker --verbose
"""

import os
import sys
import argparse
import logging

from redis import Redis
from redis.exceptions import RedisError
from rq import Worker

from core.config_loader import load_config

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def start_worker(burst: bool = False, queues: list = None, redis_url: str = None):
    """Start the RQ worker."""
    redis_url = redis_url or os.environ.get('REDIS_URL', 'redis://localhost:6379/0')

    if queues is None:
        queues = ['recompute']

    logger.info("Starting RQ Worker")
    logger.info(f"Queues: {', '.join(queues)}")
    logger.info(f"Burst mode: {burst}")

    try:
        redis_conn = Redis.from_url(redis_url)
        redis_conn.ping()
        logger.info("Connected to Redis")

        worker = Worker(queues, connection=redis_conn)

        if burst:
            logger.info("Running in burst mode...")
            worker.work(burst=True)
        else:
            logger.info("Worker started. Press Ctrl+C to stop.")
            worker.work()

    except KeyboardInterrupt:
        logger.info("Worker stopped")
    except RedisError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(description='Match recompute worker')
    parser.add_argument('--config', default=os.environ.get('MATCHING_CONFIG', 'config.yaml'))
    parser.add_argument('--burst', action='store_true', help='Process all and exit')
    parser.add_argument('--queues', nargs='+', default=None)
    parser.add_argument('--verbose', action='store_true')

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(args.config)
    # tasks rebuild their context from the same file
    os.environ['MATCHING_CONFIG'] = args.config
    start_worker(
        burst=args.burst,
        queues=args.queues or [config.recompute.queue_name],
        redis_url=config.recompute.redis_url
    )


if __name__ == '__main__':
    main()

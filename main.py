#!/usr/bin/env python3
"""
Command-line entry point for the matching core.

Usage:
    python main.py init-db
    python main.py recompute --candidate C1 --job J1
    python main.py recompute-job J1
    python main.py recompute-candidate C1
    python main.py list --job J1 --limit 20
    python main.py expire-purchases
    python main.py queue-status
"""

import argparse
import json
from concurrent.futures import Future
import logging
import os
import sys
from dataclasses import asdict

from core.app_context import AppContext
from core.config_loader import load_config
from core.dto import MatchFilter, MatchSort
from core.exceptions import MatchingException
from database.init_db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _print(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _queued(handle):
    """RQ job id, or the finished summary when the queue ran the task in-process."""
    return handle.result() if isinstance(handle, Future) else handle


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Multi-factor candidate/job matching')
    parser.add_argument('--config', default=os.environ.get('MATCHING_CONFIG', 'config.yaml'))
    parser.add_argument('--verbose', action='store_true')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('init-db', help='Create tables')

    recompute = sub.add_parser('recompute', help='Recompute one candidate/job pair')
    recompute.add_argument('--candidate', required=True)
    recompute.add_argument('--job', required=True)

    recompute_job = sub.add_parser('recompute-job', help='Recompute a job against all candidates')
    recompute_job.add_argument('job_id')
    recompute_job.add_argument('--queue', action='store_true', help='Enqueue instead of running inline')

    recompute_candidate = sub.add_parser('recompute-candidate', help='Recompute a candidate against all active jobs')
    recompute_candidate.add_argument('candidate_id')
    recompute_candidate.add_argument('--queue', action='store_true', help='Enqueue instead of running inline')

    listing = sub.add_parser('list', help='List matches')
    listing.add_argument('--candidate')
    listing.add_argument('--job')
    listing.add_argument('--min-score', type=int)
    listing.add_argument('--sort', choices=[s.value for s in MatchSort], default=MatchSort.SCORE.value)
    listing.add_argument('--limit', type=int, default=20)
    listing.add_argument('--offset', type=int, default=0)

    sub.add_parser('expire-purchases', help='Time out stale pending purchases')
    sub.add_parser('queue-status', help='Show recompute queue mode and depth')
    return parser


def run(args) -> int:
    config = load_config(args.config)

    if args.command == 'init-db':
        ctx = AppContext.build(config)
        try:
            init_db(ctx.engine)
        finally:
            ctx.close()
        return 0

    ctx = AppContext.build(config)
    try:
        service = ctx.match_service
        if args.command == 'recompute':
            _print(asdict(service.recompute(args.candidate, args.job)))
        elif args.command == 'recompute-job':
            if args.queue:
                _print({'queued': _queued(ctx.recompute_queue.enqueue_job(args.job_id))})
            else:
                _print(service.recompute_job(args.job_id).to_dict())
        elif args.command == 'recompute-candidate':
            if args.queue:
                _print({'queued': _queued(ctx.recompute_queue.enqueue_candidate(args.candidate_id))})
            else:
                _print(service.recompute_candidate(args.candidate_id).to_dict())
        elif args.command == 'list':
            match_filter = MatchFilter(candidate_id=args.candidate, job_id=args.job, min_score=args.min_score)
            views = service.list_matches(match_filter, MatchSort(args.sort), args.limit, args.offset)
            _print([asdict(v) for v in views])
        elif args.command == 'expire-purchases':
            _print({'expired': service.expire_pending_purchases()})
        elif args.command == 'queue-status':
            _print(ctx.recompute_queue.get_queue_status())
    finally:
        ctx.close()
    return 0


def main() -> int:
    args = build_parser().parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        return run(args)
    except MatchingException as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())

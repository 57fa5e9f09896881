#!/usr/bin/env python3
"""Unit tests for the RQ worker entry point (Redis and RQ mocked)."""

import unittest
from unittest.mock import patch

from redis.exceptions import ConnectionError as RedisConnectionError

from pipeline.worker import start_worker


class TestStartWorker(unittest.TestCase):

    @patch('pipeline.worker.Worker')
    @patch('pipeline.worker.Redis')
    def test_burst_mode(self, mock_redis, mock_worker):
        start_worker(burst=True, queues=['recompute'], redis_url='redis://r:6379/0')

        mock_redis.from_url.assert_called_once_with('redis://r:6379/0')
        mock_worker.assert_called_once_with(['recompute'], connection=mock_redis.from_url.return_value)
        mock_worker.return_value.work.assert_called_once_with(burst=True)

    @patch('pipeline.worker.Worker')
    @patch('pipeline.worker.Redis')
    def test_redis_unavailable_exits(self, mock_redis, mock_worker):
        mock_redis.from_url.return_value.ping.side_effect = RedisConnectionError("refused")
        with self.assertRaises(SystemExit):
            start_worker()
        mock_worker.assert_not_called()


if __name__ == "__main__":
    unittest.main()

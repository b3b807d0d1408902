#!/usr/bin/env python3
"""
Metrics Collection for load test timing.

Collects per-request and per-batch timings of a single run in memory and
hands them back as a RunResult when the run ends.
"""

import time
from contextlib import contextmanager
from datetime import date
from typing import Callable, List, Optional
import logging

from .models.metrics import BatchTiming, RequestTiming, RunResult

logger = logging.getLogger(__name__)


class MetricsCollector:
    """
    Collects timing metrics for one run.

    Provides a timing context manager for requests and records batch
    windows. Nothing is written to disk.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        """Initialize metrics collector."""
        self._clock = clock
        self._mode: Optional[str] = None
        self._run_start_time: Optional[float] = None
        self._requests: List[RequestTiming] = []
        self._batches: List[BatchTiming] = []

    def start_run(self, mode: str) -> None:
        """Start tracking a new run."""
        self._mode = mode
        self._run_start_time = self._clock()
        self._requests = []
        self._batches = []
        logger.debug(f"Started tracking {mode} run")

    def end_run(self) -> RunResult:
        """End tracking the current run and return its result."""
        if self._run_start_time is None:
            raise RuntimeError("No active run to end")

        result = RunResult(
            mode=self._mode or "unknown",
            requests=sorted(self._requests, key=lambda timing: timing.index),
            batches=list(self._batches),
            total_duration=self._clock() - self._run_start_time
        )

        self._mode = None
        self._run_start_time = None
        self._requests = []
        self._batches = []

        logger.debug(f"Completed {result.mode} run of {result.request_count} requests in {result.total_duration:.2f}s")
        return result

    @contextmanager
    def time_request(self, index: int, day: date):
        """
        Context manager timing one request.

        Yields the RequestTiming, whose duration is filled in on exit.
        Failures are recorded and re-raised.
        """
        timing = RequestTiming(index=index, date=day, duration=0.0, success=True)
        start_time = self._clock()

        try:
            yield timing
        except Exception as e:
            timing.success = False
            timing.error_message = str(e)
            raise
        finally:
            timing.duration = self._clock() - start_time
            self._requests.append(timing)
            logger.debug(f"Request {index} took {timing.duration:.3f}s (success: {timing.success})")

    def record_batch(self, number: int, size: int, duration: float, slept: float = 0.0) -> BatchTiming:
        """Record the wall-clock window of a concurrent batch."""
        batch = BatchTiming(number=number, size=size, duration=duration, slept=slept)
        self._batches.append(batch)
        return batch

    @property
    def requests_recorded(self) -> int:
        return len(self._requests)

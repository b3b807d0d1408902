#!/usr/bin/env python3
"""
Request driver for the load test.

Issues report requests either one at a time with a pacing interval, or in
fixed-width concurrent batches that are padded to a minimum window.
"""

import asyncio
import itertools
import logging
import time
from typing import Awaitable, Callable, Optional

from .config import LoadTestConfig
from .dates import dates_walking_back
from .exceptions import AuthenticationError, BatchRequestError
from .formatters import (
    format_batch_sleep,
    format_batch_start,
    format_batch_took,
    format_request,
    format_sleep,
    format_summary,
)
from .metrics_collector import MetricsCollector
from .models.metrics import RunResult
from .models.report import ReportRequest

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class BatchPacer:
    """
    Pads each batch to a minimum wall-clock window.

    A batch that finished early sleeps the remainder; a batch that already
    took the whole window proceeds immediately.
    """

    def __init__(self, window: float = 1.0, sleep: SleepFunc = asyncio.sleep):
        self.window = window
        self._sleep = sleep

    def remaining(self, took: float) -> float:
        return max(self.window - took, 0.0)

    async def pad(self, took: float) -> float:
        """Sleep out the rest of the window. Returns the seconds slept."""
        remaining = self.remaining(took)
        if remaining > 0:
            await self._sleep(remaining)
        return remaining


class RequestDriver:
    """
    Runs a load test against a reporting client.

    The client must provide ``async fetch_report(ReportRequest)``. It is shared
    by every in-flight request.
    """

    def __init__(self,
                 client,
                 config: LoadTestConfig,
                 sleep: SleepFunc = asyncio.sleep,
                 clock: Callable[[], float] = time.perf_counter,
                 emit: Optional[Callable[[str], None]] = None):
        """
        Initialize the driver.

        Args:
            client: Reporting client used for every request
            config: Run configuration
            sleep: Coroutine function used for pacing
            clock: Monotonic clock in seconds
            emit: Line printer for progress output (defaults to print)
        """
        self.client = client
        self.config = config
        self._sleep = sleep
        self._clock = clock
        self._emit = emit or print
        self.metrics = MetricsCollector(clock=clock)
        self.pacer = BatchPacer(window=config.batch_window, sleep=sleep)

    async def run(self) -> RunResult:
        """
        Execute the configured number of requests.

        Returns:
            RunResult with every request and batch timing

        Raises:
            ReportRequestError: First failure in sequential mode
            BatchRequestError: All failures of the first failing batch
        """
        mode = "sequential" if self.config.is_sequential else "concurrent"
        logger.info(f"Starting {mode} run: {self.config.count} requests against view {self.config.view_id}")
        self.metrics.start_run(mode)

        if self.config.is_sequential:
            await self._run_sequential()
        else:
            await self._run_concurrent()

        result = self.metrics.end_run()
        for line in format_summary(result):
            self._emit(line)
        return result

    async def _run_sequential(self) -> None:
        config = self.config
        if config.walk_back:
            days = dates_walking_back(config.start_date, config.count)
        else:
            days = itertools.repeat(config.start_date, config.count)

        for index, day in enumerate(days, start=1):
            await self._request(index, day)

            await self._sleep(config.interval)
            self._emit(format_sleep(config.interval))

    async def _run_concurrent(self) -> None:
        config = self.config
        if config.walk_back:
            logger.warning("--walk-back only applies to sequential runs, ignoring it")

        done = 0
        number = 0
        while done < config.count:
            number += 1
            size = min(config.concurrency, config.count - done)
            await self._run_batch(number, first_index=done + 1, size=size)
            done += size

    async def _run_batch(self, number: int, first_index: int, size: int) -> None:
        """Dispatch size requests, wait for all of them, then pad the window."""
        self._emit(format_batch_start(number, size, first_index - 1))
        batch_start = self._clock()

        outcomes = await asyncio.gather(
            *(self._request(first_index + offset, self.config.start_date) for offset in range(size)),
            return_exceptions=True
        )
        took = self._clock() - batch_start

        errors = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
        if errors:
            self.metrics.record_batch(number, size, took)
            logger.error(f"Batch {number}: {len(errors)}/{size} requests failed, aborting run")
            if all(isinstance(error, AuthenticationError) for error in errors):
                raise errors[0]
            raise BatchRequestError(number, errors)

        self._emit(format_batch_took(number, took))
        slept = await self.pacer.pad(took)
        if slept:
            self._emit(format_batch_sleep(number, slept))
        self.metrics.record_batch(number, size, took, slept)

    async def _request(self, index: int, day) -> None:
        request = ReportRequest(
            view_id=self.config.view_id,
            date=day,
            metric_expression=self.config.metric_expression
        )
        try:
            with self.metrics.time_request(index, day) as timing:
                await self.client.fetch_report(request)
        finally:
            self._emit(format_request(timing))

#!/usr/bin/env python3
"""
Formatting utilities for load test progress and timing output.

Output is meant for humans reading a terminal, not for parsing.
"""

from typing import List

from .models.metrics import RequestTiming, RunResult


def format_seconds(seconds: float) -> str:
    return f"{seconds:.3f}s"


def format_request(timing: RequestTiming) -> str:
    """Format the timing line of a single request."""
    line = f"request {timing.index:03d}: took {format_seconds(timing.duration)}"
    if not timing.success:
        line += f" (failed: {timing.error_message})"
    return line


def format_sleep(seconds: float) -> str:
    return f"sleep {format_seconds(seconds)}"


def format_batch_start(number: int, size: int, done: int) -> str:
    return f"batch {number}: dispatching {size} requests (done so far: {done})"


def format_batch_took(number: int, duration: float) -> str:
    return f"batch {number}: took {format_seconds(duration)}"


def format_batch_sleep(number: int, seconds: float) -> str:
    return f"batch {number}: {format_sleep(seconds)}"


def format_summary(result: RunResult) -> List[str]:
    """Format the aggregate lines printed at the end of a run."""
    lines = [
        "",
        f"all: took {format_seconds(result.total_duration)}",
        f"mode: {result.mode}",
        f"requests: {result.request_count} ({result.success_count} ok, {result.failure_count} failed)",
    ]

    if result.success_count:
        lines.append(
            "latency: "
            f"min {format_seconds(result.min_latency)} / "
            f"mean {format_seconds(result.mean_latency)} / "
            f"max {format_seconds(result.max_latency)}"
        )

    if result.batches:
        slept = sum(batch.slept for batch in result.batches)
        lines.append(f"batches: {len(result.batches)} (padding slept {format_seconds(slept)})")

    return lines

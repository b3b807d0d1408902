#!/usr/bin/env python3
"""
Metrics and performance data models.

Contains data structures for tracking request and batch timings of a run.
"""

from datetime import date
from typing import Optional, List
from dataclasses import dataclass, field

@dataclass
class RequestTiming:
    """Timing and outcome of a single report request."""
    index: int
    date: date
    duration: float
    success: bool
    error_message: Optional[str] = None
@dataclass
class BatchTiming:
    """Wall-clock timing of one concurrent batch."""
    number: int
    size: int
    duration: float
    slept: float = 0.0

@dataclass
class RunResult:
    """Complete result of a load test run."""
    mode: str  # "sequential" or "concurrent"
    requests: List[RequestTiming] = field(default_factory=list)
    batches: List[BatchTiming] = field(default_factory=list)
    total_duration: float = 0.0

    @property
    def request_count(self) -> int:
        return len(self.requests)

    @property
    def success_count(self) -> int:
        return sum(1 for timing in self.requests if timing.success)

    @property
    def failure_count(self) -> int:
        return self.request_count - self.success_count

    def _successful_durations(self) -> List[float]:
        return [timing.duration for timing in self.requests if timing.success]

    @property
    def min_latency(self) -> float:
        durations = self._successful_durations()
        return min(durations) if durations else 0.0

    @property
    def max_latency(self) -> float:
        durations = self._successful_durations()
        return max(durations) if durations else 0.0

    @property
    def mean_latency(self) -> float:
        durations = self._successful_durations()
        return sum(durations) / len(durations) if durations else 0.0

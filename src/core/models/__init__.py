#!/usr/bin/env python3
"""
Core data models for the load tester.

Contains all data structures used throughout the application.
"""

from .report import Secret, ReportRequest
from .metrics import RequestTiming, BatchTiming, RunResult

__all__ = ['Secret', 'ReportRequest', 'RequestTiming', 'BatchTiming', 'RunResult']

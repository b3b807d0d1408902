#!/usr/bin/env python3
"""
Standardized exception hierarchy for the load tester.

Every failure the tool can hit maps onto one of these types so commands can
turn it into a message and an exit code in one place.
"""

from typing import Optional, Dict, Any, List


class LoadTestError(Exception):
    """Base exception for all load tester errors."""

    exit_code = 1

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Configuration-related exceptions
class ConfigurationError(LoadTestError):
    """Configuration is invalid or missing."""

    exit_code = 2

    def __init__(self, config_key: str, issue: str):
        message = f"Configuration error for {config_key}: {issue}"
        context = {
            'config_key': config_key,
            'issue': issue
        }
        super().__init__(message, context=context)


class SecretFileError(ConfigurationError):
    """Secret file is missing, unreadable or malformed."""

    def __init__(self, path: str, issue: str):
        super().__init__('secret', f"{path}: {issue}")
        self.context['path'] = path


class InvalidDateError(ConfigurationError):
    """Date string could not be parsed."""

    def __init__(self, value: str, expected: str = "YYYY-MM-DD, 'today' or 'yesterday'"):
        super().__init__('start_date', f"invalid date {value!r}, expected {expected}")
        self.context['value'] = value


# Authentication-related exceptions
class AuthenticationError(LoadTestError):
    """OAuth2 token exchange failed."""

    exit_code = 3

    def __init__(self, client_id: str, original_error: Exception):
        message = f"Token refresh failed for client {client_id}: {original_error}"
        context = {
            'client_id': client_id,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


# Request-related exceptions
class ReportRequestError(LoadTestError):
    """A single report request failed."""

    exit_code = 4

    def __init__(self, view_id: str, date: str, reason: str, status: Optional[int] = None):
        if status is not None:
            message = f"Report request for view {view_id} on {date} failed with HTTP {status}: {reason}"
        else:
            message = f"Report request for view {view_id} on {date} failed: {reason}"
        context = {
            'view_id': view_id,
            'date': date,
            'status': status,
            'reason': reason
        }
        super().__init__(message, context=context)
        self.status = status


class BatchRequestError(LoadTestError):
    """One or more requests of a concurrent batch failed."""

    exit_code = 4

    def __init__(self, batch_number: int, errors: List[BaseException]):
        lines = [f"{len(errors)} of the requests in batch {batch_number} failed:"]
        lines.extend(f"  * {error}" for error in errors)
        context = {
            'batch_number': batch_number,
            'errors': [str(error) for error in errors]
        }
        super().__init__("\n".join(lines), context=context)
        self.batch_number = batch_number
        self.errors = list(errors)

#!/usr/bin/env python3
"""
Report request data models.

Represents the stored credentials and the per-call report request.
"""

from datetime import date
from typing import Dict, Any
from dataclasses import dataclass

from ..dates import format_date

DEFAULT_METRIC_EXPRESSION = "ga:sessions"


@dataclass(frozen=True)
class Secret:
    """OAuth2 credentials and target view read from the secret file."""
    view_id: str
    client_id: str
    client_secret: str
    refresh_token: str

    # Keys of the JSON secret file, in field order
    JSON_KEYS = ('viewId', 'clientId', 'clientSecret', 'refreshToken')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Secret':
        """Create from the decoded secret file. Keys must already be validated."""
        return cls(
            view_id=data['viewId'],
            client_id=data['clientId'],
            client_secret=data['clientSecret'],
            refresh_token=data['refreshToken']
        )

    def __repr__(self) -> str:
        return f"Secret(view_id={self.view_id!r}, client_id={self.client_id!r})"


@dataclass(frozen=True)
class ReportRequest:
    """
    A single-day report request.

    Built fresh for every call and discarded once the call returns.
    """
    view_id: str
    date: date
    metric_expression: str = DEFAULT_METRIC_EXPRESSION

    @property
    def date_str(self) -> str:
        return format_date(self.date)

    def to_body(self) -> Dict[str, Any]:
        """Build the reports:batchGet request body."""
        day = self.date_str
        return {
            "reportRequests": [
                {
                    "viewId": self.view_id,
                    "dateRanges": [{"startDate": day, "endDate": day}],
                    "metrics": [{"expression": self.metric_expression}],
                }
            ]
        }

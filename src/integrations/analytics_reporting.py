#!/usr/bin/env python3
"""
Google Analytics Reporting API v4 integration.

Loads the stored OAuth2 credentials from the JSON secret file and provides
an async client issuing reports:batchGet calls over a shared aiohttp session.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import aiohttp
import google.auth.transport.requests
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials

from core.config import ApplicationConfig, DEFAULT_QUOTA_USER, DEFAULT_REPORTING_ENDPOINT
from core.exceptions import AuthenticationError, ReportRequestError, SecretFileError
from core.models.report import ReportRequest, Secret

logger = logging.getLogger(__name__)

ANALYTICS_SCOPES = [
    "https://www.googleapis.com/auth/analytics",
    "https://www.googleapis.com/auth/analytics.readonly",
]

BATCH_GET_PATH = "/v4/reports:batchGet"


def load_secret(path: Union[str, Path]) -> Secret:
    """
    Read and validate the JSON secret file.

    Args:
        path: Path to a file of the form
              {"viewId", "clientId", "clientSecret", "refreshToken"}

    Returns:
        Parsed Secret

    Raises:
        SecretFileError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    if not path.is_file():
        raise SecretFileError(str(path), "file does not exist")

    try:
        raw = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise SecretFileError(str(path), f"cannot read file ({e})") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SecretFileError(str(path), f"invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise SecretFileError(str(path), "expected a JSON object")

    missing = [key for key in Secret.JSON_KEYS if not isinstance(data.get(key), str) or not data[key].strip()]
    if missing:
        raise SecretFileError(str(path), f"missing or empty keys: {', '.join(missing)}")

    logger.debug(f"Loaded secret for view {data['viewId']} from {path}")
    return Secret.from_dict(data)


def build_credentials(secret: Secret, token_uri: str) -> Credentials:
    """Create refresh-token credentials; no access token until the first refresh."""
    return Credentials(
        token=None,
        refresh_token=secret.refresh_token,
        token_uri=token_uri,
        client_id=secret.client_id,
        client_secret=secret.client_secret,
        scopes=ANALYTICS_SCOPES,
    )


class ReportingClient:
    """
    Async client for the Analytics Reporting API.

    Must be used as an async context manager. One instance is shared by all
    concurrent requests of a run; token refreshes are serialized.
    """

    def __init__(self,
                 credentials,
                 client_id: str = "",
                 endpoint: str = DEFAULT_REPORTING_ENDPOINT,
                 quota_user: str = DEFAULT_QUOTA_USER,
                 timeout: float = 30.0):
        """
        Initialize reporting client.

        Args:
            credentials: google-auth credentials (token, valid, refresh())
            client_id: OAuth client id, used in error messages
            endpoint: API base URL
            quota_user: quotaUser value attached to every call
            timeout: Total request timeout in seconds
        """
        self.credentials = credentials
        self.client_id = client_id
        self.endpoint = endpoint.rstrip('/')
        self.quota_user = quota_user
        self.timeout = timeout

        self._session: Optional[aiohttp.ClientSession] = None
        self._refresh_lock = asyncio.Lock()
        self._auth_request = google.auth.transport.requests.Request()

    async def __aenter__(self):
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers={'User-Agent': 'ga-loadtest/1.0'}
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._session:
            await self._session.close()
            self._session = None
        self._auth_request.session.close()

    async def authenticate(self) -> None:
        """
        Make sure the credentials hold a valid access token.

        Raises:
            AuthenticationError: If the refresh-token exchange fails
        """
        async with self._refresh_lock:
            if self.credentials.valid:
                return

            logger.info(f"Refreshing access token for client {self.client_id}")
            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(None, self.credentials.refresh, self._auth_request)
            except (RefreshError, TransportError) as e:
                raise AuthenticationError(self.client_id, e) from e

    async def fetch_report(self, request: ReportRequest) -> Dict[str, Any]:
        """
        Fetch a single report.

        Args:
            request: Report request to send

        Returns:
            Decoded reports:batchGet response

        Raises:
            AuthenticationError: If the token could not be refreshed
            ReportRequestError: On HTTP errors, transport errors or timeouts
        """
        if not self._session:
            raise RuntimeError("ReportingClient must be used as async context manager")

        await self.authenticate()

        url = f"{self.endpoint}{BATCH_GET_PATH}"
        headers = {'Authorization': f"Bearer {self.credentials.token}"}
        params = {'quotaUser': self.quota_user}

        try:
            async with self._session.post(url, json=request.to_body(), params=params, headers=headers) as response:
                if response.status >= 400:
                    reason = await self._error_reason(response)
                    raise ReportRequestError(request.view_id, request.date_str, reason, status=response.status)
                try:
                    return await response.json(content_type=None)
                except ValueError:
                    raise ReportRequestError(request.view_id, request.date_str, "invalid JSON response",
                                             status=response.status) from None
        except asyncio.TimeoutError:
            raise ReportRequestError(request.view_id, request.date_str, f"timed out after {self.timeout}s") from None
        except aiohttp.ClientError as e:
            raise ReportRequestError(request.view_id, request.date_str, str(e) or e.__class__.__name__) from e

    @staticmethod
    async def _error_reason(response: aiohttp.ClientResponse) -> str:
        """Extract the API error message from an error response."""
        text = await response.text()
        try:
            data = json.loads(text)
        except ValueError:
            return text.strip() or response.reason or "unknown error"

        error = data.get('error') if isinstance(data, dict) else None
        if isinstance(error, dict) and error.get('message'):
            return str(error['message'])
        return text.strip() or response.reason or "unknown error"


def load_client(secret_path: Union[str, Path],
                app_config: ApplicationConfig,
                quota_user: Optional[str] = None) -> Tuple[ReportingClient, Secret]:
    """
    Load the secret file and construct an authenticated reporting client.

    Authentication itself happens on the first call (or explicitly through
    ReportingClient.authenticate()).

    Raises:
        SecretFileError: If the secret file cannot be loaded
    """
    secret = load_secret(secret_path)
    credentials = build_credentials(secret, app_config.token_uri)
    client = ReportingClient(
        credentials,
        client_id=secret.client_id,
        endpoint=app_config.reporting_endpoint,
        quota_user=quota_user or app_config.quota_user,
        timeout=app_config.request_timeout,
    )
    return client, secret

import asyncio
import json
import sys
from datetime import date
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from core.config import ApplicationConfig, LoadTestConfig  # noqa: E402
from core.container import Container  # noqa: E402
from core.exceptions import AuthenticationError, ReportRequestError  # noqa: E402
from core.models.report import ReportRequest, Secret  # noqa: E402


SECRET_DATA = {
    "viewId": "123456",
    "clientId": "client-id.apps.googleusercontent.com",
    "clientSecret": "client-secret",
    "refreshToken": "refresh-token",
}


class FakeClock:
    """Deterministic clock; sleeping advances time instantly."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeReportingClient:
    """Stands in for ReportingClient; tracks calls and concurrency."""

    def __init__(
        self,
        clock: Optional[FakeClock] = None,
        latency: float = 0.0,
        fail_on: Iterable[int] = (),
        auth_error: Optional[AuthenticationError] = None,
    ) -> None:
        self.clock = clock
        self.latency = latency
        self.fail_on = set(fail_on)
        self.auth_error = auth_error
        self.requests: List[ReportRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.authenticate_calls = 0
        self.entered = False
        self.closed = False
        self.credentials = SimpleNamespace(expiry=None)

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    async def authenticate(self) -> None:
        self.authenticate_calls += 1
        if self.auth_error is not None:
            raise self.auth_error

    async def fetch_report(self, request: ReportRequest) -> Dict[str, Any]:
        call_number = len(self.requests) + 1
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Let other dispatched requests start before this one finishes
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            if self.clock is not None:
                self.clock.advance(self.latency)
            if self.auth_error is not None:
                raise self.auth_error
            if call_number in self.fail_on:
                raise ReportRequestError(request.view_id, request.date_str, f"call {call_number} rejected", status=429)
            return {"reports": []}
        finally:
            self.in_flight -= 1


class FakeConfigManager:
    def __init__(self, config: ApplicationConfig) -> None:
        self.config = config
        self.logging_updates: List[bool] = []

    def get_config(self, force_reload: bool = False) -> ApplicationConfig:
        return self.config

    def update_logging(self, verbose: bool = False) -> None:
        self.logging_updates.append(verbose)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def secret() -> Secret:
    return Secret.from_dict(SECRET_DATA)


@pytest.fixture
def secret_file(tmp_path) -> Path:
    path = tmp_path / "secret.json"
    path.write_text(json.dumps(SECRET_DATA), encoding="utf-8")
    return path


@pytest.fixture
def load_config_factory():
    def _factory(**overrides) -> LoadTestConfig:
        values = {
            "view_id": SECRET_DATA["viewId"],
            "count": 5,
            "concurrency": 0,
            "interval": 1.0,
            "start_date": date(2019, 9, 25),
        }
        values.update(overrides)
        return LoadTestConfig(**values)

    return _factory


@pytest.fixture
def fake_client_factory(clock):
    def _factory(latency: float = 0.0, fail_on: Iterable[int] = (), auth_error=None) -> FakeReportingClient:
        return FakeReportingClient(clock=clock, latency=latency, fail_on=fail_on, auth_error=auth_error)

    return _factory


@pytest.fixture
def container_factory(clock, secret):
    """Build a container wired with fakes; returns (container, client)."""

    def _factory(client: Optional[FakeReportingClient] = None, client_factory=None):
        client = client or FakeReportingClient(clock=clock)
        app_config = ApplicationConfig()

        def _client_factory(secret_path, config, quota_user=None):
            return client, secret

        container = Container()
        container.register_instance("config", app_config)
        container.register_instance("config_manager", FakeConfigManager(app_config))
        container.register_instance("client_factory", client_factory or _client_factory)
        container.register_instance("sleep", clock.sleep)
        return container, client

    return _factory

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import httpx
import pytest

from obsload.config import EndpointWeightTable, RunConfig, TargetConfig

BASE_URL = "http://demo.test"


@dataclass
class FakeService:
    """In-process stand-in for the demo service, served through httpx.MockTransport."""

    status_code: int = 200
    health_status: int = 200
    delay_sec: float = 0.0
    health_error: Exception | None = None
    request_error: Exception | None = None
    requests: list[httpx.Request] = field(default_factory=list)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/health":
            if self.health_error is not None:
                raise self.health_error
            return httpx.Response(self.health_status, json={"status": "healthy", "timestamp": "now"})
        if self.delay_sec:
            await asyncio.sleep(self.delay_sec)
        if self.request_error is not None:
            raise self.request_error
        return httpx.Response(self.status_code, json={"path": request.url.path})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path != "/health"]


@pytest.fixture
def service() -> FakeService:
    return FakeService()


def build_config(**overrides: object) -> RunConfig:
    params: dict[str, object] = {
        "target": TargetConfig(base_url=BASE_URL, timeout_sec=2.0),
        "requests_per_second": 50.0,
        "workers": 5,
        "duration_sec": 0.3,
        "endpoints": EndpointWeightTable.from_mapping({"/api/fast": 0.7, "/api/slow": 0.3}),
        "seed": 7,
    }
    params.update(overrides)
    return RunConfig(**params)  # type: ignore[arg-type]


@pytest.fixture
def make_config():
    return build_config

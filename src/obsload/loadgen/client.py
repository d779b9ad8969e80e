from __future__ import annotations

import time

import httpx

from obsload.config import TargetConfig
from obsload.errors import HealthCheckError
from obsload.metrics import ErrorType, RequestResult


def new_client(
    target: TargetConfig, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers=dict(target.headers),
        timeout=target.timeout_sec,
        transport=transport,
    )


async def send_request(
    client: httpx.AsyncClient,
    target: TargetConfig,
    endpoint: str,
    worker_id: int,
    sequence: int,
) -> RequestResult:
    """Issue one GET. Transport failures come back as status 0, never raised."""
    start_wall = time.time()
    start_mono = time.perf_counter()
    try:
        resp = await client.get(target.url_for(endpoint))
        return RequestResult(
            endpoint=endpoint,
            worker_id=worker_id,
            sequence=sequence,
            status_code=resp.status_code,
            duration_ms=(time.perf_counter() - start_mono) * 1000.0,
            timestamp=start_wall,
        )
    except httpx.TimeoutException as exc:
        err, message = ErrorType.TIMEOUT, _describe(exc)
    except httpx.ConnectError as exc:
        err, message = ErrorType.CONNECT, _describe(exc)
    except httpx.ReadError as exc:
        err, message = ErrorType.READ, _describe(exc)
    except httpx.HTTPError as exc:
        err, message = ErrorType.OTHER, _describe(exc)
    return RequestResult(
        endpoint=endpoint,
        worker_id=worker_id,
        sequence=sequence,
        status_code=0,
        duration_ms=(time.perf_counter() - start_mono) * 1000.0,
        timestamp=start_wall,
        error=message,
        error_type=err,
    )


async def check_health(
    target: TargetConfig, transport: httpx.AsyncBaseTransport | None = None
) -> None:
    url = target.url_for(target.health_path)
    async with new_client(target, transport) as client:
        try:
            resp = await client.get(url)
        except httpx.InvalidURL as exc:
            raise HealthCheckError(url, 0, f"invalid URL: {exc}") from exc
        except httpx.HTTPError as exc:
            raise HealthCheckError(url, 0, _describe(exc)) from exc
    if resp.status_code != 200:
        raise HealthCheckError(url, resp.status_code)


def _describe(exc: httpx.HTTPError) -> str:
    return str(exc) or type(exc).__name__

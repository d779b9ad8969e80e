from __future__ import annotations

import asyncio
import logging
import time

import httpx

from obsload.config import RunConfig
from obsload.loadgen.client import send_request
from obsload.loadgen.selector import EndpointSelector
from obsload.metrics import RequestResult

logger = logging.getLogger(__name__)


async def run_worker(
    worker_id: int,
    config: RunConfig,
    selector: EndpointSelector,
    stop: asyncio.Event,
    results: asyncio.Queue[RequestResult | None],
    client: httpx.AsyncClient,
    started_mono: float,
) -> int:
    """Send paced requests until ``stop`` is set or the run deadline passes.

    Returns the number of requests issued.
    """
    deadline = _deadline(config, started_mono)
    interval_sec = config.pacing_interval_ms / 1000.0
    sequence = 0
    while not _should_stop(stop, deadline):
        endpoint = selector.select()
        result = await send_request(client, config.target, endpoint, worker_id, sequence)
        sequence += 1
        await results.put(result)
        if result.error:
            logger.debug(
                "Worker %d: %s - error %s (%.1fms)",
                worker_id + 1,
                endpoint,
                result.error,
                result.duration_ms,
            )
        else:
            logger.debug(
                "Worker %d: %s - %d (%.1fms)",
                worker_id + 1,
                endpoint,
                result.status_code,
                result.duration_ms,
            )
        if _should_stop(stop, deadline):
            break
        await _pace(stop, interval_sec, deadline)
    logger.debug("Worker %d finished after %d requests", worker_id + 1, sequence)
    return sequence


def _deadline(config: RunConfig, started_mono: float) -> float | None:
    if config.duration_sec is None:
        return None
    return started_mono + config.duration_sec


def _should_stop(stop: asyncio.Event, deadline: float | None) -> bool:
    if stop.is_set():
        return True
    return deadline is not None and time.perf_counter() >= deadline


async def _pace(stop: asyncio.Event, interval_sec: float, deadline: float | None) -> None:
    delay = interval_sec
    if deadline is not None:
        delay = min(delay, max(0.0, deadline - time.perf_counter()))
    if delay <= 0:
        await asyncio.sleep(0)
        return
    try:
        await asyncio.wait_for(stop.wait(), timeout=delay)
    except asyncio.TimeoutError:
        pass

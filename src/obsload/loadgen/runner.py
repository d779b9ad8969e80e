from __future__ import annotations

import asyncio
import logging
import time

import httpx

from obsload.config import RunConfig
from obsload.loadgen.client import check_health, new_client
from obsload.loadgen.selector import EndpointSelector
from obsload.loadgen.worker import run_worker
from obsload.metrics import Aggregator, RunStats

logger = logging.getLogger(__name__)


class LoadTest:
    """One load test run: health probe, N paced workers, one aggregator.

    ``stop()`` may be called from any coroutine on the same loop while
    ``run()`` is in progress. Workers notice it within one pacing interval;
    requests already in flight are allowed to finish. An instance runs once;
    build a new one for another run.
    """

    def __init__(
        self,
        config: RunConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.aggregator = Aggregator()
        self._stop = asyncio.Event()
        self._started = False

    @property
    def stats(self) -> RunStats:
        return self.aggregator.stats

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        if not self._stop.is_set():
            logger.info("Stop requested, waiting for workers to finish")
        self._stop.set()

    async def run(self) -> RunStats:
        config = self.config
        if self._started:
            msg = "LoadTest.run() was already called on this instance"
            raise RuntimeError(msg)
        self._started = True
        config.validate()
        await check_health(config.target, self.transport)
        logger.info(
            "Starting load test against %s: %.1f req/s, %d workers, %s",
            config.target.base_url,
            config.requests_per_second,
            config.workers,
            f"{config.duration_sec:g}s" if config.duration_sec is not None else "until stopped",
        )

        self.aggregator.start()
        consumer = asyncio.create_task(self.aggregator.consume())
        started_mono = time.perf_counter()
        tasks = [
            asyncio.create_task(self._worker(worker_id, started_mono))
            for worker_id in range(config.workers)
        ]
        try:
            counts = await asyncio.gather(*tasks)
        except BaseException:
            self._stop.set()
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        finally:
            await self.aggregator.close()
            await consumer
        logger.info("All %d workers finished, %d requests sent", len(counts), sum(counts))
        return self.stats

    async def _worker(self, worker_id: int, started_mono: float) -> int:
        selector = EndpointSelector.for_worker(self.config.endpoints, worker_id, self.config.seed)
        async with new_client(self.config.target, self.transport) as client:
            return await run_worker(
                worker_id,
                self.config,
                selector,
                self._stop,
                self.aggregator.queue,
                client,
                started_mono,
            )


async def run_load_test(
    config: RunConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RunStats:
    return await LoadTest(config, transport).run()

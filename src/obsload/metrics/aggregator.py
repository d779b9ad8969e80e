from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np
import pandas as pd

from obsload.metrics.models import RequestResult, RunStats

BREAKDOWN_COLUMNS = ["endpoint", "requests", "failures", "error_rate", "mean_ms", "p95_ms"]
DEFAULT_MAX_RESULTS = 100_000


@dataclass(slots=True)
class Aggregator:
    """Single consumer of worker results.

    Workers only put ``RequestResult`` events on ``queue``; ``consume`` is the
    one place ``stats`` changes. ``None`` on the queue ends the stream.

    ``stats`` counts every result. ``results`` keeps at most ``max_results``
    of them as a uniform reservoir sample, which is what the latency
    percentiles and the per-endpoint table are computed from.
    """

    queue: asyncio.Queue[RequestResult | None] = field(default_factory=asyncio.Queue)
    stats: RunStats = field(default_factory=RunStats)
    results: list[RequestResult] = field(default_factory=list)
    max_results: int = DEFAULT_MAX_RESULTS
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def start(self) -> None:
        self.stats.started_at = time.time()

    async def consume(self) -> RunStats:
        while True:
            result = await self.queue.get()
            if result is None:
                break
            self.apply(result)
        self.stats.finished_at = time.time()
        return self.stats

    async def close(self) -> None:
        await self.queue.put(None)

    @property
    def sampled(self) -> bool:
        return len(self.results) < self.stats.total_count

    def apply(self, result: RequestResult) -> None:
        self.stats.total_count += 1
        if len(self.results) < self.max_results:
            self.results.append(result)
        else:
            slot = self.rng.randrange(self.stats.total_count)
            if slot < self.max_results:
                self.results[slot] = result
        self.stats.summed_duration_ms += result.duration_ms
        if result.success:
            self.stats.success_count += 1
        else:
            self.stats.failure_count += 1


@dataclass(frozen=True, slots=True)
class LatencySummary:
    p50_ms: float
    p95_ms: float
    p99_ms: float
    max_ms: float


def latency_summary(results: Iterable[RequestResult]) -> LatencySummary:
    latencies = [r.duration_ms for r in results if r.duration_ms >= 0]
    if not latencies:
        return LatencySummary(0.0, 0.0, 0.0, 0.0)
    p50, p95, p99 = np.percentile(latencies, [50, 95, 99])
    return LatencySummary(
        p50_ms=float(p50),
        p95_ms=float(p95),
        p99_ms=float(p99),
        max_ms=float(np.max(latencies)),
    )


def endpoint_breakdown(results: Iterable[RequestResult]) -> pd.DataFrame:
    frame = pd.DataFrame(
        [
            {
                "endpoint": r.endpoint,
                "duration_ms": r.duration_ms,
                "failed": not r.success,
            }
            for r in results
        ]
    )
    if frame.empty:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS)
    grouped = frame.groupby("endpoint", sort=False)
    table = pd.DataFrame(
        {
            "requests": grouped.size(),
            "failures": grouped["failed"].sum().astype(int),
            "mean_ms": grouped["duration_ms"].mean(),
            "p95_ms": grouped["duration_ms"].quantile(0.95),
        }
    )
    table["error_rate"] = table["failures"] / table["requests"]
    table = table.reset_index()[BREAKDOWN_COLUMNS]
    return table.sort_values("requests", ascending=False, kind="stable").reset_index(drop=True)

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from obsload.metrics import RequestResult, RunStats, endpoint_breakdown, latency_summary

DEFAULT_ENDPOINT_LATENCY_LIMITS_MS: dict[str, float] = {
    "/api/fast": 100.0,
    "/api/medium": 500.0,
    "/api/slow": 5000.0,
    "/api/unreliable": 2000.0,
}


@dataclass(frozen=True, slots=True)
class Threshold:
    name: str
    limit: float
    observed: float | None  # None when the run produced no data to judge

    @property
    def passed(self) -> bool | None:
        if self.observed is None:
            return None
        return self.observed < self.limit

    @property
    def verdict(self) -> str:
        if self.passed is None:
            return "N/A"
        return "PASS" if self.passed else "FAIL"


def evaluate_thresholds(
    stats: RunStats,
    results: Sequence[RequestResult],
    p95_limit_ms: float = 500.0,
    failure_rate_limit: float = 0.1,
    endpoint_limits_ms: Mapping[str, float] = DEFAULT_ENDPOINT_LATENCY_LIMITS_MS,
) -> list[Threshold]:
    empty = stats.total_count == 0
    latency = latency_summary(results)
    thresholds = [
        Threshold("p95 response time (ms)", p95_limit_ms, None if empty else latency.p95_ms),
        Threshold("failure rate", failure_rate_limit, None if empty else stats.failure_rate),
    ]
    table = endpoint_breakdown(results)
    p95_by_endpoint = dict(zip(table["endpoint"], table["p95_ms"]))
    for path, limit in endpoint_limits_ms.items():
        observed = p95_by_endpoint.get(path)
        thresholds.append(
            Threshold(f"{path} p95 (ms)", limit, float(observed) if observed is not None else None)
        )
    return thresholds


def format_summary(stats: RunStats, results: Sequence[RequestResult]) -> str:
    latency = latency_summary(results)
    lines = [
        "Load Test Results",
        "=================",
        f"Test Duration: {stats.elapsed_sec:.2f} seconds",
        f"Total Requests: {stats.total_count}",
        f"Successful: {stats.success_count}",
        f"Failed: {stats.failure_count}",
        f"Success Rate: {stats.success_rate * 100:.2f}%",
        f"Average Response Time: {stats.average_duration_ms:.2f}ms",
        f"Requests per second: {stats.throughput_rps:.2f}",
        f"Latency p50/p95/p99: {latency.p50_ms:.1f} / {latency.p95_ms:.1f} / {latency.p99_ms:.1f} ms",
    ]
    if len(results) < stats.total_count:
        lines.append(f"(percentiles and per-endpoint figures from a sample of {len(results)} requests)")
    table = endpoint_breakdown(results)
    if not table.empty:
        lines += ["", "Per endpoint:", table.to_string(index=False, float_format=lambda v: f"{v:.2f}")]
    lines += ["", "Thresholds:"]
    for threshold in evaluate_thresholds(stats, results):
        observed = "n/a" if threshold.observed is None else f"{threshold.observed:.2f}"
        lines.append(
            f"  [{threshold.verdict}] {threshold.name}: {observed} (limit < {threshold.limit:g})"
        )
    return "\n".join(lines)

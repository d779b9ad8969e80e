from __future__ import annotations

from obsload.metrics.aggregator import Aggregator, LatencySummary, endpoint_breakdown, latency_summary
from obsload.metrics.models import ErrorType, RequestResult, RunStats

__all__ = [
    "Aggregator",
    "ErrorType",
    "LatencySummary",
    "RequestResult",
    "RunStats",
    "endpoint_breakdown",
    "latency_summary",
]

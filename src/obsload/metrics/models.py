from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorType(str, Enum):
    TIMEOUT = "timeout"
    CONNECT = "connect"
    READ = "read"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class RequestResult:
    endpoint: str
    worker_id: int
    sequence: int
    status_code: int  # 0 when no response was received
    duration_ms: float
    timestamp: float
    error: str | None = None
    error_type: ErrorType | None = None

    @property
    def success(self) -> bool:
        return 200 <= self.status_code <= 399


@dataclass(slots=True)
class RunStats:
    """Run totals. Mutated only by the aggregator that owns it."""

    total_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    summed_duration_ms: float = 0.0
    started_at: float | None = None
    finished_at: float | None = None

    @property
    def success_rate(self) -> float:
        if self.total_count == 0:
            return 0.0
        return self.success_count / self.total_count

    @property
    def failure_rate(self) -> float:
        if self.total_count == 0:
            return 0.0
        return self.failure_count / self.total_count

    @property
    def average_duration_ms(self) -> float:
        if self.total_count == 0:
            return 0.0
        return self.summed_duration_ms / self.total_count

    @property
    def elapsed_sec(self) -> float:
        if self.started_at is None or self.finished_at is None:
            return 0.0
        return max(0.0, self.finished_at - self.started_at)

    @property
    def throughput_rps(self) -> float:
        elapsed = self.elapsed_sec
        if elapsed <= 0:
            return 0.0
        return self.total_count / elapsed

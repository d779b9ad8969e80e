from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import httpx

from obsload.errors import InvalidConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TargetConfig:
    base_url: str
    timeout_sec: float = 10.0
    health_path: str = "/health"
    headers: Mapping[str, str] = field(default_factory=dict)

    def url_for(self, path: str) -> str:
        return self.base_url.rstrip("/") + path


@dataclass(frozen=True, slots=True)
class EndpointWeight:
    path: str
    weight: float


@dataclass(frozen=True, slots=True)
class EndpointWeightTable:
    """Ordered endpoint weights.

    Weights are normalized, so they only need to be positive. ``fallback``
    defaults to the first entry and is what a draw resolves to when rounding
    leaves it past the last cumulative threshold.
    """

    entries: tuple[EndpointWeight, ...]
    fallback: str | None = None

    def __post_init__(self) -> None:
        entries = tuple(self.entries)
        object.__setattr__(self, "entries", entries)
        if not entries:
            msg = "Endpoint weight table needs at least one entry"
            raise InvalidConfigError(msg)
        for entry in entries:
            if not (math.isfinite(entry.weight) and entry.weight > 0):
                msg = f"Weight for {entry.path} must be positive, got {entry.weight}"
                raise InvalidConfigError(msg)
        if self.fallback is None:
            object.__setattr__(self, "fallback", entries[0].path)
        elif self.fallback not in self.paths():
            msg = f"Fallback endpoint {self.fallback} is not in the weight table"
            raise InvalidConfigError(msg)

    @classmethod
    def from_mapping(
        cls, weights: Mapping[str, float], fallback: str | None = None
    ) -> EndpointWeightTable:
        return cls(tuple(EndpointWeight(path, float(w)) for path, w in weights.items()), fallback)

    def paths(self) -> list[str]:
        return [entry.path for entry in self.entries]

    def total_weight(self) -> float:
        return math.fsum(entry.weight for entry in self.entries)

    def cumulative(self) -> list[tuple[str, float]]:
        total = self.total_weight()
        running = 0.0
        thresholds: list[tuple[str, float]] = []
        for entry in self.entries:
            running += entry.weight / total
            thresholds.append((entry.path, running))
        return thresholds


DEFAULT_ENDPOINTS = EndpointWeightTable.from_mapping(
    {
        "/api/fast": 0.4,
        "/api/medium": 0.3,
        "/api/slow": 0.1,
        "/api/unreliable": 0.1,
        "/api/cpu-intensive": 0.05,
        "/api/memory-intensive": 0.05,
    },
    fallback="/api/fast",
)


@dataclass(frozen=True, slots=True)
class Scenario:
    name: str
    requests_per_second: float
    workers: int


SCENARIOS: dict[str, Scenario] = {
    "baseline": Scenario("baseline", 5.0, 3),
    "normal": Scenario("normal", 10.0, 5),
    "high": Scenario("high", 20.0, 10),
    "stress": Scenario("stress", 50.0, 20),
}

DEFAULT_SCENARIO = "normal"


def resolve_scenario(name: str | None) -> Scenario:
    if name is None:
        return SCENARIOS[DEFAULT_SCENARIO]
    scenario = SCENARIOS.get(name.lower())
    if scenario is None:
        logger.warning("Unknown scenario %r, using %s load", name, DEFAULT_SCENARIO)
        return SCENARIOS[DEFAULT_SCENARIO]
    return scenario


@dataclass(frozen=True, slots=True)
class RunConfig:
    target: TargetConfig
    requests_per_second: float
    workers: int
    duration_sec: float | None = 60.0  # None runs until stopped
    worker_delay_ms: float | None = None
    endpoints: EndpointWeightTable = DEFAULT_ENDPOINTS
    seed: int | None = None
    scenario: str = ""

    @property
    def pacing_interval_ms(self) -> float:
        if self.worker_delay_ms is not None:
            return self.worker_delay_ms
        return 1000.0 * self.workers / self.requests_per_second

    def validate(self) -> None:
        problems = list(self._problems())
        if problems:
            msg = "Invalid run configuration: " + "; ".join(problems)
            raise InvalidConfigError(msg)

    def _problems(self) -> Iterable[str]:
        yield from _url_problems(self.target.base_url)
        if self.workers < 1:
            yield f"workers must be >= 1, got {self.workers}"
        if not self.requests_per_second > 0:
            yield f"requests_per_second must be > 0, got {self.requests_per_second}"
        if self.duration_sec is not None and self.duration_sec < 0:
            yield f"duration_sec must be >= 0, got {self.duration_sec}"
        if self.worker_delay_ms is not None and self.worker_delay_ms < 0:
            yield f"worker_delay_ms must be >= 0, got {self.worker_delay_ms}"

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "scenario": self.scenario,
            "requests_per_second": self.requests_per_second,
            "workers": self.workers,
            "duration_sec": self.duration_sec,
            "pacing_interval_ms": (
                self.pacing_interval_ms
                if self.worker_delay_ms is not None or self.requests_per_second > 0
                else None
            ),
            "seed": self.seed,
            "target": {
                "base_url": self.target.base_url,
                "timeout_sec": self.target.timeout_sec,
                "health_path": self.target.health_path,
            },
            "endpoints": {entry.path: entry.weight for entry in self.endpoints.entries},
        }


def _url_problems(base_url: str) -> Iterable[str]:
    try:
        url = httpx.URL(base_url)
    except httpx.InvalidURL as exc:
        yield f"target {base_url!r} is not a valid URL: {exc}"
        return
    if url.scheme not in ("http", "https"):
        yield f"target {base_url!r} must use http or https"
    if not url.host:
        yield f"target {base_url!r} has no host"
    if url.port is not None and not 0 < url.port <= 65535:
        yield f"target {base_url!r} has port {url.port} outside 1-65535"

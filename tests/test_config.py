from __future__ import annotations

import logging

import pytest

from obsload.config import (
    SCENARIOS,
    EndpointWeight,
    EndpointWeightTable,
    RunConfig,
    TargetConfig,
    resolve_scenario,
)
from obsload.errors import InvalidConfigError, StartupPreconditionError


@pytest.mark.parametrize(
    ("name", "rps", "workers"),
    [("baseline", 5.0, 3), ("normal", 10.0, 5), ("high", 20.0, 10), ("stress", 50.0, 20)],
)
def test_scenario_presets(name: str, rps: float, workers: int) -> None:
    scenario = resolve_scenario(name)
    assert scenario.requests_per_second == rps
    assert scenario.workers == workers


def test_unknown_scenario_falls_back_to_normal(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        scenario = resolve_scenario("foo")
    assert scenario == SCENARIOS["normal"]
    assert any("foo" in r.getMessage() and r.levelno == logging.WARNING for r in caplog.records)


def test_known_scenario_does_not_warn(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        resolve_scenario("Stress")
    assert not caplog.records


def test_pacing_interval_from_rate_and_workers() -> None:
    target = TargetConfig(base_url="http://demo.test")
    assert RunConfig(target, requests_per_second=10.0, workers=5).pacing_interval_ms == 500.0
    assert RunConfig(target, requests_per_second=50.0, workers=20).pacing_interval_ms == 400.0
    override = RunConfig(target, requests_per_second=10.0, workers=5, worker_delay_ms=25.0)
    assert override.pacing_interval_ms == 25.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"workers": 0},
        {"requests_per_second": 0.0},
        {"requests_per_second": -1.0},
        {"duration_sec": -5.0},
        {"worker_delay_ms": -1.0},
    ],
)
def test_validate_rejects_bad_values(overrides: dict[str, float]) -> None:
    params = {"requests_per_second": 10.0, "workers": 5, **overrides}
    config = RunConfig(TargetConfig(base_url="http://demo.test"), **params)
    with pytest.raises(InvalidConfigError):
        config.validate()


def test_invalid_config_is_a_startup_failure() -> None:
    assert issubclass(InvalidConfigError, StartupPreconditionError)


def test_weight_table_validation() -> None:
    with pytest.raises(InvalidConfigError):
        EndpointWeightTable(())
    with pytest.raises(InvalidConfigError):
        EndpointWeightTable((EndpointWeight("/a", 0.0),))
    with pytest.raises(InvalidConfigError):
        EndpointWeightTable((EndpointWeight("/a", float("nan")),))
    with pytest.raises(InvalidConfigError):
        EndpointWeightTable.from_mapping({"/a": 1.0}, fallback="/missing")


def test_weight_table_normalizes() -> None:
    table = EndpointWeightTable.from_mapping({"/a": 2.0, "/b": 2.0, "/c": 4.0})
    thresholds = table.cumulative()
    assert [path for path, _ in thresholds] == ["/a", "/b", "/c"]
    assert [value for _, value in thresholds] == pytest.approx([0.25, 0.5, 1.0])


def test_target_url_join() -> None:
    target = TargetConfig(base_url="http://demo.test/")
    assert target.url_for("/api/fast") == "http://demo.test/api/fast"


@pytest.mark.parametrize(
    ("base_url", "fragment"),
    [
        ("http://[::1", "not a valid URL"),
        ("http://localhost:99999", "port"),
        ("ftp://demo.test", "http or https"),
        ("http://", "no host"),
    ],
)
def test_validate_rejects_bad_target(base_url: str, fragment: str) -> None:
    config = RunConfig(TargetConfig(base_url=base_url), requests_per_second=10.0, workers=5)
    with pytest.raises(InvalidConfigError) as excinfo:
        config.validate()
    assert fragment in str(excinfo.value)


def test_validate_accepts_https_with_port() -> None:
    config = RunConfig(
        TargetConfig(base_url="https://nodejs-app:3010"), requests_per_second=10.0, workers=5
    )
    config.validate()

from __future__ import annotations

from obsload.config.models import (
    DEFAULT_ENDPOINTS,
    DEFAULT_SCENARIO,
    SCENARIOS,
    EndpointWeight,
    EndpointWeightTable,
    RunConfig,
    Scenario,
    TargetConfig,
    resolve_scenario,
)

__all__ = [
    "DEFAULT_ENDPOINTS",
    "DEFAULT_SCENARIO",
    "SCENARIOS",
    "EndpointWeight",
    "EndpointWeightTable",
    "RunConfig",
    "Scenario",
    "TargetConfig",
    "resolve_scenario",
]

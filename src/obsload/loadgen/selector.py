from __future__ import annotations

import random

from obsload.config import EndpointWeightTable


class EndpointSelector:
    """Weighted endpoint draw over a normalized cumulative table.

    Each worker gets its own selector, and with it its own random source.
    """

    def __init__(self, table: EndpointWeightTable, rng: random.Random | None = None) -> None:
        self.table = table
        self._thresholds = table.cumulative()
        self._rng = rng or random.Random()

    @classmethod
    def for_worker(
        cls, table: EndpointWeightTable, worker_id: int, seed: int | None = None
    ) -> EndpointSelector:
        rng = random.Random(seed + worker_id) if seed is not None else random.Random()
        return cls(table, rng)

    def select(self) -> str:
        r = self._rng.random()
        for path, cumulative in self._thresholds:
            if cumulative >= r:
                return path
        # the last threshold can land just under 1.0 after normalization
        return self.table.fallback

from __future__ import annotations

from obsload.loadgen.runner import LoadTest, run_load_test
from obsload.loadgen.selector import EndpointSelector

__all__ = ["EndpointSelector", "LoadTest", "run_load_test"]

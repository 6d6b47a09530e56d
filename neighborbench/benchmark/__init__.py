"""
Neighbor-Node Latency Benchmark.

Provides:
- Query file loading with cyclic replay
- Scan and index-backed neighbor resolvers
- A warmup / measurement / cooldown latency harness
- Streaming result output
"""

from neighborbench.benchmark.queries import (
    QueryFileError,
    QuerySequence,
    QuerySpec,
    load_queries,
)
from neighborbench.benchmark.resolvers import (
    IndexedResolver,
    NeighborResolver,
    ScanResolver,
    get_resolver,
)
from neighborbench.benchmark.runner import (
    HarnessConfig,
    HarnessError,
    HarnessResult,
    HarnessState,
    LatencyHarness,
    LatencyStats,
    Phase,
    TransactionWindows,
    WarmupError,
)
from neighborbench.benchmark.sink import ResultSink

__all__ = [
    "QueryFileError",
    "QuerySequence",
    "QuerySpec",
    "load_queries",
    "NeighborResolver",
    "ScanResolver",
    "IndexedResolver",
    "get_resolver",
    "HarnessConfig",
    "HarnessError",
    "HarnessResult",
    "HarnessState",
    "LatencyHarness",
    "LatencyStats",
    "Phase",
    "TransactionWindows",
    "WarmupError",
    "ResultSink",
]

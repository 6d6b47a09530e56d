"""
Latency Harness.

Runs one resolver through three phases against a graph store:

1. Warmup: untimed replay of the warmup queries; an empty answer is fatal
2. Measurement: timed queries batched into fixed-size transactions, one
   ``resultCount,latencyMicros`` record streamed per non-empty answer
3. Cooldown: untimed, unchecked queries after the last measured window
"""

import json
import statistics
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Literal

import structlog

from neighborbench.benchmark.queries import QuerySequence
from neighborbench.benchmark.resolvers import NeighborResolver
from neighborbench.benchmark.sink import ResultSink
from neighborbench.config.settings import BenchmarkSettings
from neighborbench.graph.store import GraphStore, GraphTransaction

logger = structlog.get_logger(__name__)


class HarnessError(Exception):
    """Raised when the harness is driven out of order."""


class WarmupError(HarnessError):
    """Raised when a warmup query has no answer; the query set is unusable."""

    def __init__(self, iteration: int, node_id: int, attribute_index: int, search_value: str):
        super().__init__(
            f"no neighbor nodes for node id: {node_id}, attr {attribute_index}, "
            f"search {search_value} (warmup iteration {iteration})"
        )
        self.iteration = iteration
        self.node_id = node_id
        self.attribute_index = attribute_index
        self.search_value = search_value


class Phase(str, Enum):
    """Harness phases, in the only order they may run."""

    IDLE = "idle"
    WARMUP = "warmup"
    MEASUREMENT = "measurement"
    COOLDOWN = "cooldown"
    DONE = "done"


_PHASE_ORDER = list(Phase)


@dataclass
class HarnessConfig:
    """Configuration for one harness run."""

    warmup_n: int = 20000
    measure_n: int = 100000
    cooldown_n: int = 500
    transaction_window: int = 10000

    # "warmup" replays warmup query content while measuring
    measure_query_source: Literal["warmup", "measurement"] = "warmup"

    summary_dir: str | None = None

    def __post_init__(self) -> None:
        if self.transaction_window <= 0:
            raise ValueError("transaction_window must be positive")
        for name in ("warmup_n", "measure_n", "cooldown_n"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    @classmethod
    def from_settings(cls, settings: BenchmarkSettings, **overrides: Any) -> "HarnessConfig":
        values: dict[str, Any] = {
            "warmup_n": settings.warmup_n,
            "measure_n": settings.measure_n,
            "cooldown_n": settings.cooldown_n,
            "transaction_window": settings.transaction_window,
            "measure_query_source": settings.measure_query_source,
            "summary_dir": settings.summary_dir,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class HarnessState:
    """Progress of a single run, threaded through the phase functions."""

    phase: Phase = Phase.IDLE
    warmup_iterations: int = 0
    measure_iterations: int = 0
    cooldown_iterations: int = 0
    recorded: int = 0
    skipped: int = 0
    window_boundaries: list[int] = field(default_factory=list)
    latency_samples_us: list[int] = field(default_factory=list)

    def enter(self, phase: Phase) -> None:
        """Move to ``phase``. Phases only move forward and never re-enter."""
        if _PHASE_ORDER.index(phase) <= _PHASE_ORDER.index(self.phase):
            raise HarnessError(f"cannot enter {phase.value} after {self.phase.value}")
        self.phase = phase


@dataclass
class LatencyStats:
    """
    Tail-latency profile of the recorded measurement queries.

    Samples are whole microseconds as written to the output file, so the
    extremes stay integral; percentiles interpolate linearly between ranks.
    """

    samples: int = 0
    min_us: int = 0
    max_us: int = 0
    mean_us: float = 0.0
    p50_us: float = 0.0
    p90_us: float = 0.0
    p99_us: float = 0.0
    p999_us: float = 0.0
    std_dev_us: float = 0.0

    @classmethod
    def from_samples(cls, samples_us: list[int]) -> "LatencyStats":
        if not samples_us:
            return cls()

        ranked = sorted(samples_us)
        n = len(ranked)

        def tail(p: float) -> float:
            rank = (n - 1) * p
            lower = int(rank)
            upper = min(lower + 1, n - 1)
            return ranked[lower] + (rank - lower) * (ranked[upper] - ranked[lower])

        return cls(
            samples=n,
            min_us=ranked[0],
            max_us=ranked[-1],
            mean_us=statistics.fmean(ranked),
            p50_us=tail(0.5),
            p90_us=tail(0.9),
            p99_us=tail(0.99),
            p999_us=tail(0.999),
            std_dev_us=statistics.stdev(ranked) if n > 1 else 0.0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "samples": self.samples,
            "min_us": self.min_us,
            "max_us": self.max_us,
            "mean_us": round(self.mean_us, 2),
            "p50_us": round(self.p50_us, 2),
            "p90_us": round(self.p90_us, 2),
            "p99_us": round(self.p99_us, 2),
            "p999_us": round(self.p999_us, 2),
            "std_dev_us": round(self.std_dev_us, 2),
        }


@dataclass
class HarnessResult:
    """Summary of a completed run. The per-query records live in the output file."""

    strategy: str
    output_path: str
    started_at: datetime
    completed_at: datetime | None = None
    warmup_iterations: int = 0
    measure_iterations: int = 0
    cooldown_iterations: int = 0
    recorded: int = 0
    skipped: int = 0
    window_boundaries: list[int] = field(default_factory=list)
    latency_stats: LatencyStats | None = None

    @classmethod
    def from_state(
        cls, strategy: str, output_path: str, started_at: datetime, state: HarnessState
    ) -> "HarnessResult":
        return cls(
            strategy=strategy,
            output_path=output_path,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            warmup_iterations=state.warmup_iterations,
            measure_iterations=state.measure_iterations,
            cooldown_iterations=state.cooldown_iterations,
            recorded=state.recorded,
            skipped=state.skipped,
            window_boundaries=list(state.window_boundaries),
            latency_stats=LatencyStats.from_samples(state.latency_samples_us),
        )

    @property
    def skip_rate(self) -> float:
        """Share of measurement queries that found no neighbor and produced no record."""
        return self.skipped / self.measure_iterations if self.measure_iterations else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy,
            "output_path": self.output_path,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "iterations": {
                "warmup": self.warmup_iterations,
                "measure": self.measure_iterations,
                "cooldown": self.cooldown_iterations,
                "recorded": self.recorded,
                "skipped": self.skipped,
                "skip_rate": round(self.skip_rate, 4),
            },
            "window_boundaries": self.window_boundaries,
            "latency": self.latency_stats.to_dict() if self.latency_stats else None,
        }

    def save(self, output_dir: str | Path) -> Path:
        """Write the summary as JSON and return its path."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = (self.completed_at or self.started_at).strftime("%Y%m%d_%H%M%S")
        filepath = output_dir / f"neighbor_node_{self.strategy}_{timestamp}.json"
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info("Benchmark summary saved", path=str(filepath))
        return filepath


class TransactionWindows:
    """
    Batches queries into fixed-size transactions.

    The first window opens on entry. ``roll(i)`` commits the current window
    and opens a new one whenever ``i`` is a multiple of the window size. On
    a clean exit the last (possibly partial) window is committed; on an
    exception it is closed uncommitted and the store rolls it back.
    """

    def __init__(self, store: GraphStore, size: int):
        self._store = store
        self.size = size
        self.boundaries: list[int] = []
        self.current: GraphTransaction | None = None

    def __enter__(self) -> "TransactionWindows":
        self.current = self._store.begin_transaction()
        return self

    def roll(self, iteration: int) -> bool:
        if iteration % self.size != 0:
            return False
        assert self.current is not None
        tx, self.current = self.current, None
        try:
            tx.commit()
        finally:
            tx.close()
        self.current = self._store.begin_transaction()
        self.boundaries.append(iteration)
        return True

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        tx, self.current = self.current, None
        if tx is None:
            return False
        try:
            if exc_type is None:
                tx.commit()
        finally:
            tx.close()
        return False


class LatencyHarness:
    """
    Times a neighbor resolver against a graph store.

    The resolver is fixed at construction so the timed section has the same
    shape for every strategy.
    """

    def __init__(
        self,
        store: GraphStore,
        resolver: NeighborResolver,
        config: HarnessConfig | None = None,
        clock: Callable[[], int] = time.perf_counter_ns,
        progress_callback: Callable[[int, int], None] | None = None,
    ):
        self.store = store
        self.resolver = resolver
        self.config = config or HarnessConfig()
        self._clock = clock
        self._progress_callback = progress_callback

    def run(
        self,
        warmup: QuerySequence,
        queries: QuerySequence,
        output_path: str | Path,
    ) -> HarnessResult:
        """
        Run warmup, measurement and cooldown.

        Args:
            warmup: Queries replayed during warmup
            queries: Measurement queries (used for diagnostics, and for query
                content when ``measure_query_source`` is "measurement")
            output_path: Measurement records file, created when measurement starts

        Returns:
            Run summary

        Raises:
            WarmupError: If a warmup query has no answer. No output is written.
        """
        state = HarnessState()
        started_at = datetime.now(timezone.utc)
        logger.info(
            "Benchmarking getNeighborNode queries",
            strategy=self.resolver.name,
            warmup_n=self.config.warmup_n,
            measure_n=self.config.measure_n,
            cooldown_n=self.config.cooldown_n,
        )

        with TransactionWindows(self.store, self.config.transaction_window) as windows:
            self.warmup(state, windows, warmup)
            with ResultSink(output_path) as sink:
                self.measure(state, windows, warmup, queries, sink)
        state.window_boundaries = windows.boundaries

        self.cooldown(state, warmup, queries)
        state.enter(Phase.DONE)

        result = HarnessResult.from_state(self.resolver.name, str(output_path), started_at, state)
        logger.info(
            "Benchmark completed",
            strategy=result.strategy,
            recorded=result.recorded,
            skipped=result.skipped,
            skip_rate=round(result.skip_rate, 4),
            windows=len(result.window_boundaries),
            mean_latency_us=result.latency_stats.mean_us if result.latency_stats else 0,
        )
        if self.config.summary_dir:
            result.save(self.config.summary_dir)
        return result

    def _measurement_source(self, warmup: QuerySequence, queries: QuerySequence) -> QuerySequence:
        return warmup if self.config.measure_query_source == "warmup" else queries

    def warmup(self, state: HarnessState, windows: TransactionWindows, warmup: QuerySequence) -> None:
        state.enter(Phase.WARMUP)
        logger.info("Warming up", queries=self.config.warmup_n)

        for i in range(self.config.warmup_n):
            spec = warmup.at(i)
            result = self.resolver.resolve(
                windows.current, spec.node_id, spec.attribute_index, spec.search_value
            )
            if not result:
                logger.error(
                    "No neighbor nodes",
                    phase=Phase.WARMUP.value,
                    iteration=i,
                    node_id=spec.node_id,
                    attribute=spec.attribute_index,
                    search=spec.search_value,
                )
                raise WarmupError(i, spec.node_id, spec.attribute_index, spec.search_value)
            state.warmup_iterations = i + 1

    def measure(
        self,
        state: HarnessState,
        windows: TransactionWindows,
        warmup: QuerySequence,
        queries: QuerySequence,
        sink: ResultSink,
    ) -> None:
        state.enter(Phase.MEASUREMENT)
        logger.info("Measuring", queries=self.config.measure_n, window=windows.size)

        source = self._measurement_source(warmup, queries)
        resolve = self.resolver.resolve
        clock = self._clock

        for i in range(self.config.measure_n):
            if windows.roll(i) and i and self._progress_callback:
                self._progress_callback(i, self.config.measure_n)

            spec = source.at(i)
            tx = windows.current
            start = clock()
            result = resolve(tx, spec.node_id, spec.attribute_index, spec.search_value)
            end = clock()
            state.measure_iterations = i + 1

            if not result:
                diagnostic = queries.at(i)
                logger.warning(
                    "No neighbor nodes",
                    phase=Phase.MEASUREMENT.value,
                    iteration=i,
                    node_id=diagnostic.node_id,
                    attribute=diagnostic.attribute_index,
                    search=diagnostic.search_value,
                )
                state.skipped += 1
                continue

            latency_us = (end - start) // 1000
            sink.write_record(len(result), latency_us)
            state.latency_samples_us.append(latency_us)
            state.recorded += 1

        if self._progress_callback:
            self._progress_callback(self.config.measure_n, self.config.measure_n)

    def cooldown(self, state: HarnessState, warmup: QuerySequence, queries: QuerySequence) -> None:
        """Replay queries past the measured range without timing or checking them."""
        state.enter(Phase.COOLDOWN)
        if self.config.cooldown_n == 0:
            return

        logger.info("Cooling down", queries=self.config.cooldown_n)
        source = self._measurement_source(warmup, queries)
        offset = self.config.measure_n
        with self.store.begin_transaction() as tx:
            for j in range(self.config.cooldown_n):
                spec = source.at(offset + j)
                self.resolver.resolve(tx, spec.node_id, spec.attribute_index, spec.search_value)
                state.cooldown_iterations = j + 1

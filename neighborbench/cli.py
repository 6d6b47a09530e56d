"""
Command-line entry point.

    neighbor-bench MODE STORE WARMUP_FILE QUERY_FILE OUTPUT_FILE [WARMUP_N] [MEASURE_N]

MODE is ``latency`` (adjacency scan) or ``latency-index`` (attribute index).
"""

import argparse
from collections.abc import Sequence

import structlog

from neighborbench.benchmark.queries import QueryFileError, load_queries
from neighborbench.benchmark.resolvers import RESOLVERS, get_resolver
from neighborbench.benchmark.runner import HarnessConfig, LatencyHarness, WarmupError
from neighborbench.config.settings import get_settings
from neighborbench.graph.neo4j_client import Neo4jGraphStore
from neighborbench.observability.logging import LogContext, configure_logging

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_WARMUP_FAILED = 1
EXIT_BAD_QUERIES = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neighbor-bench",
        description="Measure neighbor-node query latency against a Neo4j graph",
    )
    parser.add_argument("mode", help=f"Resolver strategy ({', '.join(RESOLVERS)})")
    parser.add_argument("store_path", help="Neo4j database name, or a bolt:// / neo4j:// URI")
    parser.add_argument("warmup_file", help="Warmup queries (nodeId,attributeIndex,searchValue)")
    parser.add_argument("query_file", help="Measurement queries (nodeId,attributeIndex,searchValue)")
    parser.add_argument("output_file", help="Output file for resultCount,latencyMicros records")
    parser.add_argument("warmup_n", type=int, nargs="?", default=None, help="Warmup query count")
    parser.add_argument("measure_n", type=int, nargs="?", default=None, help="Measured query count")
    parser.add_argument("--cooldown", dest="cooldown_n", type=int, default=None, help="Cooldown query count")
    parser.add_argument(
        "--window", dest="transaction_window", type=int, default=None,
        help="Measured queries per transaction",
    )
    parser.add_argument(
        "--create-indexes", dest="attribute_count", type=int, default=None, metavar="K",
        help="Ensure indexes on name0..name{K-1} before running",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, settings.observability.log_format)

    resolver = get_resolver(args.mode, settings.benchmark.node_label)
    if resolver is None:
        logger.warning("Unsupported mode", mode=args.mode, supported=list(RESOLVERS))
        return EXIT_OK

    try:
        warmup = load_queries(args.warmup_file)
        queries = load_queries(args.query_file)
    except QueryFileError as e:
        logger.error("Cannot load queries", error=str(e))
        return EXIT_BAD_QUERIES

    config = HarnessConfig.from_settings(
        settings.benchmark,
        warmup_n=args.warmup_n,
        measure_n=args.measure_n,
        cooldown_n=args.cooldown_n,
        transaction_window=args.transaction_window,
    )
    attribute_count = (
        args.attribute_count if args.attribute_count is not None
        else settings.benchmark.attribute_count
    )

    store = Neo4jGraphStore(args.store_path, settings.neo4j)
    store.open()
    store.register_shutdown_hook()

    with LogContext(mode=args.mode, database=store.database):
        if attribute_count:
            store.ensure_attribute_indexes(settings.benchmark.node_label, attribute_count)
        store.await_indexes(settings.neo4j.index_await_timeout_seconds)

        harness = LatencyHarness(store, resolver, config)
        try:
            harness.run(warmup, queries, args.output_file)
        except WarmupError:
            # Fail fast; the shutdown hook closes the store
            logger.error("Benchmark aborted during warmup")
            return EXIT_WARMUP_FAILED

    store.close()
    return EXIT_OK

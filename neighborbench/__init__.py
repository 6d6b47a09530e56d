"""Neighbor-node query latency benchmark for graph stores."""

__version__ = "0.1.0"

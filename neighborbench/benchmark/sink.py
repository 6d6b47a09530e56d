"""
Result Sink.

Streams ``resultCount,latencyMicros`` lines to the output file in the order
they are measured.
"""

from pathlib import Path
from typing import TextIO

import structlog

logger = structlog.get_logger(__name__)


class ResultSink:
    """Line-buffered writer for measurement records. Closes exactly once."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.records_written = 0
        # Line buffering flushes each record as it is written
        self._file: TextIO | None = open(self.path, "w", buffering=1, encoding="utf-8")

    @property
    def closed(self) -> bool:
        return self._file is None

    def write_record(self, result_count: int, latency_micros: int) -> None:
        if self._file is None:
            raise ValueError(f"write to closed sink {self.path}")
        self._file.write(f"{result_count},{latency_micros}\n")
        self.records_written += 1

    def close(self) -> None:
        if self._file is None:
            return
        file, self._file = self._file, None
        file.close()
        logger.info("Results written", path=str(self.path), records=self.records_written)

    def __enter__(self) -> "ResultSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

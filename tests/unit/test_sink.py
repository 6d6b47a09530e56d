"""
Unit Tests for ResultSink.
"""

from pathlib import Path

import pytest

from neighborbench.benchmark.sink import ResultSink


class TestResultSink:
    """Test cases for ResultSink."""

    def test_records_written_in_order(self, tmp_path: Path) -> None:
        """Test that each record becomes one count,latency line in call order."""
        path = tmp_path / "out.txt"
        with ResultSink(path) as sink:
            sink.write_record(3, 120)
            sink.write_record(1, 0)
            sink.write_record(12, 7)

        assert path.read_text(encoding="utf-8") == "3,120\n1,0\n12,7\n"
        assert sink.records_written == 3

    def test_records_visible_before_close(self, tmp_path: Path) -> None:
        """Test that records are streamed, not held until close."""
        path = tmp_path / "out.txt"
        sink = ResultSink(path)
        sink.write_record(2, 40)

        assert path.read_text(encoding="utf-8") == "2,40\n"
        sink.close()

    def test_close_is_idempotent(self, tmp_path: Path) -> None:
        sink = ResultSink(tmp_path / "out.txt")
        sink.close()
        sink.close()

        assert sink.closed

    def test_write_after_close(self, tmp_path: Path) -> None:
        sink = ResultSink(tmp_path / "out.txt")
        sink.close()

        with pytest.raises(ValueError):
            sink.write_record(1, 1)

    def test_closed_on_error(self, tmp_path: Path) -> None:
        """Test that the file is released when the block raises."""
        path = tmp_path / "out.txt"
        with pytest.raises(RuntimeError):
            with ResultSink(path) as sink:
                sink.write_record(1, 5)
                raise RuntimeError("abort")

        assert sink.closed
        assert path.read_text(encoding="utf-8") == "1,5\n"

    def test_truncates_existing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "out.txt"
        path.write_text("stale\n", encoding="utf-8")

        with ResultSink(path) as sink:
            sink.write_record(1, 1)

        assert path.read_text(encoding="utf-8") == "1,1\n"

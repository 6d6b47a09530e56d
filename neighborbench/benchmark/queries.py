"""
Query Files.

Loads neighbor-node query specifications. Each line holds
``nodeId,attributeIndex,searchValue`` with no header and no quoting.
"""

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

# ASCII digits with an optional sign; no whitespace or digit separators
_INTEGER = re.compile(r"[+-]?[0-9]+")


class QueryFileError(ValueError):
    """Raised when a query file cannot be parsed."""

    def __init__(self, path: str | Path, line_number: int | None, message: str):
        location = f"{path}:{line_number}" if line_number is not None else str(path)
        super().__init__(f"{location}: {message}")
        self.path = str(path)
        self.line_number = line_number


@dataclass(frozen=True)
class QuerySpec:
    """A single neighbor-node query."""

    node_id: int
    attribute_index: int
    search_value: str


class QuerySequence(Sequence[QuerySpec]):
    """Ordered queries replayed cyclically: logical query ``i`` is ``specs[i % len]``."""

    def __init__(self, specs: Sequence[QuerySpec], source: str = ""):
        self._specs = tuple(specs)
        self.source = source

    def at(self, iteration: int) -> QuerySpec:
        return self._specs[iteration % len(self._specs)]

    def __getitem__(self, index):
        return self._specs[index]

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[QuerySpec]:
        return iter(self._specs)

    def __repr__(self) -> str:
        return f"QuerySequence(source={self.source!r}, length={len(self)})"


def parse_query_line(line: str, path: str | Path = "<string>", line_number: int | None = None) -> QuerySpec:
    """Parse one ``nodeId,attributeIndex,searchValue`` record."""
    tokens = line.split(",")
    if len(tokens) != 3:
        raise QueryFileError(path, line_number, f"expected 3 fields, got {len(tokens)}: {line!r}")

    node_id, attribute_index, search_value = tokens
    for token in (node_id, attribute_index):
        if not _INTEGER.fullmatch(token):
            raise QueryFileError(path, line_number, f"invalid integer field: {token!r}")
    return QuerySpec(int(node_id), int(attribute_index), search_value)


def load_queries(path: str | Path) -> QuerySequence:
    """
    Load a query file.

    Parsing is strict: the first malformed line aborts the load.

    Args:
        path: Path to the query file

    Returns:
        The queries in file order

    Raises:
        QueryFileError: If the file is unreadable, empty, or has a malformed line
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise QueryFileError(path, None, f"cannot read file: {e}") from e

    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    specs = [
        parse_query_line(line.rstrip("\r"), path, number)
        for number, line in enumerate(lines, start=1)
    ]
    if not specs:
        raise QueryFileError(path, None, "no queries")

    logger.info("Queries loaded", path=str(path), count=len(specs))
    return QuerySequence(specs, source=str(path))

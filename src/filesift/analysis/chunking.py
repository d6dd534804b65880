"""Content chunking for large files.

Three strategies split text into line-aligned chunks:

- ``lines``: fixed number of lines per chunk, with a trailing-line overlap.
- ``tokens``: chunks bounded by estimated tokens, with a token-sized overlap.
- ``smart``: like ``tokens`` but only cuts on logical boundaries (blank lines,
  definitions, comments). Falls back to ``tokens`` when a file has none.

Every chunk records how many of its leading lines repeat the previous chunk,
so ``reassemble`` can rebuild the original line sequence exactly.
"""

import logging
from collections.abc import Callable, Sequence
from enum import Enum

from filesift import constants
from filesift.analysis.tokens import estimate_tokens
from filesift.models import Chunk

logger = logging.getLogger(__name__)


class ChunkStrategy(Enum):
    """How file content is split into chunks."""

    LINES = "lines"
    TOKENS = "tokens"
    SMART = "smart"

    @classmethod
    def from_name(cls, name: str) -> "ChunkStrategy":
        """Look up a strategy by name, falling back to LINES for unknown names."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            logger.warning(f"Unknown chunk strategy {name!r}, using 'lines'")
            return cls.LINES


def split_lines(content: str) -> list[str]:
    """Split content on "\\n", dropping the empty element after a final newline."""
    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return lines


def is_logical_boundary(
    line: str,
    definition_prefixes: Sequence[str] = constants.DEFINITION_PREFIXES,
    comment_prefixes: Sequence[str] = constants.COMMENT_PREFIXES,
) -> bool:
    """Check if a line is a reasonable place to start a new chunk.

    Args:
        line: Line to check.
        definition_prefixes: Prefixes that introduce functions, classes, methods.
        comment_prefixes: Prefixes that start a comment.

    Returns:
        True for blank lines, definitions and comments.
    """
    trimmed = line.strip()
    if not trimmed:
        return True
    return trimmed.startswith(tuple(definition_prefixes)) or trimmed.startswith(
        tuple(comment_prefixes)
    )


def reassemble(chunks: Sequence[Chunk]) -> list[str]:
    """Rebuild the original line sequence from chunks in index order."""
    lines: list[str] = []
    for chunk in sorted(chunks, key=lambda c: c.index):
        lines.extend(chunk.lines[chunk.overlap :])
    return lines


def get_chunk(chunks: Sequence[Chunk], index: int) -> Chunk:
    """Return the chunk at ``index``.

    Raises:
        IndexError: If ``index`` is out of range.
    """
    if index < 0 or index >= len(chunks):
        raise IndexError(f"chunk index {index} out of range (0-{len(chunks) - 1})")
    return chunks[index]


class _LineTable:
    """Lines of a document with their UTF-8 byte offsets."""

    def __init__(self, content: str):
        self.lines = split_lines(content)
        self.starts: list[int] = []
        self.ends: list[int] = []
        offset = 0
        for line in self.lines:
            self.starts.append(offset)
            offset += len(line.encode("utf-8"))
            self.ends.append(offset)
            offset += 1  # "\n"

    def __len__(self) -> int:
        return len(self.lines)


class Chunker:
    """Splits text into ordered, optionally overlapping chunks."""

    def __init__(
        self,
        strategy: ChunkStrategy | str = ChunkStrategy.SMART,
        chunk_size: int = constants.CHUNK_SIZE,
        overlap: int = constants.CHUNK_OVERLAP,
        estimator: Callable[[str], int] = estimate_tokens,
        definition_prefixes: Sequence[str] = constants.DEFINITION_PREFIXES,
        comment_prefixes: Sequence[str] = constants.COMMENT_PREFIXES,
    ):
        """Initialize the chunker.

        Args:
            strategy: Chunking strategy or its name.
            chunk_size: Chunk size in lines (LINES) or estimated tokens (TOKENS, SMART).
            overlap: Overlap in the same unit as chunk_size.
            estimator: Token estimator applied to lines and chunk contents.
            definition_prefixes: Definition prefixes used by SMART.
            comment_prefixes: Comment prefixes used by SMART.
        """
        if isinstance(strategy, str):
            strategy = ChunkStrategy.from_name(strategy)
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0:
            raise ValueError(f"overlap must not be negative, got {overlap}")
        self.strategy = strategy
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.estimator = estimator
        self.definition_prefixes = tuple(definition_prefixes)
        self.comment_prefixes = tuple(comment_prefixes)

    def chunk(self, content: str) -> list[Chunk]:
        """Split content according to the configured strategy.

        Args:
            content: Text to split.

        Returns:
            Chunks indexed from 0. Empty content gives no chunks.
        """
        table = _LineTable(content)
        if not len(table):
            return []

        if self.strategy is ChunkStrategy.LINES:
            return self._by_lines(table)
        if self.strategy is ChunkStrategy.TOKENS:
            return self._by_tokens(table)
        return self._smart(table)

    def _make_chunk(
        self, table: _LineTable, index: int, first: int, last: int, overlap: int
    ) -> Chunk:
        content = "\n".join(table.lines[first : last + 1])
        return Chunk(
            index=index,
            start_line=first + 1,
            end_line=last + 1,
            start_offset=table.starts[first],
            end_offset=table.ends[last],
            content=content,
            token_count=self.estimator(content),
            overlap=overlap,
        )

    def _by_lines(self, table: _LineTable) -> list[Chunk]:
        chunks: list[Chunk] = []
        # each chunk must bring at least one new line
        overlap = min(self.overlap, self.chunk_size - 1)
        start = 0
        carried = 0

        for i in range(len(table)):
            if i - start + 1 >= self.chunk_size:
                chunks.append(self._make_chunk(table, len(chunks), start, i, carried))
                carried = min(overlap, i - start)
                start = i + 1 - carried

        if len(table) - start > carried:
            chunks.append(self._make_chunk(table, len(chunks), start, len(table) - 1, carried))

        return chunks

    def _overlap_lines(self, table: _LineTable, start: int, end: int) -> int:
        """Count trailing lines of [start, end) that cover the overlap token budget."""
        count = 0
        tokens = 0
        i = end - 1
        while i >= start and tokens < self.overlap:
            tokens += self.estimator(table.lines[i])
            count += 1
            i -= 1
        return min(count, end - start - 1)

    def _by_tokens(self, table: _LineTable, boundaries: list[bool] | None = None) -> list[Chunk]:
        chunks: list[Chunk] = []
        start = 0
        carried = 0
        current_tokens = 0

        for i, line in enumerate(table.lines):
            line_tokens = self.estimator(line)

            if current_tokens + line_tokens > self.chunk_size and i > start:
                if boundaries is None:
                    chunks.append(self._make_chunk(table, len(chunks), start, i - 1, carried))
                    carried = self._overlap_lines(table, start, i)
                    start = i - carried
                    current_tokens = sum(self.estimator(ln) for ln in table.lines[start:i])
                elif boundaries[i] or (i + 1 < len(table) and boundaries[i + 1]):
                    chunks.append(self._make_chunk(table, len(chunks), start, i - 1, carried))
                    carried = 0
                    start = i
                    current_tokens = 0
                # otherwise keep growing until a boundary shows up

            current_tokens += line_tokens

        chunks.append(self._make_chunk(table, len(chunks), start, len(table) - 1, carried))
        return chunks

    def _smart(self, table: _LineTable) -> list[Chunk]:
        boundaries = [
            is_logical_boundary(line, self.definition_prefixes, self.comment_prefixes)
            for line in table.lines
        ]
        if not any(boundaries):
            return self._by_tokens(table)
        return self._by_tokens(table, boundaries)

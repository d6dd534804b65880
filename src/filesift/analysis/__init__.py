"""File analysis: classification, token estimation, chunking and selection."""

from filesift.analysis.analyzer import FileAnalyzer, format_file_size, generate_summary
from filesift.analysis.chunking import (
    Chunker,
    ChunkStrategy,
    get_chunk,
    is_logical_boundary,
    reassemble,
)
from filesift.analysis.classifier import FileClassifier
from filesift.analysis.readers import FileReadError, read_content
from filesift.analysis.selector import ContentSelector, SelectionResult
from filesift.analysis.tokens import (
    estimate_tokens,
    estimate_tokens_simple,
    token_budget,
    truncate_to_tokens,
)

__all__ = [
    "ChunkStrategy",
    "Chunker",
    "ContentSelector",
    "FileAnalyzer",
    "FileClassifier",
    "FileReadError",
    "SelectionResult",
    "estimate_tokens",
    "estimate_tokens_simple",
    "format_file_size",
    "generate_summary",
    "get_chunk",
    "is_logical_boundary",
    "read_content",
    "reassemble",
    "token_budget",
    "truncate_to_tokens",
]

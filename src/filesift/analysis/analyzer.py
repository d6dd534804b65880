"""File analysis: classify, read, summarize, chunk and scan each file.

``FileAnalyzer`` owns the per-file content-reading step. It is the only
component that mutates a FileRecord; once a record leaves ``analyze_file`` it
is treated as read-only by the selector and dispatcher.
"""

import asyncio
import logging
import os
from pathlib import Path

from filesift import constants
from filesift.analysis.chunking import Chunker
from filesift.analysis.classifier import FileClassifier
from filesift.analysis.readers import FileReadError, read_content
from filesift.analysis.tokens import estimate_tokens
from filesift.config import Config
from filesift.models import ContentType, FileRecord, ScanError, SizeTier
from filesift.security.redactor import Redactor

logger = logging.getLogger(__name__)


def format_file_size(size: int) -> str:
    """Format a byte count as a human readable size, e.g. "1.5 KB"."""
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {'KMGTPE'[exp]}B"


def generate_summary(record: FileRecord) -> str:
    """Build the one-line summary for a medium or large file.

    Components that are unknown for the file (extension, language, line
    count, chunks) are left out.
    """
    parts = [
        f"File: {record.rel_path}",
        f"Type: {record.content_type.value}",
        f"Size: {format_file_size(record.size)}",
    ]
    if record.extension:
        parts.append(f"Extension: {record.extension}")
    language = constants.EXTENSION_LANGUAGES.get(record.extension)
    if language:
        parts.append(f"Language: {language}")
    if record.content_type is ContentType.TEXT and record.content:
        parts.append(f"Lines: {record.content.count(chr(10)) + 1}")
    if record.chunks:
        parts.append(f"Chunks: {len(record.chunks)}")
    return " | ".join(parts)


class FileAnalyzer:
    """Runs the content-reading step for files under a root directory."""

    def __init__(
        self,
        config: Config,
        classifier: FileClassifier | None = None,
        chunker: Chunker | None = None,
        redactor: Redactor | None = None,
    ):
        """Initialize the analyzer.

        Args:
            config: Application configuration.
            classifier: Classifier to use. Built from ``config.classify`` if None.
            chunker: Chunker to use. Built from ``config.chunking`` if None.
            redactor: Redactor to use. A default one is built if None.
        """
        self.config = config
        self.classifier = classifier or FileClassifier(
            small_file_bytes=config.classify.small_file_bytes,
            medium_file_bytes=config.classify.medium_file_bytes,
            sniff_bytes=config.classify.sniff_bytes,
            text_ratio=config.classify.text_ratio,
        )
        self.chunker = chunker or Chunker(
            strategy=config.chunking.strategy,
            chunk_size=config.chunking.chunk_size,
            overlap=config.chunking.overlap,
        )
        self.redactor = redactor or Redactor()

    def analyze_file(self, path: str | Path, root: str | Path) -> FileRecord:
        """Classify a file and load its content according to its size tier.

        Small files get their content and token count. Medium files also get a
        summary line. Large files additionally get chunked. Path-based
        sensitivity is decided before any content is read; content scanning
        for secrets and PII runs afterwards when enabled.

        Args:
            path: File to analyze.
            root: Scan root used for the relative path.

        Returns:
            The populated FileRecord. Unreadable and oversized files come back
            with metadata only.

        Raises:
            FileReadError: If content reading or chunking fails.
        """
        path = Path(path)
        record = self.classifier.classify(path)

        try:
            record.rel_path = os.path.relpath(path, root)
        except ValueError:
            record.rel_path = str(path)

        detect = self.config.security.detect_secrets
        if detect and self.redactor.is_sensitive_path(record.rel_path):
            logger.info(f"Sensitive path detected: {record.rel_path}")
            record.sensitive = True

        if not record.readable:
            return record

        if record.size > self.config.agent.max_file_size_bytes:
            logger.info(
                f"Skipping content of {record.rel_path}: "
                f"{format_file_size(record.size)} exceeds read limit"
            )
            return record

        try:
            content = read_content(path, record.content_type)
        except FileReadError:
            raise
        except Exception as e:
            # pypdf raises arbitrary exceptions on malformed files
            raise FileReadError(f"Failed to read {path}: {e}") from e
        record.content = content
        record.token_count = estimate_tokens(content)

        if record.tier is SizeTier.LARGE:
            try:
                record.chunks = self.chunker.chunk(content)
            except ValueError as e:
                raise FileReadError(f"Failed to chunk {path}: {e}") from e

        if record.tier in (SizeTier.MEDIUM, SizeTier.LARGE):
            record.summary = generate_summary(record)

        if self.config.security.detect_secrets:
            record.add_violations(self.redactor.scan(content, record.path))

        return record

    async def analyze_files(
        self, paths: list[str | Path], root: str | Path
    ) -> tuple[list[FileRecord], list[ScanError]]:
        """Analyze many files with bounded concurrency.

        Blocking reads run in worker threads, at most ``concurrent_files`` at a
        time. A failure on one file is recorded and does not affect the others.

        Args:
            paths: Files to analyze.
            root: Scan root used for relative paths.

        Returns:
            Tuple of (records for files that analyzed successfully in input
            order, errors for files that failed).
        """
        semaphore = asyncio.Semaphore(self.config.agent.concurrent_files)

        async def analyze_one(path: str | Path) -> FileRecord | ScanError:
            async with semaphore:
                try:
                    return await asyncio.to_thread(self.analyze_file, path, root)
                except FileReadError as e:
                    logger.warning(f"Failed to analyze {path}: {e}")
                    return ScanError(path=str(path), error=str(e))

        outcomes = await asyncio.gather(*(analyze_one(p) for p in paths))

        records = [o for o in outcomes if isinstance(o, FileRecord)]
        errors = [o for o in outcomes if isinstance(o, ScanError)]
        return records, errors

"""File classification by size tier and content type."""

import codecs
import logging
import os
from datetime import datetime
from pathlib import Path

from filesift import constants
from filesift.models import ContentType, FileRecord, SizeTier

logger = logging.getLogger(__name__)

# Rules checked in order; the first table containing the extension wins.
EXTENSION_RULES: tuple[tuple[frozenset[str], ContentType], ...] = (
    (constants.TEXT_EXTENSIONS, ContentType.TEXT),
    (constants.BINARY_EXTENSIONS, ContentType.BINARY),
    (constants.ARCHIVE_EXTENSIONS, ContentType.ARCHIVE),
    (constants.IMAGE_EXTENSIONS, ContentType.IMAGE),
    (constants.DOCUMENT_EXTENSIONS, ContentType.DOCUMENT),
    (constants.CAPTURE_EXTENSIONS, ContentType.CAPTURE_LOG),
)

_TEXT_BYTES = frozenset(b"\n\r\t") | frozenset(range(32, 127))


class FileClassifier:
    """Assigns size tiers and content types to files."""

    def __init__(
        self,
        small_file_bytes: int = constants.SMALL_FILE_SIZE_BYTES,
        medium_file_bytes: int = constants.MEDIUM_FILE_SIZE_BYTES,
        sniff_bytes: int = constants.SNIFF_BYTES,
        text_ratio: float = constants.TEXT_RATIO,
    ):
        """Initialize the classifier.

        Args:
            small_file_bytes: Largest size (inclusive) of the small tier.
            medium_file_bytes: Largest size (inclusive) of the medium tier.
            sniff_bytes: Bytes read when the extension is not recognized.
            text_ratio: Fraction of printable bytes at or above which sniffed content is text.
        """
        self.small_file_bytes = small_file_bytes
        self.medium_file_bytes = medium_file_bytes
        self.sniff_bytes = sniff_bytes
        self.text_ratio = text_ratio

    def size_tier(self, size: int) -> SizeTier:
        if size <= self.small_file_bytes:
            return SizeTier.SMALL
        if size <= self.medium_file_bytes:
            return SizeTier.MEDIUM
        return SizeTier.LARGE

    def content_type(self, path: Path) -> ContentType:
        """Detect the content type of a file.

        Extension tables are consulted first; unknown extensions fall back to
        sniffing the first bytes of the file.

        Raises:
            OSError: If the file has to be sniffed and cannot be read.
        """
        ext = path.suffix.lower()
        for extensions, content_type in EXTENSION_RULES:
            if ext in extensions:
                return content_type
        return self.sniff(path)

    def sniff(self, path: Path) -> ContentType:
        """Classify a file as text or binary from its leading bytes."""
        with open(path, "rb") as f:
            head = f.read(self.sniff_bytes)

        if not head:
            return ContentType.BINARY

        # a multi-byte character may be cut at the sniff boundary
        try:
            codecs.getincrementaldecoder("utf-8")().decode(head, final=False)
        except UnicodeDecodeError:
            return ContentType.BINARY

        text_count = sum(1 for b in head if b in _TEXT_BYTES)
        if text_count / len(head) >= self.text_ratio:
            return ContentType.TEXT
        return ContentType.BINARY

    def classify(self, path: str | Path) -> FileRecord:
        """Stat and classify a file.

        A file that cannot be stat'd or sniffed is returned as UNKNOWN and not
        readable; the error is logged, not raised.

        Args:
            path: Path to the file.

        Returns:
            A FileRecord with size, tier, type and readability set.
        """
        path = Path(path)
        record = FileRecord(
            path=str(path),
            rel_path=str(path),
            size=0,
            tier=SizeTier.SMALL,
            content_type=ContentType.UNKNOWN,
            extension=path.suffix.lower(),
        )

        try:
            stat = path.stat()
        except OSError as e:
            logger.warning(f"Cannot stat {path}: {e}")
            return record

        record.size = stat.st_size
        record.tier = self.size_tier(stat.st_size)
        record.modified = datetime.fromtimestamp(stat.st_mtime)

        try:
            record.content_type = self.content_type(path)
        except OSError as e:
            logger.warning(f"Cannot read {path} for type detection: {e}")
            return record

        record.readable = record.content_type.readable and os.access(path, os.R_OK)
        return record

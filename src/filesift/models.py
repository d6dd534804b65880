"""Data models for file analysis and dispatch."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class SizeTier(Enum):
    """Size bucket assigned from a file's byte size."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class ContentType(Enum):
    """Detected content type of a file."""

    TEXT = "text"
    BINARY = "binary"
    ARCHIVE = "archive"
    IMAGE = "image"
    DOCUMENT = "document"  # PDF
    CAPTURE_LOG = "capture_log"  # pcap / pcapng
    UNKNOWN = "unknown"

    @property
    def readable(self) -> bool:
        """Whether content of this type can be turned into text."""
        return self in (ContentType.TEXT, ContentType.DOCUMENT, ContentType.CAPTURE_LOG)


class ViolationKind(Enum):
    """Class of sensitive data a violation refers to."""

    SECRET = "secret"
    PII = "pii"


class UnitState(Enum):
    """Lifecycle of a batch unit."""

    PENDING = "pending"
    DISPATCHED = "dispatched"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TRANSITIONS = {
    UnitState.PENDING: {UnitState.DISPATCHED},
    UnitState.DISPATCHED: {UnitState.SUCCEEDED, UnitState.FAILED},
    UnitState.SUCCEEDED: set(),
    UnitState.FAILED: set(),
}


class InvalidTransitionError(Exception):
    """Raised when a batch unit is moved to a state it cannot reach."""

    pass


@dataclass(frozen=True)
class Violation:
    """A secret or PII match found in file content.

    Attributes:
        file: Path of the file the match was found in.
        line: 1-based line number.
        kind: Secret or PII.
        pattern: Label of the pattern that matched.
        description: Human-readable description.
        confidence: Confidence in [0, 1].
    """

    file: str
    line: int
    kind: ViolationKind
    pattern: str
    description: str
    confidence: float


@dataclass
class Chunk:
    """A bounded, possibly overlapping slice of a file's lines.

    Attributes:
        index: Position of the chunk within the file (0-based, contiguous).
        start_line: First line covered (1-based).
        end_line: Last line covered (1-based, inclusive).
        start_offset: Byte offset of the first line in the original content.
        end_offset: Byte offset just past the last line (terminator excluded).
        content: Lines joined with "\\n".
        token_count: Estimated tokens of ``content``.
        overlap: Number of leading lines repeated from the previous chunk.
    """

    index: int
    start_line: int
    end_line: int
    start_offset: int
    end_offset: int
    content: str
    token_count: int
    overlap: int = 0

    @property
    def lines(self) -> list[str]:
        return self.content.split("\n")


@dataclass
class FileRecord:
    """Metadata and (optionally) content of one scanned file.

    ``sensitive`` is always true when ``violations`` is non-empty. When
    ``readable`` is false, ``content``, ``summary`` and ``chunks`` stay empty.
    """

    path: str
    rel_path: str
    size: int
    tier: SizeTier
    content_type: ContentType
    extension: str = ""
    modified: datetime | None = None
    readable: bool = False
    sensitive: bool = False
    violations: list[Violation] = field(default_factory=list)
    token_count: int = 0
    content: str | None = None
    summary: str = ""
    chunks: list[Chunk] = field(default_factory=list)

    def add_violations(self, violations: list[Violation]) -> None:
        """Attach violations and mark the file sensitive if any were found."""
        if violations:
            self.violations.extend(violations)
            self.sensitive = True


@dataclass
class ScanError:
    """An error recorded for one path while scanning or analyzing."""

    path: str
    error: str
    time: datetime = field(default_factory=datetime.now)


@dataclass
class ScanResult:
    """Result of scanning and analyzing a directory."""

    root: str
    total_files: int = 0
    filtered_files: int = 0
    total_size: int = 0
    files: list[FileRecord] = field(default_factory=list)
    errors: list[ScanError] = field(default_factory=list)
    duration: float = 0.0
    summary: dict[str, int] = field(default_factory=dict)

    @property
    def violations(self) -> list[Violation]:
        return [v for record in self.files for v in record.violations]


@dataclass
class AnalysisResult:
    """A successful backend response for one request.

    Attributes:
        response: Response text.
        model: Model identifier reported by the backend.
        prompt_tokens: Tokens consumed by the prompt.
        completion_tokens: Tokens generated.
        duration: Wall-clock seconds spent on the call.
    """

    response: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    duration: float = 0.0

    @property
    def tokens_used(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class BatchUnit:
    """A single file wrapped for dispatch."""

    position: int
    file: FileRecord
    state: UnitState = UnitState.PENDING

    def advance(self, state: UnitState) -> None:
        """Move the unit to ``state``.

        Raises:
            InvalidTransitionError: If the transition is not allowed.
        """
        if state not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Unit {self.position} ({self.file.rel_path}): "
                f"{self.state.value} -> {state.value} is not allowed"
            )
        self.state = state


@dataclass
class BatchOutcome:
    """Result of dispatching one unit: either a result or the captured error."""

    position: int
    rel_path: str
    result: AnalysisResult | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


@dataclass
class SkippedFile:
    """A file left out of dispatch, with the reason."""

    rel_path: str
    reason: str
    token_count: int = 0


@dataclass
class AggregatedResult:
    """Ordered, folded outcome of a dispatch run."""

    response: str
    model: str = ""
    outcomes: list[BatchOutcome] = field(default_factory=list)
    tokens_used: int = 0
    file_tokens: dict[str, int] = field(default_factory=dict)
    duration: float = 0.0
    skipped: list[SkippedFile] = field(default_factory=list)

    @property
    def failures(self) -> list[BatchOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def successes(self) -> list[BatchOutcome]:
        return [o for o in self.outcomes if o.ok]

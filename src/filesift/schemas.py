"""Pydantic schemas for exporting scan and analysis results."""

from datetime import datetime

from pydantic import BaseModel, Field

from filesift.models import AggregatedResult, FileRecord, ScanResult, Violation


class ViolationOut(BaseModel):
    """A detected secret or PII match."""

    file: str
    line: int
    kind: str
    pattern: str
    description: str
    confidence: float = Field(..., ge=0.0, le=1.0)

    @classmethod
    def from_violation(cls, violation: Violation) -> "ViolationOut":
        return cls(
            file=violation.file,
            line=violation.line,
            kind=violation.kind.value,
            pattern=violation.pattern,
            description=violation.description,
            confidence=violation.confidence,
        )


class FileEntry(BaseModel):
    """Metadata of one scanned file. Content is never exported."""

    path: str
    rel_path: str
    size: int
    tier: str
    content_type: str
    extension: str = ""
    modified: datetime | None = None
    readable: bool
    sensitive: bool
    token_count: int = 0
    summary: str = ""
    chunk_count: int = 0
    violations: list[ViolationOut] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileEntry":
        return cls(
            path=record.path,
            rel_path=record.rel_path,
            size=record.size,
            tier=record.tier.value,
            content_type=record.content_type.value,
            extension=record.extension,
            modified=record.modified,
            readable=record.readable,
            sensitive=record.sensitive,
            token_count=record.token_count,
            summary=record.summary,
            chunk_count=len(record.chunks),
            violations=[ViolationOut.from_violation(v) for v in record.violations],
        )


class ScanErrorOut(BaseModel):
    """An error recorded for one path."""

    path: str
    error: str
    time: datetime


class ScanReport(BaseModel):
    """Exported result of a directory scan."""

    root: str
    total_files: int
    filtered_files: int
    total_size: int
    duration: float
    summary: dict[str, int] = Field(default_factory=dict)
    files: list[FileEntry] = Field(default_factory=list)
    errors: list[ScanErrorOut] = Field(default_factory=list)

    @classmethod
    def from_scan(cls, scan: ScanResult) -> "ScanReport":
        return cls(
            root=scan.root,
            total_files=scan.total_files,
            filtered_files=scan.filtered_files,
            total_size=scan.total_size,
            duration=scan.duration,
            summary=dict(scan.summary),
            files=[FileEntry.from_record(r) for r in scan.files],
            errors=[ScanErrorOut(path=e.path, error=e.error, time=e.time) for e in scan.errors],
        )


class SkippedOut(BaseModel):
    """A file left out of dispatch."""

    rel_path: str
    reason: str
    token_count: int = 0


class FileOutcome(BaseModel):
    """Per-file dispatch outcome."""

    rel_path: str
    ok: bool
    tokens_used: int = 0
    error: str | None = None


class AnalysisResponse(BaseModel):
    """Exported result of a dispatch run."""

    response: str
    model: str
    tokens_used: int
    file_tokens: dict[str, int] = Field(default_factory=dict)
    duration: float
    failed: int = 0
    outcomes: list[FileOutcome] = Field(default_factory=list)
    skipped: list[SkippedOut] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: AggregatedResult) -> "AnalysisResponse":
        return cls(
            response=result.response,
            model=result.model,
            tokens_used=result.tokens_used,
            file_tokens=dict(result.file_tokens),
            duration=result.duration,
            failed=len(result.failures),
            outcomes=[
                FileOutcome(
                    rel_path=o.rel_path,
                    ok=o.ok,
                    tokens_used=o.result.tokens_used if o.result else 0,
                    error=str(o.error) if o.error is not None else None,
                )
                for o in result.outcomes
            ],
            skipped=[
                SkippedOut(rel_path=s.rel_path, reason=s.reason, token_count=s.token_count)
                for s in result.skipped
            ],
        )

"""Export schema tests."""

import pytest
from pydantic import ValidationError

from filesift.llm.client import LLMConnectionError
from filesift.models import (
    AggregatedResult,
    AnalysisResult,
    BatchOutcome,
    ContentType,
    FileRecord,
    ScanError,
    ScanResult,
    SizeTier,
    SkippedFile,
    Violation,
    ViolationKind,
)
from filesift.schemas import AnalysisResponse, FileEntry, ScanReport, ViolationOut


def make_violation(**overrides) -> Violation:
    fields = dict(
        file="/repo/app.py",
        line=3,
        kind=ViolationKind.SECRET,
        pattern="password",
        description="Potential secret or credential detected",
        confidence=0.8,
    )
    fields.update(overrides)
    return Violation(**fields)


def test_file_entry_never_exports_content():
    record = FileRecord(
        path="/repo/app.py",
        rel_path="app.py",
        size=40,
        tier=SizeTier.SMALL,
        content_type=ContentType.TEXT,
        extension=".py",
        readable=True,
        content="password=hunter2",
        token_count=5,
    )
    record.add_violations([make_violation()])

    entry = FileEntry.from_record(record)
    data = entry.model_dump()

    assert "content" not in data
    assert "hunter2" not in entry.model_dump_json()
    assert data["tier"] == "small"
    assert data["content_type"] == "text"
    assert data["sensitive"] is True
    assert data["violations"][0]["kind"] == "secret"


def test_violation_confidence_is_bounded():
    with pytest.raises(ValidationError):
        ViolationOut.from_violation(make_violation(confidence=1.5))


def test_scan_report():
    scan = ScanResult(
        root="/repo",
        total_files=2,
        filtered_files=1,
        total_size=100,
        files=[
            FileRecord(
                path="/repo/a.py",
                rel_path="a.py",
                size=100,
                tier=SizeTier.SMALL,
                content_type=ContentType.TEXT,
            )
        ],
        errors=[ScanError(path="/repo/b.pdf", error="Failed to extract text")],
        duration=0.5,
        summary={"text": 1, "small": 1},
    )

    report = ScanReport.from_scan(scan)

    assert report.total_files == 2
    assert [f.rel_path for f in report.files] == ["a.py"]
    assert report.errors[0].path == "/repo/b.pdf"
    assert report.summary == {"text": 1, "small": 1}


def test_analysis_response():
    result = AggregatedResult(
        response="...",
        model="fake-model",
        outcomes=[
            BatchOutcome(
                position=0,
                rel_path="a.py",
                result=AnalysisResult(
                    response="ok", model="fake-model", prompt_tokens=10, completion_tokens=5
                ),
            ),
            BatchOutcome(position=1, rel_path="b.py", error=LLMConnectionError("down")),
        ],
        tokens_used=15,
        file_tokens={"a.py": 15},
        duration=1.2,
        skipped=[SkippedFile("c.py", "sensitive", 3)],
    )

    response = AnalysisResponse.from_result(result)

    assert response.failed == 1
    assert [(o.rel_path, o.ok, o.tokens_used, o.error) for o in response.outcomes] == [
        ("a.py", True, 15, None),
        ("b.py", False, 0, "down"),
    ]
    assert response.skipped[0].reason == "sensitive"
    assert response.file_tokens == {"a.py": 15}

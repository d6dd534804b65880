"""Data model tests."""

import pytest

from filesift.models import (
    BatchUnit,
    Chunk,
    ContentType,
    FileRecord,
    InvalidTransitionError,
    SizeTier,
    UnitState,
)


def make_unit() -> BatchUnit:
    record = FileRecord(
        path="/repo/a.py",
        rel_path="a.py",
        size=1,
        tier=SizeTier.SMALL,
        content_type=ContentType.TEXT,
    )
    return BatchUnit(position=0, file=record)


def test_unit_lifecycle():
    unit = make_unit()

    unit.advance(UnitState.DISPATCHED)
    unit.advance(UnitState.SUCCEEDED)

    assert unit.state is UnitState.SUCCEEDED


@pytest.mark.parametrize(
    "path",
    [
        [UnitState.SUCCEEDED],
        [UnitState.DISPATCHED, UnitState.PENDING],
        [UnitState.DISPATCHED, UnitState.FAILED, UnitState.SUCCEEDED],
        [UnitState.DISPATCHED, UnitState.DISPATCHED],
    ],
)
def test_invalid_transitions(path):
    unit = make_unit()

    with pytest.raises(InvalidTransitionError, match="a.py"):
        for state in path:
            unit.advance(state)


def test_readable_content_types():
    assert {t for t in ContentType if t.readable} == {
        ContentType.TEXT,
        ContentType.DOCUMENT,
        ContentType.CAPTURE_LOG,
    }


def test_chunk_lines():
    chunk = Chunk(
        index=0,
        start_line=1,
        end_line=2,
        start_offset=0,
        end_offset=3,
        content="a\nb",
        token_count=2,
    )

    assert chunk.lines == ["a", "b"]

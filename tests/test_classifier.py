"""File classification tests."""

from pathlib import Path

import pytest

from filesift.analysis.classifier import FileClassifier
from filesift.models import ContentType, SizeTier


@pytest.fixture
def classifier() -> FileClassifier:
    return FileClassifier()


@pytest.mark.parametrize(
    "size,tier",
    [
        (0, SizeTier.SMALL),
        (10 * 1024, SizeTier.SMALL),
        (10 * 1024 + 1, SizeTier.MEDIUM),
        (100 * 1024, SizeTier.MEDIUM),
        (100 * 1024 + 1, SizeTier.LARGE),
    ],
)
def test_size_tier_boundaries(classifier: FileClassifier, size: int, tier: SizeTier):
    assert classifier.size_tier(size) is tier


def test_size_tier_uses_configured_thresholds():
    classifier = FileClassifier(small_file_bytes=100, medium_file_bytes=200)

    assert classifier.size_tier(150) is SizeTier.MEDIUM
    assert classifier.size_tier(201) is SizeTier.LARGE


@pytest.mark.parametrize(
    "name,content_type",
    [
        ("main.py", ContentType.TEXT),
        ("MAIN.PY", ContentType.TEXT),
        ("tool.exe", ContentType.BINARY),
        ("bundle.zip", ContentType.ARCHIVE),
        ("logo.png", ContentType.IMAGE),
        ("report.pdf", ContentType.DOCUMENT),
        ("traffic.pcap", ContentType.CAPTURE_LOG),
        ("traffic.pcapng", ContentType.CAPTURE_LOG),
    ],
)
def test_content_type_from_extension(
    classifier: FileClassifier, tmp_path: Path, name: str, content_type: ContentType
):
    """Known extensions decide the type without reading the file."""
    path = tmp_path / name
    path.write_bytes(b"\x00\x01\x02")

    assert classifier.content_type(path) is content_type


def test_sniff_text_for_unknown_extension(classifier: FileClassifier, tmp_path: Path):
    path = tmp_path / "server.log"
    path.write_text("2024-01-01 started\n2024-01-01 ready\n")

    assert classifier.content_type(path) is ContentType.TEXT


def test_sniff_binary_for_unknown_extension(classifier: FileClassifier, tmp_path: Path):
    path = tmp_path / "blob.dat"
    path.write_bytes(bytes(range(256)) * 2)

    assert classifier.content_type(path) is ContentType.BINARY


def test_sniff_empty_file_is_binary(classifier: FileClassifier, tmp_path: Path):
    path = tmp_path / "empty.dat"
    path.write_bytes(b"")

    assert classifier.sniff(path) is ContentType.BINARY


def test_sniff_tolerates_character_cut_at_boundary(classifier: FileClassifier, tmp_path: Path):
    """A multi-byte character split by the 512-byte window is not a decode error."""
    path = tmp_path / "notes.data"
    path.write_bytes(b"a" * 511 + "é".encode("utf-8") + b"tail")

    assert classifier.sniff(path) is ContentType.TEXT


def test_sniff_mostly_non_printable_is_binary(classifier: FileClassifier, tmp_path: Path):
    """Valid UTF-8 below the printable ratio is still binary."""
    path = tmp_path / "controls.data"
    path.write_bytes(b"\x01" * 100 + b"a" * 100)

    assert classifier.sniff(path) is ContentType.BINARY


def test_classify_readable_text_file(classifier: FileClassifier, tmp_path: Path):
    path = tmp_path / "app.py"
    path.write_text("print('hi')\n")

    record = classifier.classify(path)

    assert record.content_type is ContentType.TEXT
    assert record.tier is SizeTier.SMALL
    assert record.size == len("print('hi')\n")
    assert record.extension == ".py"
    assert record.readable is True
    assert record.modified is not None


def test_classify_image_is_not_readable(classifier: FileClassifier, tmp_path: Path):
    path = tmp_path / "logo.png"
    path.write_bytes(b"\x89PNG\r\n")

    record = classifier.classify(path)

    assert record.content_type is ContentType.IMAGE
    assert record.readable is False


def test_classify_missing_file_is_unknown(classifier: FileClassifier, tmp_path: Path):
    """Stat failures are recorded on the record, not raised."""
    record = classifier.classify(tmp_path / "gone.py")

    assert record.content_type is ContentType.UNKNOWN
    assert record.readable is False
    assert record.size == 0

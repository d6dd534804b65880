"""End-to-end pipeline tests with a fake backend."""

import pytest

from filesift.config import Config
from filesift.models import ContentType
from filesift.pipeline import Pipeline


@pytest.fixture
def project(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("def main():\n    return 1\n")
    (tmp_path / "src" / "util.py").write_text("def helper():\n    return 2\n")
    (tmp_path / "notes.md").write_text("Contact bob@example.com for access.\n")
    (tmp_path / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "dep.js").write_text("module.exports = 1")
    (tmp_path / ".env").write_text("API_KEY=abc")
    return tmp_path


@pytest.mark.asyncio
async def test_scan(project, backend_factory):
    pipeline = Pipeline(Config(), backend=backend_factory())

    scan = await pipeline.scan(project)

    assert [r.rel_path for r in scan.files] == ["logo.png", "notes.md", "src/app.py", "src/util.py"]
    assert scan.total_files == 4
    assert scan.filtered_files == 1
    assert scan.errors == []
    assert scan.summary["text"] == 3
    assert scan.summary["image"] == 1
    assert scan.summary["small"] == 4

    notes = next(r for r in scan.files if r.rel_path == "notes.md")
    assert notes.sensitive
    assert [v.pattern for v in scan.violations] == ["email"]

    logo = next(r for r in scan.files if r.rel_path == "logo.png")
    assert logo.content_type is ContentType.IMAGE
    assert not logo.readable


@pytest.mark.asyncio
async def test_run_dispatches_eligible_files(project, backend_factory):
    backend = backend_factory()
    pipeline = Pipeline(Config(), backend=backend)

    scan, result = await pipeline.run(project, "Explain what this does.")

    assert [o.rel_path for o in result.outcomes] == ["src/app.py", "src/util.py"]
    assert result.failures == []
    assert result.response.startswith("=== src/app.py ===\nanalysis of: Analyze the file")
    assert {(s.rel_path, s.reason) for s in result.skipped} == {
        ("logo.png", "unreadable"),
        ("notes.md", "sensitive"),
    }
    assert all("bob@example.com" not in content for _, content, _ in backend.calls)
    assert result.tokens_used == sum(result.file_tokens.values())


@pytest.mark.asyncio
async def test_analyze_reports_failures(project, backend_factory):
    pipeline = Pipeline(Config(), backend=backend_factory(fail_on={"src/util.py"}))

    scan = await pipeline.scan(project)
    result = await pipeline.analyze(scan, "Explain.")

    assert result.response.startswith("Warning: 1 of 2 files failed.")
    assert [o.rel_path for o in result.failures] == ["src/util.py"]


@pytest.mark.asyncio
async def test_default_backend_is_llm_client():
    pipeline = Pipeline(Config())

    assert pipeline.backend.model == Config().llm.model
    assert pipeline.dispatcher.backend is pipeline.backend


@pytest.mark.asyncio
async def test_scan_requires_directory(tmp_path, backend_factory):
    path = tmp_path / "file.txt"
    path.write_text("x")

    with pytest.raises(NotADirectoryError):
        await Pipeline(Config(), backend=backend_factory()).scan(path)

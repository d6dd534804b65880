"""Shared pytest fixtures for all tests."""

import asyncio
from pathlib import Path

import pytest

from filesift.config import Config, load_settings
from filesift.llm.client import LLMConnectionError
from filesift.models import AnalysisResult, ContentType, FileRecord, SizeTier


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Clear the load_settings cache around each test."""
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


@pytest.fixture
def config() -> Config:
    """Default configuration."""
    return Config()


@pytest.fixture
def make_record():
    """Factory for readable, analyzed text FileRecords."""

    def _make(
        rel_path: str,
        token_count: int = 10,
        content: str | None = None,
        tier: SizeTier = SizeTier.SMALL,
        readable: bool = True,
        sensitive: bool = False,
        content_type: ContentType = ContentType.TEXT,
    ) -> FileRecord:
        if content is None:
            content = f"contents of {rel_path}"
        return FileRecord(
            path=f"/repo/{rel_path}",
            rel_path=rel_path,
            size=len(content),
            tier=tier,
            content_type=content_type,
            extension=Path(rel_path).suffix,
            readable=readable,
            sensitive=sensitive,
            token_count=token_count,
            content=content,
        )

    return _make


class FakeBackend:
    """Deterministic backend whose response echoes the task.

    Tracks calls in flight so tests can check the concurrency bound.
    """

    def __init__(self, fail_on: set[str] | None = None, delay: float = 0.0):
        self.fail_on = fail_on or set()
        self.delay = delay
        self.calls: list[tuple[str, str, float]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def analyze(self, task: str, content: str, temperature: float) -> AnalysisResult:
        self.calls.append((task, content, temperature))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            for name in self.fail_on:
                if f"'{name}'" in task:
                    raise LLMConnectionError(f"Connection failed: backend down for {name}")
            return AnalysisResult(
                response=f"analysis of: {task}",
                model="fake-model",
                prompt_tokens=len(content) % 97,
                completion_tokens=7,
                duration=self.delay,
            )
        finally:
            self.in_flight -= 1


@pytest.fixture
def backend_factory():
    """Factory for FakeBackend instances."""
    return FakeBackend

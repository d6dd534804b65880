"""Scan, analyze and dispatch in one place.

``Pipeline`` wires the components together from a ``Config`` so front ends
only have to pick a root directory and a task.
"""

import logging
import time
from collections import Counter
from pathlib import Path

from filesift.analysis.analyzer import FileAnalyzer
from filesift.analysis.selector import ContentSelector
from filesift.config import Config
from filesift.dispatch.batch import BatchDispatcher, ProgressCallback
from filesift.llm.client import BackendClient, LLMClient
from filesift.models import AggregatedResult, ScanResult
from filesift.scanning.file_filter import FileFilter
from filesift.scanning.walker import scan_directory
from filesift.security.redactor import Redactor

logger = logging.getLogger(__name__)


class Pipeline:
    """Runs the full scan-then-dispatch flow for one configuration."""

    def __init__(self, config: Config, backend: BackendClient | None = None):
        """Initialize the pipeline.

        Args:
            config: Application configuration.
            backend: Backend to dispatch to. An LLMClient is built from
                ``config.llm`` if None.
        """
        self.config = config
        self.redactor = Redactor()
        self.analyzer = FileAnalyzer(config, redactor=self.redactor)
        self.backend = backend or LLMClient.from_config(config.llm, api_key=config.api_key)
        self.dispatcher = BatchDispatcher(
            backend=self.backend,
            selector=ContentSelector(self.redactor),
            token_limit=config.agent.token_limit,
            concurrency=config.agent.concurrent_files,
            temperature=config.llm.temperature,
        )

    async def scan(self, root: str | Path) -> ScanResult:
        """Walk ``root`` and analyze every candidate file.

        Args:
            root: Directory to scan.

        Returns:
            ScanResult with records in walk order and per-file errors.

        Raises:
            NotADirectoryError: If root is not a directory.
        """
        start_time = time.perf_counter()
        root_path = Path(root).resolve()
        file_filter = FileFilter(
            root_path,
            ignore_file=self.config.paths.ignore_file,
            detect_secrets=self.config.security.detect_secrets,
            redactor=self.redactor,
        )
        walk = scan_directory(
            root_path,
            file_filter,
            max_depth=self.config.security.max_depth,
            follow_symlinks=self.config.security.follow_symlinks,
        )

        records, errors = await self.analyzer.analyze_files(list(walk.paths), root_path)

        summary: Counter[str] = Counter()
        for record in records:
            summary[record.content_type.value] += 1
            summary[record.tier.value] += 1

        result = ScanResult(
            root=str(root_path),
            total_files=len(walk.paths),
            filtered_files=walk.filtered,
            total_size=walk.total_size,
            files=records,
            errors=walk.errors + errors,
            duration=time.perf_counter() - start_time,
            summary=dict(summary),
        )
        logger.info(
            f"Scanned {result.total_files} files in {result.duration:.2f}s "
            f"({len(result.violations)} violations, {len(result.errors)} errors)"
        )
        return result

    async def analyze(
        self,
        scan: ScanResult,
        task: str,
        progress_callback: ProgressCallback | None = None,
    ) -> AggregatedResult:
        """Dispatch the scanned files to the backend, one request per file."""
        return await self.dispatcher.dispatch(scan.files, task, progress_callback)

    async def run(
        self,
        root: str | Path,
        task: str,
        progress_callback: ProgressCallback | None = None,
    ) -> tuple[ScanResult, AggregatedResult]:
        """Scan ``root`` and analyze the result with ``task``."""
        scan = await self.scan(root)
        result = await self.analyze(scan, task, progress_callback)
        return scan, result

"""Batch dispatch of single-file analysis requests.

Every eligible file becomes one ``BatchUnit``. Units run either one after the
other (concurrency 1, or a single unit) or through a fixed pool of worker
tasks draining a pre-populated queue. Each worker writes only the outcome slot
of the unit it took, so the final result is assembled in position order no
matter which worker finished first.
"""

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Coroutine

from filesift import constants
from filesift.analysis.selector import (
    SKIP_SENSITIVE,
    SKIP_TOO_LARGE,
    SKIP_UNREADABLE,
    ContentSelector,
)
from filesift.llm.client import BackendClient
from filesift.llm.prompts import single_file_task
from filesift.models import (
    AggregatedResult,
    BatchOutcome,
    BatchUnit,
    FileRecord,
    SkippedFile,
    UnitState,
)

logger = logging.getLogger(__name__)

NO_FILES_RESPONSE = "No files to analyze"


class EmptyContentError(Exception):
    """Raised when a unit has no meaningful content to send."""

    pass


@dataclass
class DispatchProgress:
    """Progress update for one unit.

    Attributes:
        position: Position of the unit (0-based).
        rel_path: File being processed.
        state: State the unit just entered.
        completed: Units finished (succeeded or failed) so far.
        total: Total units in this dispatch.
        message: Human-readable progress message.
        timestamp: Time of the update.
    """

    position: int
    rel_path: str
    state: UnitState
    completed: int
    total: int
    message: str = ""
    timestamp: datetime = field(default_factory=datetime.now)


# Type alias for progress callback
ProgressCallback = Callable[[DispatchProgress], Coroutine[Any, Any, None]]


def format_file_section(rel_path: str, body: str) -> str:
    """Render a successful response under its file header."""
    header = f"=== {rel_path} ==="
    trimmed = body.strip()
    if not trimmed:
        return header
    return f"{header}\n{trimmed}"


def format_file_error_section(rel_path: str, error: BaseException) -> str:
    """Render a failed unit under its file header."""
    return f"=== {rel_path} ===\nFAILED: {error}"


def format_failure_summary(failed: int, total: int) -> str:
    return f"Warning: {failed} of {total} files failed. See details below."


class BatchDispatcher:
    """Sends files to a backend one request per file with bounded concurrency."""

    def __init__(
        self,
        backend: BackendClient,
        selector: ContentSelector | None = None,
        token_limit: int = constants.TOKEN_LIMIT,
        concurrency: int = constants.CONCURRENT_FILES,
        temperature: float = constants.DEFAULT_TEMPERATURE,
    ):
        """Initialize the dispatcher.

        Args:
            backend: Backend that analyzes one prepared file at a time.
            selector: Renders each unit's content. A default one is built if None.
            token_limit: Token budget per request.
            concurrency: Maximum requests in flight. Values below 1 mean 1.
            temperature: Sampling temperature passed to the backend.
        """
        self.backend = backend
        self.selector = selector or ContentSelector()
        self.token_limit = token_limit
        self.concurrency = max(1, concurrency)
        self.temperature = temperature

    def prepare_units(
        self, files: Sequence[FileRecord]
    ) -> tuple[list[BatchUnit], list[SkippedFile]]:
        """Wrap every eligible file in a BatchUnit.

        A file is eligible when it is readable, not sensitive and its token
        count fits the token limit on its own.

        Returns:
            Tuple of (units in file order, skipped files with reasons).
        """
        units: list[BatchUnit] = []
        skipped: list[SkippedFile] = []

        for record in files:
            if not record.readable:
                skipped.append(SkippedFile(record.rel_path, SKIP_UNREADABLE, record.token_count))
            elif record.sensitive:
                skipped.append(SkippedFile(record.rel_path, SKIP_SENSITIVE, record.token_count))
            elif record.token_count > self.token_limit:
                logger.warning(
                    f"Skipping {record.rel_path} ({record.token_count} tokens "
                    f"exceeds limit of {self.token_limit})"
                )
                skipped.append(SkippedFile(record.rel_path, SKIP_TOO_LARGE, record.token_count))
            else:
                units.append(BatchUnit(position=len(units), file=record))

        return units, skipped

    async def dispatch(
        self,
        files: Sequence[FileRecord],
        task: str,
        progress_callback: ProgressCallback | None = None,
    ) -> AggregatedResult:
        """Analyze each eligible file in its own backend request.

        Args:
            files: Analyzed files in display order.
            task: What to do with each file.
            progress_callback: Optional async callback for progress updates.

        Returns:
            AggregatedResult with sections in file order. Per-file failures
            are reported in the result, never raised.
        """
        start_time = time.perf_counter()
        units, skipped = self.prepare_units(files)

        if not units:
            return AggregatedResult(
                response=NO_FILES_RESPONSE,
                skipped=skipped,
                duration=time.perf_counter() - start_time,
            )

        tracker = _Tracker(total=len(units), callback=progress_callback)

        if self.concurrency == 1 or len(units) == 1:
            outcomes = [await self._process_unit(unit, task, tracker) for unit in units]
        else:
            outcomes = await self._run_pool(units, task, tracker)

        result = self._aggregate(outcomes, skipped)
        result.duration = time.perf_counter() - start_time
        logger.info(
            f"Dispatched {len(units)} files: {len(result.successes)} succeeded, "
            f"{len(result.failures)} failed, {len(skipped)} skipped "
            f"in {result.duration:.2f}s"
        )
        return result

    async def _run_pool(
        self, units: list[BatchUnit], task: str, tracker: "_Tracker"
    ) -> list[BatchOutcome]:
        queue: asyncio.Queue[BatchUnit] = asyncio.Queue(maxsize=len(units))
        for unit in units:
            queue.put_nowait(unit)

        outcomes: list[BatchOutcome | None] = [None] * len(units)

        async def worker(worker_id: int) -> None:
            logger.debug(f"Worker {worker_id} started")
            while True:
                try:
                    unit = queue.get_nowait()
                except asyncio.QueueEmpty:
                    break
                outcomes[unit.position] = await self._process_unit(unit, task, tracker)
                queue.task_done()
            logger.debug(f"Worker {worker_id} finished")

        await asyncio.gather(*(worker(i) for i in range(self.concurrency)))

        # every slot is filled once gather returns
        return [o for o in outcomes if o is not None]

    async def _process_unit(
        self, unit: BatchUnit, task: str, tracker: "_Tracker"
    ) -> BatchOutcome:
        rel_path = unit.file.rel_path
        unit.advance(UnitState.DISPATCHED)
        await tracker.emit(unit, f"Processing file {unit.position + 1}/{tracker.total}: {rel_path}")

        try:
            result = await self._analyze(unit, task)
        except Exception as e:
            unit.advance(UnitState.FAILED)
            logger.warning(f"File {rel_path} failed: {e}")
            await tracker.finish(unit, f"File {rel_path} failed: {e}")
            return BatchOutcome(position=unit.position, rel_path=rel_path, error=e)

        unit.advance(UnitState.SUCCEEDED)
        await tracker.finish(unit, f"Completed {rel_path}")
        return BatchOutcome(position=unit.position, rel_path=rel_path, result=result)

    async def _analyze(self, unit: BatchUnit, task: str):
        selection = self.selector.prepare([unit.file], self.token_limit)
        if not selection.included or not (unit.file.content or "").strip():
            raise EmptyContentError(f"No valid content to analyze in {unit.file.rel_path}")

        return await self.backend.analyze(
            single_file_task(unit.file.rel_path, task),
            selection.payload,
            self.temperature,
        )

    def _aggregate(
        self, outcomes: list[BatchOutcome], skipped: list[SkippedFile]
    ) -> AggregatedResult:
        ordered = sorted(outcomes, key=lambda o: o.position)
        sections: list[str] = []
        file_tokens: dict[str, int] = {}
        tokens_used = 0
        model = ""

        for outcome in ordered:
            result = outcome.result
            if outcome.ok and result is not None:
                sections.append(format_file_section(outcome.rel_path, result.response))
                file_tokens[outcome.rel_path] = result.tokens_used
                tokens_used += result.tokens_used
                if not model:
                    model = result.model
            else:
                sections.append(format_file_error_section(outcome.rel_path, outcome.error))

        failed = sum(1 for o in ordered if not o.ok)
        if failed:
            sections.insert(0, format_failure_summary(failed, len(ordered)))

        return AggregatedResult(
            response="\n\n".join(sections),
            model=model,
            outcomes=ordered,
            tokens_used=tokens_used,
            file_tokens=file_tokens,
            skipped=skipped,
        )


class _Tracker:
    """Counts finished units and forwards progress to the callback."""

    def __init__(self, total: int, callback: ProgressCallback | None):
        self.total = total
        self.completed = 0
        self.callback = callback

    async def emit(self, unit: BatchUnit, message: str) -> None:
        if not self.callback:
            return
        try:
            await self.callback(
                DispatchProgress(
                    position=unit.position,
                    rel_path=unit.file.rel_path,
                    state=unit.state,
                    completed=self.completed,
                    total=self.total,
                    message=message,
                )
            )
        except Exception as e:
            # Progress is advisory; the unit's outcome stands
            logger.warning(f"Progress callback failed for {unit.file.rel_path}: {e}")

    async def finish(self, unit: BatchUnit, message: str) -> None:
        self.completed += 1
        await self.emit(unit, message)

"""Content selection: decide which files fit a token budget and render them."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from filesift import constants
from filesift.models import FileRecord, SizeTier, SkippedFile
from filesift.security.redactor import Redactor

logger = logging.getLogger(__name__)

SKIP_SENSITIVE = "sensitive"
SKIP_UNREADABLE = "unreadable"
SKIP_TOO_LARGE = "exceeds token limit"
SKIP_BUDGET = "token budget exhausted"


@dataclass
class SelectionResult:
    """Rendered payload and the selection decisions behind it.

    Attributes:
        payload: Text to forward to the backend.
        included: Files whose content was rendered, in input order.
        skipped_too_large: Files whose own token count exceeds the budget.
        skipped: Every file left out, with the reason.
    """

    payload: str
    included: list[FileRecord] = field(default_factory=list)
    skipped_too_large: list[FileRecord] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)

    @property
    def included_tokens(self) -> int:
        return sum(f.token_count for f in self.included)


def fence(content: str, extension: str) -> str:
    """Wrap content in a fenced block tagged with the extension's language."""
    language = constants.FENCE_LANGUAGES.get(extension, "")
    return f"```{language}\n{content}\n```\n"


class ContentSelector:
    """Selects files under a token budget and renders them for the backend.

    Policy, in file order:

    1. Unreadable and sensitive files are never rendered; they get a
       placeholder line.
    2. A file whose own token count exceeds the budget is set aside as too
       large, even when it would be the only file.
    3. Remaining files are admitted while the running total stays within the
       budget. Since rule 2 runs first, the first admitted file always fits.
    """

    def __init__(self, redactor: Redactor | None = None):
        self.redactor = redactor or Redactor()

    def select(
        self, files: Sequence[FileRecord], budget: int
    ) -> tuple[list[FileRecord], list[FileRecord], list[SkippedFile]]:
        """Apply the selection policy without rendering anything.

        Args:
            files: Candidate files in order.
            budget: Token budget.

        Returns:
            Tuple of (included, too_large, skipped with reasons).
        """
        included: list[FileRecord] = []
        too_large: list[FileRecord] = []
        skipped: list[SkippedFile] = []
        current = 0
        exhausted = False

        for record in files:
            if not record.readable:
                skipped.append(SkippedFile(record.rel_path, SKIP_UNREADABLE, record.token_count))
                continue
            if record.sensitive:
                skipped.append(SkippedFile(record.rel_path, SKIP_SENSITIVE, record.token_count))
                continue
            if record.token_count > budget:
                logger.warning(
                    f"Skipping {record.rel_path}: {record.token_count} tokens "
                    f"exceeds limit of {budget}"
                )
                too_large.append(record)
                skipped.append(SkippedFile(record.rel_path, SKIP_TOO_LARGE, record.token_count))
                continue
            if exhausted or current + record.token_count > budget:
                exhausted = True
                skipped.append(SkippedFile(record.rel_path, SKIP_BUDGET, record.token_count))
                continue

            included.append(record)
            current += record.token_count

        return included, too_large, skipped

    def prepare(self, files: Sequence[FileRecord], budget: int) -> SelectionResult:
        """Select files under ``budget`` and render the payload.

        Args:
            files: Candidate files in order.
            budget: Token budget for the rendered content.

        Returns:
            SelectionResult with the rendered payload.
        """
        included, too_large, skipped = self.select(files, budget)
        included_ids = {id(f) for f in included}
        placeholders = {
            SKIP_SENSITIVE: "[SENSITIVE FILE - SKIPPED]",
            SKIP_UNREADABLE: "[UNREADABLE FILE - SKIPPED]",
        }

        parts = ["# Project Files Summary\n\n", f"Total files to analyze: {len(included)}\n\n"]
        if too_large:
            parts.append(f"Skipped {len(too_large)} files (exceed token limit)\n\n")
        parts.append("## File List:\n")
        parts.extend(f"- {f.rel_path}\n" for f in included)
        parts.append("\n---\n\n## File Contents:\n\n")

        skip_reasons = {s.rel_path: s.reason for s in skipped}
        for record in files:
            if id(record) in included_ids:
                parts.append(self._render_file(record, single=len(included) == 1))
                continue
            placeholder = placeholders.get(skip_reasons.get(record.rel_path, ""))
            if placeholder:
                parts.append(f"### File: {record.rel_path}\n{placeholder}\n\n")

        return SelectionResult(
            payload="".join(parts),
            included=included,
            skipped_too_large=too_large,
            skipped=skipped,
        )

    def _render_file(self, record: FileRecord, single: bool) -> str:
        header = f"### File: {record.rel_path}\n"
        if record.tier is not SizeTier.LARGE:
            if not record.content:
                return header + "[Empty file]\n\n"
            return header + fence(self.redactor.redact(record.content), record.extension) + "\n"

        if single and record.content:
            return header + fence(self.redactor.redact(record.content), record.extension) + "\n"

        body = f"[Large file - {record.summary}]\n"
        if record.chunks and record.chunks[0].content:
            preview = self.redactor.redact(record.chunks[0].content)
            body += f"\n**Preview (Chunk 1/{len(record.chunks)}):**\n"
            body += fence(preview, record.extension)
        return header + body + "\n"

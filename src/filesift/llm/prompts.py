# src/filesift/llm/prompts.py
"""Prompt templates for file analysis."""

from dataclasses import dataclass
from typing import Any


@dataclass
class PromptTemplate:
    """A template for generating prompts with variable substitution."""

    template: str

    def render(self, **kwargs: Any) -> str:
        """Render the template with the given variables.

        Raises:
            KeyError: If a required variable is missing.
        """
        return self.template.format(**kwargs)


# =============================================================================
# System Prompt
# =============================================================================

SYSTEM_PROMPT = """You are an assistant that analyzes files and documents. Answer only from \
the provided files and task; if something is not in the provided files, say 'Not found in \
provided files' instead of guessing.
Stay on the specific request (no generic advice unless asked). When the user asks to 'show', \
'copy', 'paste', or 'extract' specific content, provide the exact literal content first in \
fenced code blocks (for code/config) or quoted blocks (for text/data), then optionally add \
brief context.
For code-related tasks: include concrete, actionable fixes. If the user asks for new code or \
applied suggestions, include updated code blocks or concise patch-style snippets that \
implement the recommendations.
For analysis tasks: list findings with severity, then propose changes, then show any revised \
content. Keep the output concise and directly applicable.
When you present code, wrap it in fenced markdown blocks with a language tag (e.g., \
```python ... ```). Separate multiple files or sections with clear headings."""


# =============================================================================
# Task Templates
# =============================================================================

TASK_TEMPLATE = PromptTemplate(
    """**Task:** {task}

Please complete this task based on the following files:

{content}"""
)

SINGLE_FILE_TASK = PromptTemplate("Analyze the file '{rel_path}'. {task}")


def format_task_message(task: str, content: str) -> str:
    """Build the user message for a task and its prepared file content."""
    return TASK_TEMPLATE.render(task=task, content=content)


def single_file_task(rel_path: str, task: str) -> str:
    """Prefix a task with the file it applies to."""
    return SINGLE_FILE_TASK.render(rel_path=rel_path, task=task)

# tests/test_prompts.py
"""Prompt template tests."""

import pytest

from filesift.llm.prompts import (
    SYSTEM_PROMPT,
    PromptTemplate,
    format_task_message,
    single_file_task,
)


def test_prompt_template_renders_variables():
    """PromptTemplate substitutes variables correctly."""
    template = PromptTemplate("Review {rel_path} for {concern}.")

    result = template.render(rel_path="src/app.py", concern="bugs")

    assert result == "Review src/app.py for bugs."


def test_prompt_template_handles_missing_variable():
    """PromptTemplate raises error for missing variables."""
    template = PromptTemplate("Hello {name}!")

    with pytest.raises(KeyError):
        template.render()


def test_format_task_message_places_task_before_content():
    """Task message leads with the task and ends with the file content."""
    message = format_task_message("Find bugs", "## File: a.py\n\nprint(1)")

    assert message.startswith("**Task:** Find bugs")
    assert message.endswith("## File: a.py\n\nprint(1)")
    assert message.index("Find bugs") < message.index("## File: a.py")


def test_format_task_message_keeps_braces_in_content():
    """Braces inside file content are not treated as placeholders."""
    message = format_task_message("Explain", 'data = {"key": "{value}"}')

    assert 'data = {"key": "{value}"}' in message


def test_single_file_task_names_the_file():
    """Per-file task is prefixed with the file it applies to."""
    task = single_file_task("docs/readme.md", "Summarize it.")

    assert task == "Analyze the file 'docs/readme.md'. Summarize it."


def test_system_prompt_forbids_guessing():
    """System prompt tells the model to stay within the provided files."""
    assert "Not found in provided files" in SYSTEM_PROMPT

# src/filesift/dispatch/__init__.py
"""Concurrent single-file dispatch to the backend."""

from filesift.dispatch.batch import (
    BatchDispatcher,
    DispatchProgress,
    EmptyContentError,
    format_file_error_section,
    format_file_section,
)

__all__ = [
    "BatchDispatcher",
    "DispatchProgress",
    "EmptyContentError",
    "format_file_error_section",
    "format_file_section",
]

"""File filtering with default excludes, .gitignore and ignore-file support."""

import fnmatch
import logging
from pathlib import Path

from filesift import constants
from filesift.security.redactor import Redactor

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDES = [
    # Hidden files and directories (dotfiles/dotdirs)
    # This catches .git, .venv, .env, .ssh, etc.
    ".*",
    # Dependencies
    "node_modules",
    "vendor",
    "venv",
    "__pycache__",
    "*.pyc",
    # Build outputs
    "build",
    "dist",
    "target",
    "out",
    # Minified/bundled assets
    "*.min.js",
    "*.min.css",
    "*.bundle.js",
    "*.chunk.js",
    "*.map",
    # Lock files
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "Cargo.lock",
    "poetry.lock",
    "Gemfile.lock",
    "composer.lock",
]


def read_ignore_file(path: Path) -> list[str]:
    """Read gitignore-style patterns, skipping blank lines and comments.

    A missing file yields no patterns.
    """
    if not path.is_file():
        return []
    patterns = []
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


def _matches(path: str, pattern: str, is_dir: bool) -> bool:
    """Check one gitignore-style pattern against a relative path."""
    parts = path.split("/")

    # Handle directory patterns (trailing slash means directory)
    # e.g., "docs/" matches the docs directory and anything below it
    if pattern.endswith("/"):
        dir_pattern = pattern.rstrip("/")
        dirs = parts if is_dir else parts[:-1]
        return any(fnmatch.fnmatch(part, dir_pattern) for part in dirs)

    # Anchored patterns ("/build") only match from the root
    if pattern.startswith("/"):
        anchored = pattern.lstrip("/")
        return fnmatch.fnmatch(path, anchored) or path.startswith(anchored + "/")

    # "**" patterns: optional prefix directory, basename glob after it
    if "**" in pattern:
        prefix, _, suffix = pattern.partition("**")
        prefix = prefix.strip("/")
        suffix = suffix.strip("/")
        if prefix and not (path == prefix or path.startswith(prefix + "/")):
            return False
        return not suffix or fnmatch.fnmatch(parts[-1], suffix)

    # Path patterns containing "/" match as path prefixes or full-path globs
    if "/" in pattern:
        if path.startswith(pattern + "/") or path == pattern:
            return True
        return fnmatch.fnmatch(path, pattern) or fnmatch.fnmatch(path, pattern + "/*")

    # Plain patterns match any path component or the full path
    return any(fnmatch.fnmatch(part, pattern) for part in parts) or fnmatch.fnmatch(path, pattern)


class FileFilter:
    """Decide which paths under a root are candidates for analysis."""

    def __init__(
        self,
        root: Path,
        ignore_file: str = constants.IGNORE_FILE,
        extra_excludes: list[str] | None = None,
        detect_secrets: bool = True,
        respect_gitignore: bool = True,
        redactor: Redactor | None = None,
    ):
        """Initialize file filter.

        Args:
            root: Scan root.
            ignore_file: Name of the ignore file looked up in the root.
            extra_excludes: Additional exclude patterns.
            detect_secrets: Also exclude paths that look like credentials.
            respect_gitignore: Apply the root's .gitignore.
            redactor: Supplies the sensitive-path check. A default one is built if None.
        """
        self.root = root
        self.detect_secrets = detect_secrets
        self.redactor = redactor or Redactor()

        # Build exclude patterns
        self.exclude_patterns = list(DEFAULT_EXCLUDES)
        if extra_excludes:
            self.exclude_patterns.extend(extra_excludes)
        if respect_gitignore:
            self.exclude_patterns.extend(read_ignore_file(root / ".gitignore"))
        self.exclude_patterns.extend(read_ignore_file(root / ignore_file))

    def is_excluded(self, rel_path: str, is_dir: bool = False) -> bool:
        """Check if a relative path matches the exclude patterns.

        Patterns are applied in order; a "!" pattern re-includes paths an
        earlier pattern excluded.

        Args:
            rel_path: Path relative to the root, "/"-separated.
            is_dir: Whether the path is a directory.

        Returns:
            True if the path should be excluded.
        """
        excluded = False
        for pattern in self.exclude_patterns:
            negate = pattern.startswith("!")
            if negate:
                pattern = pattern[1:]
            if _matches(rel_path, pattern, is_dir):
                excluded = not negate
        return excluded

    def should_include(self, rel_path: str) -> bool:
        """Check if a file should be analyzed.

        Args:
            rel_path: File path relative to the root, "/"-separated.

        Returns:
            False for excluded paths and, when secret detection is on, for
            paths that look like they hold credentials.
        """
        if self.is_excluded(rel_path):
            return False
        if self.detect_secrets and self.redactor.is_sensitive_path(rel_path):
            logger.info(f"Excluding sensitive path {rel_path}")
            return False
        return True

"""Secret and PII detection and redaction.

The pattern bank is built once and never mutated. A ``Redactor`` owns one and
is passed to whatever needs to scan or mask content.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import PurePath

from filesift.models import Violation, ViolationKind

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"

SECRET_CONFIDENCE = 0.8

# (label, regex)
SECRET_PATTERNS: tuple[tuple[str, str], ...] = (
    ("api_key", r"(?i)api[_-]?key[_-]?[=:]\s*['\"]?([a-zA-Z0-9_\-]{32,})"),
    ("api_key", r"(?i)apikey[_-]?[=:]\s*['\"]?([a-zA-Z0-9_\-]{32,})"),
    ("aws_access_key", r"AKIA[0-9A-Z]{16}"),
    (
        "aws_secret_key",
        r"(?i)aws[_-]?secret[_-]?access[_-]?key[_-]?[=:]\s*['\"]?([a-zA-Z0-9/+=]{40})",
    ),
    ("private_key", r"-----BEGIN\s+(RSA|DSA|EC|OPENSSH)\s+PRIVATE\s+KEY-----"),
    ("token", r"(?i)token[_-]?[=:]\s*['\"]?([a-zA-Z0-9_\-\.]{32,})"),
    ("bearer_token", r"(?i)bearer\s+([a-zA-Z0-9_\-\.=]+)"),
    ("password", r"(?i)password[_-]?[=:]\s*['\"]?([^\s'\"]+)"),
    ("password", r"(?i)passwd[_-]?[=:]\s*['\"]?([^\s'\"]+)"),
    ("connection_string", r"(?i)(mongodb|mysql|postgresql|postgres)://[^:\s]+:[^@\s]+@"),
    ("secret", r"(?i)secret[_-]?[=:]\s*['\"]?([a-zA-Z0-9_\-]{16,})"),
    ("github_token", r"gh[pousr]_[a-zA-Z0-9]{36}"),
    ("slack_token", r"xox[baprs]-[0-9a-zA-Z\-]+"),
    ("jwt", r"eyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+"),
)

# (label, regex, description, confidence)
PII_PATTERNS: tuple[tuple[str, str, str, float], ...] = (
    (
        "email",
        r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}",
        "Email address detected",
        0.9,
    ),
    ("ssn", r"\b\d{3}-\d{2}-\d{4}\b", "Potential Social Security Number detected", 0.7),
    (
        "credit_card",
        r"\b\d{4}[\s\-]?\d{4}[\s\-]?\d{4}[\s\-]?\d{4}\b",
        "Potential credit card number detected",
        0.6,
    ),
    ("phone", r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b", "Potential phone number detected", 0.8),
)

SENSITIVE_NAMES: tuple[str, ...] = (
    ".env",
    ".secret",
    "secret",
    "password",
    "credentials",
    "credential",
    "token",
    "apikey",
    "api_key",
    "private",
    "id_rsa",
    "id_dsa",
    "id_ecdsa",
    "id_ed25519",
)

SENSITIVE_EXTENSIONS = frozenset(
    {".key", ".pem", ".p12", ".pfx", ".cer", ".crt", ".der", ".jks", ".keystore"}
)


@dataclass(frozen=True)
class PatternMatcher:
    """One compiled detection pattern."""

    label: str
    kind: ViolationKind
    regex: re.Pattern[str]
    description: str
    confidence: float

    def violation(self, file: str, line: int) -> Violation:
        return Violation(
            file=file,
            line=line,
            kind=self.kind,
            pattern=self.label,
            description=self.description,
            confidence=self.confidence,
        )


@dataclass(frozen=True)
class PatternBank:
    """Immutable set of secret and PII matchers."""

    secrets: tuple[PatternMatcher, ...]
    pii: tuple[PatternMatcher, ...]

    @classmethod
    def default(cls) -> "PatternBank":
        """Compile the built-in secret and PII patterns."""
        secrets = tuple(
            PatternMatcher(
                label=label,
                kind=ViolationKind.SECRET,
                regex=re.compile(pattern),
                description="Potential secret or credential detected",
                confidence=SECRET_CONFIDENCE,
            )
            for label, pattern in SECRET_PATTERNS
        )
        pii = tuple(
            PatternMatcher(
                label=label,
                kind=ViolationKind.PII,
                regex=re.compile(pattern),
                description=description,
                confidence=confidence,
            )
            for label, pattern, description, confidence in PII_PATTERNS
        )
        return cls(secrets=secrets, pii=pii)

    @property
    def all(self) -> tuple[PatternMatcher, ...]:
        return self.secrets + self.pii


class Redactor:
    """Scans content for secrets and PII and masks matches."""

    def __init__(self, bank: PatternBank | None = None, placeholder: str = REDACTED):
        """Initialize the redactor.

        Args:
            bank: Pattern bank to use. Defaults to ``PatternBank.default()``.
            placeholder: Replacement for every match.
        """
        self.bank = bank or PatternBank.default()
        self.placeholder = placeholder

    def _scan(
        self, matchers: tuple[PatternMatcher, ...], content: str, file: str
    ) -> list[Violation]:
        violations = []
        for line_num, line in enumerate(content.split("\n"), start=1):
            for matcher in matchers:
                if matcher.regex.search(line):
                    violations.append(matcher.violation(file, line_num))
        return violations

    def scan_for_secrets(self, content: str, file: str) -> list[Violation]:
        """Find secret-looking assignments, keys and tokens, one violation per line and pattern."""
        return self._scan(self.bank.secrets, content, file)

    def scan_for_pii(self, content: str, file: str) -> list[Violation]:
        """Find emails, SSNs, card numbers and phone numbers."""
        return self._scan(self.bank.pii, content, file)

    def scan(self, content: str, file: str) -> list[Violation]:
        """Run both secret and PII scans.

        Args:
            content: Text to scan.
            file: Path recorded on each violation.

        Returns:
            Secret violations followed by PII violations.
        """
        return self.scan_for_secrets(content, file) + self.scan_for_pii(content, file)

    def redact(self, content: str) -> str:
        """Replace every secret and PII match with the placeholder.

        Passes repeat until nothing changes: masking one match can expose a
        new word boundary for another pattern. The result is therefore a
        fixed point and redacting it again returns it unchanged.
        """
        current = content
        while True:
            redacted = current
            for matcher in self.bank.all:
                redacted = matcher.regex.sub(self.placeholder, redacted)
            if redacted == current:
                return redacted
            current = redacted

    def is_sensitive_path(self, path: str) -> bool:
        """Check whether a path looks like it holds credentials.

        Only the path is inspected; the file is never opened.
        """
        lower = path.lower()
        if any(name in lower for name in SENSITIVE_NAMES):
            return True
        return PurePath(lower).suffix in SENSITIVE_EXTENSIONS

"""Secret and PII detection."""

from filesift.security.redactor import REDACTED, PatternBank, PatternMatcher, Redactor

__all__ = ["REDACTED", "PatternBank", "PatternMatcher", "Redactor"]

"""Deterministic token estimation.

No tokenizer model is loaded: the estimate is a word/punctuation count with a
small buffer, which is stable across runs and needs no I/O.
"""

import unicodedata

from filesift.constants import TOKEN_BUFFER


def _is_punct(ch: str) -> bool:
    return unicodedata.category(ch).startswith("P")


def estimate_tokens(text: str) -> int:
    """Estimate token count for text.

    A run of non-space, non-punctuation characters counts as one token and
    every punctuation character counts as one token. The count is multiplied
    by a 1.1 buffer for special tokens.

    Args:
        text: Text to estimate tokens for.

    Returns:
        Estimated token count.
    """
    tokens = 0
    in_word = False

    for ch in text:
        if ch.isspace():
            if in_word:
                tokens += 1
                in_word = False
        elif _is_punct(ch):
            if in_word:
                tokens += 1
                in_word = False
            tokens += 1
        else:
            in_word = True

    if in_word:
        tokens += 1

    return int(tokens * TOKEN_BUFFER)


def estimate_tokens_simple(text: str) -> int:
    """Cheap estimate of ~4 characters per token."""
    return len(text) // 4


def truncate_to_tokens(text: str, max_tokens: int) -> str:
    """Truncate text to approximately ``max_tokens`` tokens.

    The cut is made at the last space before the proportional character limit
    and marked with "...".
    """
    estimated = estimate_tokens(text)
    if estimated <= max_tokens:
        return text

    char_limit = int(len(text) * (max_tokens / estimated))
    if char_limit >= len(text):
        return text

    truncated = text[:char_limit]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        truncated = truncated[:last_space]

    return truncated + "..."


def token_budget(max_tokens: int, prompt_tokens: int, buffer_tokens: int = 0) -> int:
    """Tokens left for content once the prompt and a safety buffer are taken out."""
    return max(0, max_tokens - prompt_tokens - buffer_tokens)

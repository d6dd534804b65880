"""Token estimation tests."""

from hypothesis import given, settings
from hypothesis import strategies as st

from filesift.analysis.tokens import (
    estimate_tokens,
    estimate_tokens_simple,
    token_budget,
    truncate_to_tokens,
)


def test_estimate_tokens_counts_words_and_punctuation():
    """Words and punctuation marks each count as one token before the buffer."""
    # 6 words + 2 punctuation marks = 8, * 1.1 = 8.8
    assert estimate_tokens("Hello world, this is a test.") == 8


def test_estimate_tokens_empty_text():
    assert estimate_tokens("") == 0
    assert estimate_tokens("   \n\t ") == 0


def test_estimate_tokens_applies_buffer():
    """Twenty words estimate to 22 tokens."""
    text = " ".join(["word"] * 20)

    assert estimate_tokens(text) == 22


def test_estimate_tokens_punctuation_splits_words():
    """Punctuation ends a word run: a.b is three tokens."""
    assert estimate_tokens("a.b") == int(3 * 1.1)


def test_estimate_tokens_is_deterministic():
    text = "def main():\n    return compute(x, y)  # done\n"

    assert estimate_tokens(text) == estimate_tokens(text)


def test_estimate_tokens_simple_is_quarter_length():
    assert estimate_tokens_simple("a" * 100) == 25
    assert estimate_tokens_simple("abc") == 0


@given(text=st.text(max_size=200), suffix=st.text(max_size=200))
@settings(max_examples=100, deadline=None)
def test_estimate_tokens_never_decreases_when_text_grows(text, suffix):
    """Appending characters never lowers the estimate."""
    assert estimate_tokens(text) <= estimate_tokens(text + suffix)


def test_truncate_to_tokens_keeps_short_text():
    text = "short text"

    assert truncate_to_tokens(text, 100) == text


def test_truncate_to_tokens_cuts_at_word_boundary():
    text = "one two three four five six seven eight nine ten"

    truncated = truncate_to_tokens(text, 5)

    assert truncated.endswith("...")
    assert truncated.startswith("one two three")
    assert " fi..." not in truncated
    assert estimate_tokens(truncated) < estimate_tokens(text)


def test_token_budget_subtracts_prompt_and_buffer():
    assert token_budget(8000, 500, 100) == 7400
    assert token_budget(8000, 500) == 7500


def test_token_budget_never_negative():
    assert token_budget(100, 200) == 0

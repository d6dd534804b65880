"""Chunking and token budget configuration.

These settings control how large files are split before being forwarded and
how much content a single request may carry.
"""

# =============================================================================
# Token Budget
# =============================================================================
# TOKEN_LIMIT is the maximum estimated token total of file content that may be
# forwarded in one request. TOKEN_BUFFER is the multiplier applied on top of
# the word/punctuation count to account for special tokens.

TOKEN_LIMIT = 8000
TOKEN_BUFFER = 1.1

# =============================================================================
# Chunk Sizes
# =============================================================================
# CHUNK_SIZE and CHUNK_OVERLAP are measured in lines for the "lines" strategy
# and in estimated tokens for the "tokens" and "smart" strategies.

CHUNK_STRATEGY = "smart"
CHUNK_SIZE = 1000
CHUNK_OVERLAP = 100

# =============================================================================
# Logical Boundaries
# =============================================================================
# The "smart" strategy only cuts a chunk on a blank line or on a line starting
# with one of these prefixes (after leading whitespace is stripped).

DEFINITION_PREFIXES = (
    "func ",
    "def ",
    "function ",
    "class ",
    "public ",
    "private ",
    "protected ",
    "async ",
    "export ",
)

COMMENT_PREFIXES = ("//", "#", "/*")

"""Configuration constants.

Re-exports all config for convenient importing:
    from filesift.constants import TOKEN_LIMIT, SMALL_FILE_SIZE_BYTES
"""

from filesift.constants.chunking import *  # noqa: F403
from filesift.constants.files import *  # noqa: F403
from filesift.constants.llm import *  # noqa: F403

"""Logging setup for front ends.

Library modules only create loggers; handlers are installed here by whatever
program embeds filesift.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("LiteLLM", "LiteLLM Router", "LiteLLM Proxy", "httpx")


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install a stream handler with the filesift format on the root logger.

    Args:
        level: Root log level, as a number or a name such as "DEBUG".
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError("Unknown log level")

    logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=level, force=True)

    # Unify third-party loggers with the app format
    for name in QUIET_LOGGERS:
        third_party = logging.getLogger(name)
        third_party.handlers.clear()
        third_party.setLevel(max(level, logging.WARNING))
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        third_party.addHandler(handler)
        third_party.propagate = False

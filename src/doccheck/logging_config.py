"""Singleton logging configuration.

setup_logging() configures the root logger once per process; later
calls only adjust the level so ``--verbose`` can take effect.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers to suppress to WARNING
_SUPPRESSED_LOGGERS = (
    "asyncio",
    "pydantic",
)

_configured = False


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger. Idempotent apart from the level."""
    global _configured  # noqa: PLW0603
    if not _configured:
        _configured = True
        logging.basicConfig(format=LOG_FORMAT, datefmt=LOG_DATEFMT)
        for name in _SUPPRESSED_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    # basicConfig leaves the level alone when handlers already exist
    logging.getLogger().setLevel(getattr(logging, level.upper()))

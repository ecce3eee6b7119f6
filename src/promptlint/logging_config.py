"""Singleton logging configuration.

setup_logging() configures the root logger once per process and quiets
the HTTP libraries tiktoken uses to fetch encoding files. Idempotent
(guarded by a module-level flag).
"""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers to suppress to WARNING
_SUPPRESSED_LOGGERS = (
    "urllib3",
    "requests",
    "filelock",
)

_configured = False


def setup_logging(level: str = "WARNING") -> None:
    """Configure root logger and suppress noisy third-party loggers.

    Second call is a no-op. An unknown level name falls back to WARNING.
    """
    global _configured  # noqa: PLW0603
    if _configured:
        return
    _configured = True

    resolved = getattr(logging, level.upper(), None)
    if not isinstance(resolved, int):
        resolved = logging.WARNING

    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    for name in _SUPPRESSED_LOGGERS:
        lg = logging.getLogger(name)
        lg.setLevel(logging.WARNING)

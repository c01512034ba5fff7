"""Logging setup for the API process."""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging.

    Modules log through `logging.getLogger(__name__)` with short event names
    (e.g. "token_issued") and context passed via `extra`. A no-op for handlers
    when the server (uvicorn, pytest) has already installed its own.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

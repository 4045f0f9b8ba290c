from typing import Dict, Any, IO, Optional
from sys import stderr
import logging

# logging module doesn't provide an easy way to get this
LOG_LEVELS = [
    "CRITICAL",
    "ERROR",
    "WARNING",
    "INFO",
    "DEBUG",
]

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)-35s - %(message)s"

CONFIGURED = False


def configure_logging(level: str = "INFO", stream: Optional[IO[str]] = None):
    """Configure our logging, to stderr unless told otherwise.  Only the first
    call has any effect."""
    global CONFIGURED
    if not CONFIGURED:
        kwargs: Dict[str, Any] = dict(level=level, format=LOG_FORMAT)
        kwargs["stream"] = stream if stream is not None else stderr
        logging.basicConfig(**kwargs)
    CONFIGURED = True

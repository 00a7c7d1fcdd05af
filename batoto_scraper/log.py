import contextlib
import logging
import sys
from typing import IO, Iterator

logger = logging.getLogger("batoto_scraper")
logger.setLevel(logging.INFO)
_handler = logging.StreamHandler(sys.stdout)
_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
if not logger.handlers:
    logger.addHandler(_handler)


def set_debug(enabled: bool = True) -> None:
    logger.setLevel(logging.DEBUG if enabled else logging.INFO)


@contextlib.contextmanager
def logging_to(stream: IO[str]) -> Iterator[None]:
    """Point the package handler at ``stream`` for the duration of the block."""
    previous = _handler.setStream(stream)
    try:
        yield
    finally:
        if previous is not None:
            _handler.setStream(previous)

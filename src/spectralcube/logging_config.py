"""
Logging Configuration
=====================
spectralcube is a library: it only emits records on the ``spectralcube``
logger tree and leaves output to the host. The package ``__init__`` attaches a
NullHandler, so nothing is printed unless the host configures logging.

Hosts without a logging setup of their own (scripts, notebooks, quick tools)
can opt in with ``setup_logging`` and undo it with ``teardown_logging``. Only
handlers installed here are ever removed; handlers the host added itself are
left alone.
"""
import logging
import sys
from typing import List, Optional, TextIO

PACKAGE_LOGGER = "spectralcube"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'

_installed: List[logging.Handler] = []


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> List[logging.Handler]:
    """
    Send spectralcube log records to a stream and optionally a file.

    Calling it again replaces the handlers of the previous call.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
        stream: Stream for the console handler; defaults to sys.stdout.

    Returns:
        The handlers that were installed, so the host can adjust or remove them.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    teardown_logging()
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # 1. Console Handler
    console_handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handlers: List[logging.Handler] = [console_handler]

    # 2. File Handler (Optional)
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    _installed.extend(handlers)

    logger.info("Logging initialized.")
    return handlers


def teardown_logging() -> None:
    """Remove and close the handlers installed by ``setup_logging`` and reset the level."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.NOTSET)
    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()

"""
Logging configuration for applications built on ``bmex``.

Library modules only obtain the ``bmex`` logger.  What they emit:

  - DEBUG   every dispatch (``VERB path -> body``) and every status seen
  - WARNING transport faults (connection, TLS, timeout)
  - ERROR   each 5xx attempt, whether or not a later retry succeeds

Request bodies can carry order details, so the detailed stream goes to a
rotating file (``logs/bmex.log``, 5 MB x 5) while the console only shows
INFO and above.  ``requests`` logs every pooled connection through
``urllib3`` at DEBUG; that chatter is held at WARNING unless
``transport_debug`` is set.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
LOGGER_NAME = "bmex"
TRANSPORT_LOGGER = "urllib3"

_MAX_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 5

_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s | %(message)s"


def _file_handler(log_dir: Path, level: int) -> RotatingFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / "bmex.log",
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    log_level: int = logging.DEBUG,
    log_dir: Optional[Path] = None,
    transport_debug: bool = False,
) -> logging.Logger:
    """
    Configure and return the ``bmex`` logger.

    Calling it again returns the already-configured logger without adding
    handlers.

    Parameters
    ----------
    log_level : int
        Minimum level for the logger and its file handler (console is
        always INFO).
    log_dir : Path, optional
        Directory for ``bmex.log``; defaults to ``LOG_DIR``.
    transport_debug : bool
        Let ``urllib3`` connection-pool messages through at DEBUG.
    """
    logging.getLogger(TRANSPORT_LOGGER).setLevel(
        logging.DEBUG if transport_debug else logging.WARNING
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    if logger.handlers:
        return logger

    file_handler = _file_handler(Path(log_dir) if log_dir is not None else LOG_DIR, log_level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.debug("Logging initialised – file: %s", file_handler.baseFilename)
    return logger

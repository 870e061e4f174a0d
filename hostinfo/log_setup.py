from __future__ import annotations

import logging
import os
from datetime import datetime

TRACE = 5
TRACE_DIR = "debug"
LOGGER_NAME = "hostinfo"

logging.addLevelName(TRACE, "TRACE")


def _trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


logging.Logger.trace = _trace

_CONSOLE_FMT = "%(levelname)s %(name)s: %(message)s"
_FILE_FMT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s:%(funcName)s:%(lineno)d %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _console_level(debug: bool, trace: bool, verbose: bool) -> int:
    if trace and verbose:
        return TRACE
    if debug or trace:
        return logging.DEBUG
    return logging.INFO


def _trace_file_handler(directory: str) -> logging.FileHandler:
    """Open ``trace-<timestamp>.log`` in ``directory``, creating it if needed."""
    os.makedirs(directory, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    handler = logging.FileHandler(os.path.join(directory, f"trace-{timestamp}.log"))
    handler.setLevel(TRACE)
    handler.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
    return handler


def setup_logging(
    *, debug: bool, trace: bool, verbose: bool, trace_dir: str | None = None
) -> logging.Logger:
    """Configure the ``hostinfo`` logger hierarchy.

    Console output goes to stderr at INFO, DEBUG (``debug`` or ``trace``)
    or TRACE (``trace`` and ``verbose``). With ``trace`` a timestamped file
    under ``trace_dir`` (default ``TRACE_DIR``) receives everything down
    to TRACE, which includes every probe and cache decision.

    Returns:
        The configured ``hostinfo`` logger. Calling again replaces the
        handlers installed by the previous call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(TRACE)

    console = logging.StreamHandler()
    console.setLevel(_console_level(debug, trace, verbose))
    console.setFormatter(logging.Formatter(_CONSOLE_FMT))
    logger.addHandler(console)

    if trace:
        logger.addHandler(_trace_file_handler(trace_dir or TRACE_DIR))

    return logger

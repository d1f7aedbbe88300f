"""
monitoring/log.py — Logging setup for the monitoring CLI.

Logs go to syslog; with --debug they are mirrored to stderr. stdout is
reserved for the JSON report.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys

LOGGER_NAME = "openshift-monitoring-cli"
LOG_FORMAT = "%(asctime)s %(funcName)s - %(levelname).4s %(message)s"
SYSLOG_ADDRESS = "/dev/log"


def _syslog_handler() -> tuple[logging.Handler | None, str | None]:
    # SysLogHandler does not raise for a missing socket, only on emit
    if not os.path.exists(SYSLOG_ADDRESS):
        return None, f"{SYSLOG_ADDRESS} not found"
    try:
        handler = logging.handlers.SysLogHandler(address=SYSLOG_ADDRESS)
    except OSError as e:
        return None, str(e)
    handler.setFormatter(logging.Formatter(f"{LOGGER_NAME}: {LOG_FORMAT}"))
    return handler, None


def setup_logging(debug: bool = False, level: str = "info") -> logging.Logger:
    """(Re)configure the CLI logger. Safe to call more than once."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    syslog_error = None
    if os.name != "nt":
        syslog_handler, syslog_error = _syslog_handler()
        if syslog_handler is not None:
            logger.addHandler(syslog_handler)

    if debug or not logger.handlers:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(stderr_handler)

    if debug or level == "debug":
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if syslog_error is not None:
        logger.warning("Wasn't able to initialize syslog: %s", syslog_error)
    return logger

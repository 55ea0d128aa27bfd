"""Package logger and thin logging helpers.

Usage::

    from switchboard.utils.log import log_debug, log_warning

    log_debug("Turn 1 started")
"""

import logging
import os
from typing import Any

LOGGER_NAME = "switchboard"

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _build_logger() -> logging.Logger:
  _logger = logging.getLogger(LOGGER_NAME)
  if not _logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    _logger.addHandler(handler)
  _logger.propagate = False
  debug = os.environ.get("SWITCHBOARD_DEBUG", "").lower() in {"1", "true", "yes"}
  _logger.setLevel(logging.DEBUG if debug else logging.WARNING)
  return _logger


logger: logging.Logger = _build_logger()


def set_log_level_to_debug() -> None:
  logger.setLevel(logging.DEBUG)


def set_log_level_to_info() -> None:
  logger.setLevel(logging.INFO)


def log_debug(msg: str, *args: Any, **kwargs: Any) -> None:
  logger.debug(msg, *args, **kwargs)


def log_info(msg: str, *args: Any, **kwargs: Any) -> None:
  logger.info(msg, *args, **kwargs)


def log_warning(msg: str, *args: Any, **kwargs: Any) -> None:
  logger.warning(msg, *args, **kwargs)


def log_error(msg: str, *args: Any, **kwargs: Any) -> None:
  logger.error(msg, *args, **kwargs)

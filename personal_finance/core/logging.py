import logging
import os
from typing import Union

from ..config import settings


CONSOLE_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER = "personal_finance"


def _resolve_level(level: Union[str, int, None]) -> int:
    if isinstance(level, int):
        return level
    candidate = (level or os.getenv("LOG_LEVEL") or settings.log_level).strip().upper()
    resolved = logging.getLevelName(candidate)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Union[str, int, None] = None) -> logging.Logger:
    """Attach a console handler to the package logger, once."""
    resolved = _resolve_level(level)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(resolved)

    for handler in logger.handlers:
        if getattr(handler, "_personal_finance_console", False):
            handler.setLevel(resolved)
            return logger

    handler = logging.StreamHandler()
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handler._personal_finance_console = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger

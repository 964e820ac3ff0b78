"""Logger factory shared by all querykv modules."""

import logging
import sys
from typing import Optional, Union

ROOT_LOGGER_NAME = "querykv"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the querykv namespace.

    Module names already inside the package (``querykv.*``) are used as-is;
    anything else is nested beneath the root logger.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: Union[str, int] = "INFO", stream: Optional[object] = None) -> logging.Logger:
    """
    Attach a single stream handler to the querykv root logger.

    Calling this more than once replaces the handler rather than stacking
    duplicates.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or numeric level
        stream: Output stream (defaults to stderr)

    Returns:
        The configured root logger
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_querykv_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    handler._querykv_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
    return root

"""Logging utilities for the MCP agent library."""

import logging
import sys

_LOGGER_NAME = "mcp_agent_lib"


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance for the library.

    Args:
        name: Optional sub-logger name. Module names that already start with the
            library prefix are used as-is. If None, returns the root library logger.

    Returns:
        The requested logger.
    """
    if not name:
        return logging.getLogger(_LOGGER_NAME)
    if name == _LOGGER_NAME or name.startswith(f"{_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


def setup_logging(
    level: int = logging.INFO, format_str: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
) -> None:
    """Setup default logging configuration for the library.

    This adds a StreamHandler to the library's root logger.
    Should typically be called by the application using the library (the CLI does),
    not by the library itself.

    Args:
        level: Logging level.
        format_str: Log format string.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)

    # Avoid adding multiple handlers if called multiple times
    if any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_str))
    logger.addHandler(handler)


# Set default NullHandler to avoid "No handler found" warnings
logging.getLogger(_LOGGER_NAME).addHandler(logging.NullHandler())

"""Simple logging configuration for farm-valuator."""

import logging
import os
import sys

# Define TRACE level (lower than DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

NOISY_LOGGERS = ("web3", "urllib3")


class ColoredFormatter(logging.Formatter):
    """Colored log formatter using ANSI escape codes."""

    COLORS = {
        "TRACE": "\033[90m",  # Dark gray
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[levelname]}{self.BOLD}{levelname}{self.RESET}"
            )

        result = super().format(record)

        record.levelname = levelname

        return result


def resolve_level(level: str | None = None) -> tuple[str, int]:
    """Resolve a level name to ``(NAME, numeric_level)``.

    Falls back to FARM_VALUATOR_LOG_LEVEL, then LOG_LEVEL, then INFO.
    Unknown names resolve to INFO.
    """
    name = (
        level
        or os.getenv("FARM_VALUATOR_LOG_LEVEL")
        or os.getenv("LOG_LEVEL")
        or "INFO"
    ).upper()
    if name == "TRACE":
        return name, TRACE
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        return "INFO", logging.INFO
    return name, numeric


def setup_logging(level: str | None = None) -> None:
    """Configure logging for the application.

    Sets up a console handler with formatted, colored output.

    When the level is DEBUG, web3 and urllib3 loggers are set to WARNING
    to reduce noise. Use TRACE to see all web3/urllib3 logs.
    """
    log_level, numeric = resolve_level(level)

    handler = logging.StreamHandler(sys.stdout)
    formatter = ColoredFormatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=numeric,
        handlers=[handler],
        force=True,
    )

    if log_level == "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    elif log_level == "TRACE":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(TRACE)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Usually __name__ of the calling module

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)

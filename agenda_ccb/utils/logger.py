"""Logging utility with [LOG] prefix and coloured level tags."""

import logging
import sys
from datetime import datetime
from typing import Optional, TextIO


class ColoredFormatter(logging.Formatter):
    """Formatter that adds the [LOG] prefix and, on terminals, colours."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m',
        'BOLD': '\033[1m',
    }

    def __init__(self, use_colors: bool = True, show_timestamps: bool = False):
        super().__init__()
        self.use_colors = use_colors
        self.show_timestamps = show_timestamps

    def _paint(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{self.COLORS[color]}{text}{self.COLORS['RESET']}"

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with the LOG prefix."""
        parts = [self._paint("[LOG]", 'BOLD')]

        if self.show_timestamps:
            parts.append(datetime.fromtimestamp(record.created).strftime("%H:%M:%S"))

        # INFO lines stay clean, other levels carry their name
        if record.levelname != 'INFO':
            parts.append(self._paint(f"[{record.levelname}]", record.levelname))

        parts.append(record.getMessage())
        return " ".join(parts)


class AppLogger:
    """Application logger shared by every module."""

    _instance: Optional['AppLogger'] = None
    _logger: Optional[logging.Logger] = None

    def __new__(cls):
        """Singleton pattern to ensure single logger instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._logger is None:
            self.configure()

    def configure(
        self,
        level: str = "INFO",
        show_timestamps: bool = False,
        stream: Optional[TextIO] = None,
    ) -> None:
        """(Re)build the handler for the given level and stream."""
        stream = stream or sys.stdout
        self._logger = logging.getLogger("agenda_ccb")
        self._logger.setLevel(getattr(logging, level.upper()))
        self._logger.handlers.clear()

        handler = logging.StreamHandler(stream)
        handler.setFormatter(ColoredFormatter(
            use_colors=hasattr(stream, "isatty") and stream.isatty(),
            show_timestamps=show_timestamps,
        ))
        self._logger.addHandler(handler)

        # Prevent propagation to root logger
        self._logger.propagate = False

    @property
    def logger(self) -> logging.Logger:
        return self._logger


# Global logger instance
logger = AppLogger()


def setup_logging(level: str = "INFO", show_timestamps: bool = False) -> None:
    """Set up logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        show_timestamps: Prefix each line with HH:MM:SS
    """
    logger.configure(level=level, show_timestamps=show_timestamps)
    log_debug(f"Logger initialized at {level.upper()}")


def log_info(message: str):
    logger.logger.info(message)


def log_debug(message: str):
    logger.logger.debug(message)


def log_warning(message: str):
    logger.logger.warning(message)


def log_error(message: str):
    logger.logger.error(message)


def log_critical(message: str):
    logger.logger.critical(message)

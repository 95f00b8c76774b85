"""Logging configuration for the P&L engine."""

import logging
import sys
import time
from pathlib import Path

# Root logger name for the package
ROOT_LOGGER = "pos_pnl"

# Default log file name
DEFAULT_LOG_FILE = "pos_pnl.log"

# SQLAlchemy statement logger, echoed into our handlers at DEBUG
SQL_LOGGER = "sqlalchemy.engine"

# Context keys that must never reach a log file (cashier credentials, card data)
SENSITIVE_FIELDS = {"password", "pin", "token", "card_number", "secret", "api_key"}

# Log format with timestamp, level, module, and message
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _sanitize_context(context: dict[str, object]) -> dict[str, object]:
    """Mask sensitive fields in a context dict.

    Args:
        context: Dictionary of context values.

    Returns:
        Dictionary with sensitive fields masked.
    """
    return {k: "***" if k.lower() in SENSITIVE_FIELDS else v for k, v in context.items()}


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
) -> logging.Logger:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to log file. If None, uses DEFAULT_LOG_FILE.
            An empty string disables file logging.
        console_output: Whether to also output to stderr.

    Returns:
        The package root logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_file is None:
        log_file = DEFAULT_LOG_FILE

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # SQL statements are only interesting when debugging a report
    sql_logger = logging.getLogger(SQL_LOGGER)
    sql_logger.handlers.clear()
    if numeric_level <= logging.DEBUG:
        sql_logger.setLevel(logging.INFO)
        for handler in logger.handlers:
            sql_logger.addHandler(handler)
    else:
        sql_logger.setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Module name (typically __name__).

    Returns:
        A logger under the package root logger.
    """
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class LogContext:
    """Logs the start, duration, and failure of a report operation.

    Example:
        with LogContext(logger, "P&L breakdown", start=start, end=end):
            ...
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: object):
        """Initialize log context.

        Args:
            logger: Logger instance to use.
            operation: Name of the operation being performed.
            **context: Key/value pairs shown in the start message.
        """
        self.logger = logger
        self.operation = operation
        self.context = context
        self.elapsed: float | None = None
        self._started = 0.0

    def __enter__(self) -> "LogContext":
        details = ", ".join(f"{k}={v}" for k, v in _sanitize_context(self.context).items())
        self.logger.debug(f"Starting {self.operation}: {details}")
        self._started = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc_type is not None:
            self.logger.error(
                f"{self.operation} failed after {self.elapsed:.2f}s: {exc_type.__name__}: {exc_val}",
                exc_info=True,
            )
        else:
            self.logger.info(f"{self.operation} finished in {self.elapsed:.2f}s")
        return False

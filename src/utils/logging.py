"""
Logging Configuration
loguru sinks for the API process, with stdlib records from src.* forwarded
Source: https://github.com/Delgan/loguru
"""

import logging
import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]} - {message}"


class StdlibInterceptHandler(logging.Handler):
    """
    Forward stdlib log records to loguru.

    The EDI service modules log through logging.getLogger(__name__);
    this keeps their records in the same sinks as the API logs.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.bind(name=record.name).opt(exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    json_logs: bool = False,
    intercept_stdlib: bool = True,
) -> None:
    """
    Replace loguru's default sink with the application sinks.

    Args:
        level: loguru level name
        log_file: Rotating file sink, skipped when None
        json_logs: Serialize records as JSON instead of the console format
        intercept_stdlib: Forward records of the "src" stdlib logger tree
    """
    logger.remove()
    logger.configure(extra={"name": "app"})

    if json_logs:
        logger.add(sys.stderr, format="{message}", level=level, serialize=True)
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation="100 MB",
            retention="30 days",
            compression="zip",
            serialize=json_logs,
        )

    if intercept_stdlib:
        # Replace handlers so records are not emitted twice
        src_logger = logging.getLogger("src")
        src_logger.handlers = [StdlibInterceptHandler()]
        src_logger.setLevel(logger.level(level.upper()).no)
        src_logger.propagate = False

    get_logger(__name__).info(f"Logging configured: level={level}, json_logs={json_logs}")


def get_logger(name: str = __name__):  # type: ignore[no-untyped-def]
    """
    Get a loguru logger carrying the module name.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("835 generated")
    """
    return logger.bind(name=name)

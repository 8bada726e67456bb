"""
Logging configuration for the token table service.

Console output stays at the requested level; an optional file handler
captures everything down to DEBUG. HTTP client chatter from the refresh
loop is held at WARNING so the per-cycle summary lines stay readable.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "asyncio",
    "uvicorn.access",
)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    enable_file_logging: bool = False,
    enable_console_logging: bool = True,
) -> None:
    """
    Configure root logging for the service.

    Args:
        log_level: Level for console output and application loggers
        log_file: Optional path to log file. If None and enable_file_logging=True,
                 creates logs/token_table_YYYYMMDD.log
        enable_file_logging: Whether to log to file
        enable_console_logging: Whether to log to console

    Example:
        >>> from token_table.logging_config import configure_logging
        >>> configure_logging(log_level="DEBUG")
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    handlers: list[logging.Handler] = []

    if enable_console_logging:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S',
            )
        )
        handlers.append(console_handler)

    if enable_file_logging:
        if log_file is None:
            log_dir = Path("logs")
            log_dir.mkdir(exist_ok=True)
            log_file = log_dir / f"token_table_{datetime.now().strftime('%Y%m%d')}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S',
            )
        )
        handlers.append(file_handler)

    # Root at DEBUG when a file is attached; handlers decide what is emitted.
    root_level = logging.DEBUG if enable_file_logging else level
    logging.basicConfig(level=root_level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    app_level = logging.DEBUG if enable_file_logging else level
    logging.getLogger('token_table').setLevel(app_level)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured (level=%s)", log_level.upper())
    if enable_file_logging and log_file:
        logger.info("Log file: %s", log_file)


# invoice_engine/core/logging_config.py

import logging
import sys
from typing import Optional

from loguru import logger

from invoice_engine.config.settings import settings


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records (engine services, reportlab) to loguru."""

    def emit(self, record):
        # Get logger for this record
        level = record.levelname
        try:
            level = logger.level(level).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure loguru as the main logger with colored, structured logs.
    Also redirect stdlib logging (the engine's named loggers, reportlab) to loguru.
    """
    level = (level or settings.LOG_LEVEL or "INFO").upper()

    # Remove default loguru handler
    logger.remove()

    # Add our handler: colored, with time + level + module + message
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
        "<level>{message}</level>",
        level=level,
        colorize=True,
        backtrace=False,
        diagnose=False,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
    # Quieten noisy libraries
    logging.getLogger("reportlab").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)

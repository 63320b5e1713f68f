import sys
from pathlib import Path
from typing import Optional
from loguru import logger
from repokit.config import settings

LOG_DIR = Path(settings.LOG_DIR)

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<magenta>{extra[channel]}</magenta> | Trace:{extra[trace_id]} - <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | "
    "{extra[channel]} | Trace:{extra[trace_id]} - {message}"
)


class LogConfig:
    """Loguru sinks: console, one app log per day, errors apart."""

    @classmethod
    def setup_logging(cls, level: Optional[str] = None):
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.remove()
        # Defaults for records logged outside a request or without a channel
        logger.configure(extra={"channel": "app", "trace_id": "system"})

        logger.add(
            sys.stdout,
            enqueue=True,
            backtrace=True,
            diagnose=settings.DEBUG,
            format=CONSOLE_FORMAT,
            level=level or settings.LOG_LEVEL,
        )

        logger.add(
            LOG_DIR / f"{settings.APP_NAME}_{{time:YYYY-MM-DD}}.log",
            rotation="00:00",
            retention=settings.LOG_RETENTION,
            compression="zip",
            enqueue=True,
            format=FILE_FORMAT,
            level="DEBUG",
        )

        logger.add(
            LOG_DIR / f"{settings.APP_NAME}_error_{{time:YYYY-MM-DD}}.log",
            level="ERROR",
            rotation="100 MB",
            retention=settings.LOG_RETENTION,
            enqueue=True,
            format=FILE_FORMAT,
        )


def get_logger(name: str = None):
    """Logger bound to a channel (module or repository name)."""
    return logger.bind(channel=name or "app")

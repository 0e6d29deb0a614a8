import sys

from loguru import logger

from mallpark.config import settings

_LOGGER_CONFIGURED = False

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{line} | {message}"


def configure_logging(level: str | None = None, sink=None) -> None:
    """Install the single loguru sink used by the application.

    Runs once per process unless ``level`` or ``sink`` is given explicitly.
    """
    global _LOGGER_CONFIGURED
    if _LOGGER_CONFIGURED and level is None and sink is None:
        return

    logger.remove()
    logger.add(
        sink if sink is not None else sys.stderr,
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        backtrace=settings.debug,
        diagnose=settings.debug,
    )
    _LOGGER_CONFIGURED = True

import sys

from loguru import logger


def init_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(
        sink=sys.stderr,
        level=level,
        backtrace=True,
        diagnose=False,
    )

"""Opt-in loguru output for the client.

The package is silent by default. Turn it on while debugging:

    handler_ids = enable_logging("DEBUG")
    ...
    disable_logging(handler_ids)
"""

import sys
from typing import List, Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} - {message}"
)


def enable_logging(
    level: str = "INFO", file: Optional[str] = None, console: bool = True
) -> List[int]:
    """Add sinks for the package's records and return their handler ids"""
    logger.enable("infra_client")
    handler_ids = []

    if console:
        handler_ids.append(
            logger.add(
                sys.stderr,
                level=level,
                format=CONSOLE_FORMAT,
                colorize=True,
                filter="infra_client",
            )
        )

    if file:
        handler_ids.append(
            logger.add(
                file,
                level="DEBUG",
                format=FILE_FORMAT,
                rotation="50 MB",
                retention=10,
                diagnose=False,
                filter="infra_client",
            )
        )

    return handler_ids


def disable_logging(handler_ids: List[int]) -> None:
    for handler_id in handler_ids:
        logger.remove(handler_id)
    logger.disable("infra_client")

"""
scenecut.logging - Centralized logging configuration.

The CLI calls configure_logging once; library modules only import logger.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("scenecut")

# Backend clients log each HTTP request at INFO.
CLIENT_LOGGERS = ("LiteLLM", "httpx", "google_genai")


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the scenecut package.

    Args:
        verbose: If True, enable DEBUG for scenecut and INFO for backend
            clients; otherwise WARNING everywhere
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s",
    )
    logger.setLevel(level)
    for name in CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if verbose else logging.WARNING)

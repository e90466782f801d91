"""
Logging configuration for the interview app.

One "interview_partner" parent logger writing to stdout; the level comes from
the LOG_LEVEL environment variable (default INFO).
"""

import logging
import os
import sys

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logger = logging.getLogger("interview_partner")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)
    console_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

logger.propagate = False


def get_logger(name: str = None) -> logging.Logger:
    """Child logger under "interview_partner", or the parent when name is empty."""
    if name:
        return logging.getLogger(f"interview_partner.{name}")
    return logger

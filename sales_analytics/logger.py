import logging
import os
import sys

LOG_LEVEL_ENV = "SALES_ANALYTICS_LOG_LEVEL"


def setup_logger(name: str = "sales_analytics") -> logging.Logger:
    """
    Configure and return a logger instance for the cleaning and reporting steps.
    """
    logger = logging.getLogger(name)
    logger.setLevel(os.getenv(LOG_LEVEL_ENV, "INFO").upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(handler)

    return logger

"""
Logging utilities for the resource inventory.
"""

import logging
import sys
from typing import Optional

from .constants import LOGGING_CONFIG


def setup_logging(
    level: str = "WARNING",
    format_string: Optional[str] = None,
    suppress_modules: Optional[list] = None,
) -> logging.Logger:
    """
    Set up logging configuration for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for log messages
        suppress_modules: List of module names to suppress logging for

    Returns:
        Configured logger instance
    """
    if format_string is None:
        format_string = LOGGING_CONFIG["format"]

    if suppress_modules is None:
        suppress_modules = LOGGING_CONFIG["suppress_modules"]

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string,
        stream=sys.stderr,
        force=True,
    )

    # Suppress noisy modules
    for module in suppress_modules:
        logging.getLogger(module).setLevel(logging.ERROR)

    return logging.getLogger(__name__)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class CollectionLogger:
    """Context manager logging one (collector, region) work item."""

    def __init__(self, logger: logging.Logger, collector: str, region: str):
        """
        Initialize the collection logger.

        Args:
            logger: Logger instance
            collector: Collector name
            region: Region being collected
        """
        self.logger = logger
        self.collector = collector
        self.region = region

    def __enter__(self):
        self.logger.info("Collecting %s resources in %s", self.collector, self.region)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logger.debug("Completed %s in %s", self.collector, self.region)
        else:
            self.logger.error(
                "Error collecting %s in %s: %s", self.collector, self.region, exc_val
            )

    def log_collection_result(self, count: int, warnings: int = 0):
        """Log the number of resources (and warnings) produced by the work item."""
        self.logger.info(
            "Collected %d %s resources in %s (%d warnings)",
            count,
            self.collector,
            self.region,
            warnings,
        )

"""Sampled logger for high-frequency log messages.

Multipart uploads can have thousands of parts; logging each completion would
drown everything else, so only a sample of them is logged.
"""

import logging
from collections.abc import Callable

from multipart_uploader.const import PART_LOG_INTERVAL

logger = logging.getLogger(__name__)


def make_sampled_logger(
    log_format: str,
    log_interval: int = PART_LOG_INTERVAL,
    target_logger: logging.Logger | None = None,
    level: int = logging.INFO,
) -> Callable[..., None]:
    """Create a logger that only logs the first, last and every Nth item.

    Args:
        log_format: Format string for the log message. The first two
                    placeholders receive the item count and the total, the
                    remaining placeholders receive extra_args.
        log_interval: Log every Nth item (default PART_LOG_INTERVAL)
        target_logger: Logger instance to use (default: module logger)
        level: Log level to use (default: INFO)

    Returns:
        A function: (item_count, total_items, *format_args) -> bool, returning
        whether the message was logged. item_count is 1-based.
    """
    if log_interval <= 0:
        raise ValueError(f"log_interval must be positive, got {log_interval}")
    _logger = target_logger or logger

    def log_sampled(item_count: int, total_items: int, *format_args: object) -> bool:
        is_first = item_count == 1
        is_last = item_count == total_items
        if is_first or is_last or item_count % log_interval == 0:
            _logger.log(level, log_format, item_count, total_items, *format_args)
            return True
        return False

    return log_sampled

import logging
from typing import Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Priority thresholds: 0 outputs every message, 255 outputs none.
# Library messages use priorities 1 (low) to 4 (important).
_PRIORITY_LEVELS = {
    0: logging.NOTSET,
    1: logging.DEBUG,
    2: logging.INFO,
    3: logging.WARNING,
    4: logging.ERROR,
}


def priority_to_log_level(priority: int) -> int:
    """Map a 0..255 priority threshold onto a Python logging level."""
    if not 0 <= priority <= 255:
        raise ValueError(f"Wrong logging_level value: {priority}")
    if priority == 255:
        return logging.CRITICAL + 1
    return _PRIORITY_LEVELS.get(priority, logging.CRITICAL)


def setup_logging(level: Union[int, str] = 'INFO') -> None:
    """
    Configure root logging.

    Args:
        level: logging level name ('DEBUG', 'INFO', ...) or a 0..255 priority threshold.
    """
    if isinstance(level, str):
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            raise ValueError(f"Unknown log level: {level}")
    else:
        log_level = priority_to_log_level(level)

    logging.basicConfig(level=log_level, format=LOG_FORMAT, force=True)
    logging.getLogger('kafka').setLevel(max(log_level, logging.WARNING))

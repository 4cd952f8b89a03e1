import logging
import sys
from pathlib import Path

LOG_NAME = "rate_path"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def setup_logger(log_file: Path | None = None, level: int | str = logging.INFO) -> logging.Logger:
    """Configure the ``rate_path`` logger that every ``rate_path.<module>`` logger feeds.

    The CLI prints ``BEST_RATES_BEGIN`` blocks on stdout and callers pipe them
    to other tools, so log records go to stderr (and ``log_file`` if given).
    Calling it again replaces the handlers from the previous call and closes
    them, so the same process can run ``main`` repeatedly without writing
    each record twice or leaking file handles.
    """
    logger = logging.getLogger(LOG_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    fmt = logging.Formatter(LOG_FORMAT)
    targets: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        targets.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in targets:
        handler.setFormatter(fmt)
        logger.addHandler(handler)
    return logger

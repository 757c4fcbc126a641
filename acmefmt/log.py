import logging
import os
import sys
from datetime import datetime


def setup_logging(level: str = "INFO", log_dir: str | None = None) -> logging.Logger:
    """Configure the ``acmefmt`` logger.

    Messages go to stderr (acme shows a watcher's stderr in its +Errors
    window).  With *log_dir*, everything down to DEBUG is also written to a
    timestamped file there.
    """
    logger = logging.getLogger("acmefmt")
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(getattr(logging, level.upper(), logging.INFO))
    sh.setFormatter(logging.Formatter("acmefmt: %(message)s"))
    logger.addHandler(sh)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(log_dir, f"acmefmt_{timestamp}.log")

        # File handler captures everything
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
        ))
        logger.addHandler(fh)

    return logger

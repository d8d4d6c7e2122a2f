"""Per-run logging setup."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

RUN_LOGGER_NAME = "azimport.run"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
QUIET_LOGGERS = ("azure", "msal", "urllib3")


@contextmanager
def run_logger(logfile: str | None = None) -> Iterator[logging.Logger]:
    """Yield a dedicated logger for one run.

    Output goes to stderr, or is appended to ``logfile`` when given. Azure SDK
    chatter is muted until the run ends.
    """
    if logfile:
        handler: logging.Handler = logging.FileHandler(logfile, mode="a", encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(RUN_LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(handler)

    muted = {name: logging.getLogger(name) for name in QUIET_LOGGERS}
    saved = {name: (lg.level, lg.propagate) for name, lg in muted.items()}
    for lg in muted.values():
        lg.setLevel(logging.CRITICAL + 1)
        lg.propagate = False

    try:
        yield logger
    finally:
        logger.removeHandler(handler)
        handler.close()
        for name, lg in muted.items():
            lg.setLevel(saved[name][0])
            lg.propagate = saved[name][1]

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

LOGGER_NAME = "corrin"
LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}
_FORMAT = "%(asctime)s %(levelname)s [%(session_id)s] %(name)s: %(message)s"


class SessionFilter(logging.Filter):
    def __init__(self, session_id: str):
        super().__init__()
        self.session_id = session_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = self.session_id
        return True


def parse_level(name: str) -> int:
    key = (name or "").strip().lower()
    if key not in LEVELS:
        raise ValueError(f"Invalid log level: {name}. Expected one of {sorted(set(LEVELS) - {'warning'})}")
    return LEVELS[key]


def configure_logging(
    log_file: Optional[Path],
    level: int = logging.INFO,
    session_id: str = "-",
    enabled: bool = True,
) -> logging.Logger:
    """
    Route the `corrin` logger to a single file handler. Nothing reaches the terminal;
    the chat UI owns stdout.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = False

    if not enabled or log_file is None:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)
        return logger

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler.addFilter(SessionFilter(session_id))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger

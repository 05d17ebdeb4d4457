# tests/unit/test_logging_setup.py

from __future__ import annotations
import logging
import sys
from pathlib import Path
import pytest

# Make "src" importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from corrin.logging_setup import LOGGER_NAME, configure_logging, parse_level


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    configure_logging(None, enabled=False)


@pytest.mark.parametrize("name,level", [
    ("debug", logging.DEBUG),
    ("INFO", logging.INFO),
    (" warn ", logging.WARNING),
    ("error", logging.ERROR),
])
def test_parse_level(name, level):
    assert parse_level(name) == level


def test_parse_level_rejects_unknown():
    with pytest.raises(ValueError):
        parse_level("verbose")


def test_file_logging_tags_session(tmp_path: Path):
    log_file = tmp_path / "logs" / "agent.log"
    configure_logging(log_file, level=logging.INFO, session_id="S1")
    child = logging.getLogger(f"{LOGGER_NAME}.providers.manager")
    child.debug("hidden")
    child.info("registered %s", "groq")
    for h in logging.getLogger(LOGGER_NAME).handlers:
        h.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "[S1] corrin.providers.manager: registered groq" in text
    assert "hidden" not in text


def test_disabled_logging_writes_nothing(tmp_path: Path):
    log_file = tmp_path / "agent.log"
    logger = configure_logging(log_file, enabled=False)
    logger.error("nope")
    assert not log_file.exists()
    assert len(logger.handlers) == 1

"""Tests for diffdraft.log module."""

import re
import sys

import pytest
from loguru import logger

from diffdraft.log import configure_logging, time_block


@pytest.fixture
def records():
    """Collect formatted log messages at DEBUG and above."""
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{level}|{message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def restore_default_sink():
    yield
    logger.remove()
    logger.add(sys.stderr)


class TestTimeBlock:
    """Tests for time_block context manager."""

    def test_logs_duration(self, records):
        with time_block("merging 3 summaries"):
            pass

        assert len(records) == 1
        assert re.fullmatch(r"DEBUG\|merging 3 summaries done in \d+\.\d\ds\n", records[0])

    def test_logs_failure_and_reraises(self, records):
        with pytest.raises(ValueError):
            with time_block("chunk 2"):
                raise ValueError("boom")

        assert "chunk 2 failed in" in records[0]

    def test_custom_level(self, records):
        with time_block("login", level="INFO"):
            pass

        assert records[0].startswith("INFO|login done")


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_quiet_by_default(self, capsys, restore_default_sink):
        configure_logging()

        logger.debug("hidden detail")
        logger.warning("merge fell back")

        err = capsys.readouterr().err
        assert "hidden detail" not in err
        assert "merge fell back" in err

    def test_verbose_shows_debug(self, capsys, restore_default_sink):
        configure_logging(verbose=True)

        logger.debug("chunk sizes computed")

        assert "chunk sizes computed" in capsys.readouterr().err

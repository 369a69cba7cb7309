"""Test logging setup and the item failures report"""

import logging

import pytest

from music_tags.core.logger import (
    get_logger,
    log_item_failure,
    setup_logging,
    shutdown_logging,
)


@pytest.fixture
def logs_dir(temp_dir):
    logs = setup_logging(temp_dir)
    yield logs
    shutdown_logging()


class TestSetupLogging:
    """Test setup_logging()"""

    def test_creates_run_files(self, logs_dir):
        names = sorted(p.name.split("_2")[0] for p in logs_dir.iterdir())
        assert names == ["item_failures", "log_errors", "log_full"]

    def test_item_failure_report(self, logs_dir):
        logger = get_logger("music_tags.test")
        logger.info("not a failure")
        log_item_failure(
            logger,
            item_id="t1",
            item_name="Song",
            stage="extract",
            reason="Unsupported audio format",
            path="/music/song.xyz",
        )
        shutdown_logging()

        report = next(logs_dir.glob("item_failures_*.log")).read_text(encoding="utf-8")
        assert report == "[extract] t1  Song\n    /music/song.xyz\n    Unsupported audio format\n\n"

        errors = next(logs_dir.glob("log_errors_*.log")).read_text(encoding="utf-8")
        assert "extract failed for 'Song' (t1)" in errors
        assert "not a failure" not in errors

        full = next(logs_dir.glob("log_full_*.log")).read_text(encoding="utf-8")
        assert "not a failure" in full

    def test_quiets_mutagen(self, logs_dir):
        assert logging.getLogger("mutagen").level == logging.WARNING

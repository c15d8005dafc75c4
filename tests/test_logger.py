"""
Tests for logger functionality.
"""

import json
import threading

import pytest
from matchscore.logger import StructuredLogger, get_logger, reset_logger


@pytest.fixture
def logger(tmp_path):
    return StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_fresh_metrics(self, logger):
        metrics = logger.get_metrics()
        assert metrics["matches_computed"] == 0
        assert metrics["gate_distribution"] == {"pass": 0, "warn": 0, "fail": 0}
        assert "gate_share" not in metrics

    def test_context_is_serialized(self, logger, tmp_path):
        logger.info("Match computed", submission_id="sub-1", overall=72)

        log_text = next(tmp_path.glob("matchscore_*.log")).read_text()
        line = next(l for l in log_text.splitlines() if "Match computed" in l)
        context = json.loads(line.split("| Context: ", 1)[1])
        assert context == {"overall": 72, "submission_id": "sub-1"}

    def test_level_filters_debug(self, tmp_path):
        logger = StructuredLogger(name="test-debug", level="WARNING", log_dir=tmp_path, enable_console=False)
        logger.debug("Below threshold")
        assert "Below threshold" not in next(tmp_path.glob("*.log")).read_text()

    def test_gate_distribution(self, logger):
        for gate in ("pass", "pass", "warn", "fail"):
            logger.record_match(gate)

        metrics = logger.get_metrics()
        assert metrics["matches_computed"] == 4
        assert metrics["gate_distribution"] == {"pass": 2, "warn": 1, "fail": 1}
        assert metrics["gate_share"]["pass"] == 0.5

    def test_persistence_metrics(self, logger):
        logger.record_persisted()
        logger.record_persist_failure("OperationalError")
        logger.record_fetch_retry("Timeout")
        logger.record_fetch_retry("Timeout")

        metrics = logger.get_metrics()
        assert metrics["predictions_persisted"] == 1
        assert metrics["persist_failures"] == 1
        assert metrics["fetch_retries"] == 2
        assert metrics["errors_by_type"] == {"OperationalError": 1, "Timeout": 2}

    def test_snapshot_is_a_copy(self, logger):
        snapshot = logger.get_metrics()
        snapshot["gate_distribution"]["pass"] = 99
        assert logger.metrics["gate_distribution"]["pass"] == 0

    def test_concurrent_updates(self, logger):
        def work():
            for _ in range(200):
                logger.record_match("pass")

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert logger.get_metrics()["matches_computed"] == 800

    def test_metrics_summary(self, logger, tmp_path):
        logger.record_match("warn")
        logger.record_persist_failure("RecordNotFoundError")
        logger.log_metrics_summary()

        log_text = next(tmp_path.glob("*.log")).read_text()
        assert "Matches computed: 1" in log_text
        assert "warn: 1 (100.0%)" in log_text
        assert "RecordNotFoundError: 1" in log_text


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        reset_logger()
        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        assert get_logger() is logger1

    def test_reset_logger(self, tmp_path):
        reset_logger()
        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_match("pass")

        reset_logger()
        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger2 is not logger1
        assert logger2.metrics["matches_computed"] == 0

    def test_log_dir_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MATCHSCORE_LOG_DIR", str(tmp_path / "env-logs"))
        reset_logger()

        get_logger(enable_console=False).info("hello")

        assert list((tmp_path / "env-logs").glob("matchscore_*.log"))

"""
Structured logging system for matchscore.

Provides centralized logging with console and file destinations,
log levels, and metrics tracking for monitoring engine health
(computations, persistence failures, fetch retries).
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring match computations and persistence.
    """

    def __init__(
        self,
        name: str = "matchscore",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        # Batch runs update metrics from worker threads
        self._lock = threading.Lock()
        self.metrics = {
            "matches_computed": 0,
            "predictions_persisted": 0,
            "persist_failures": 0,
            "fetch_retries": 0,
            "errors_by_type": {},
            "gate_distribution": {"pass": 0, "warn": 0, "fail": 0},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"matchscore_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str, sort_keys=True)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_match(self, overall_gate: str):
        """Count a finished computation and its aggregate gate."""
        with self._lock:
            self.metrics["matches_computed"] += 1
            dist = self.metrics["gate_distribution"]
            dist[overall_gate] = dist.get(overall_gate, 0) + 1

    def record_persisted(self):
        with self._lock:
            self.metrics["predictions_persisted"] += 1

    def record_persist_failure(self, error_type: str):
        """Record a failed calibration or submission write."""
        with self._lock:
            self.metrics["persist_failures"] += 1
            self._count_error(error_type)

    def record_fetch_retry(self, error_type: str):
        with self._lock:
            self.metrics["fetch_retries"] += 1
            self._count_error(error_type)

    def _count_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of current metrics."""
        with self._lock:
            snapshot = json.loads(json.dumps(self.metrics))

        total = snapshot["matches_computed"]
        if total > 0:
            snapshot["gate_share"] = {
                gate: round(count / total, 3)
                for gate, count in snapshot["gate_distribution"].items()
            }
        return snapshot

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Match Session Metrics ===")
        self.info(f"Matches computed: {metrics['matches_computed']}")
        self.info(
            f"Predictions persisted: {metrics['predictions_persisted']} "
            f"(failures: {metrics['persist_failures']})"
        )
        self.info(f"Fetch retries: {metrics['fetch_retries']}")

        if metrics["matches_computed"]:
            self.info("Gate distribution:")
            for gate, count in metrics["gate_distribution"].items():
                share = metrics["gate_share"][gate] * 100
                self.info(f"  {gate}: {count} ({share:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "matchscore",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level; defaults to MATCHSCORE_LOG_LEVEL or INFO
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        from .env import get_settings

        settings = get_settings()
        kwargs.setdefault("log_dir", settings.log_dir)
        _global_logger = StructuredLogger(name=name, level=level or settings.log_level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None

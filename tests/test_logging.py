"""Tests for logging configuration"""
import logging
import tempfile
from pathlib import Path

from metrics_bridge.config import BridgeSettings
from metrics_bridge.logging_config import (
    setup_structured_logging,
    get_logger,
    log_server_startup,
    log_snapshot_published,
    log_error
)


class TestLoggingConfig:
    """Test logging configuration and structured logging"""

    def test_setup_structured_logging(self):
        """Test structured logging setup"""
        with tempfile.TemporaryDirectory() as tmp_dir:
            log_file = Path(tmp_dir) / "logs" / "bridge.log"
            settings = BridgeSettings(log_file=log_file, log_level="DEBUG")

            setup_structured_logging(settings)

            assert log_file.parent.exists()
            logger = logging.getLogger("test")
            assert logger.isEnabledFor(logging.DEBUG)
            assert logging.getLogger("httpx").level == logging.WARNING

            logging.getLogger().handlers.clear()

    def test_setup_without_log_file(self):
        """Test that logging works with console output only"""
        settings = BridgeSettings(log_level="WARNING")

        setup_structured_logging(settings)

        root = logging.getLogger()
        assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)
        assert not root.isEnabledFor(logging.INFO)

        logging.getLogger().handlers.clear()

    def test_get_logger(self):
        """Test getting structured logger"""
        logger = get_logger("test_logger")

        assert logger is not None
        assert hasattr(logger, 'info')
        assert hasattr(logger, 'error')
        assert hasattr(logger, 'debug')
        assert hasattr(logger, 'warning')

    def test_log_helpers(self):
        """Test structured log helpers do not raise"""
        logger = get_logger("test")

        log_server_startup(logger, BridgeSettings(push_url="http://collector/ingest"))
        log_snapshot_published(logger, records_count=12, elapsed=0.0123, status_code=204)
        log_snapshot_published(logger, records_count=0, elapsed=0.0)
        log_error(logger, ValueError("Test error"), {"component": "test"})

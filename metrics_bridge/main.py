"""Main entry point for the metrics bridge server"""
import sys
import uvicorn
from .app.server import MetricsServer
from .bridge import MetricsBridge
from .config import BridgeSettings
from .logging_config import setup_structured_logging, get_logger, log_server_startup, log_error
from .metrics.registry import Registry


def main():
    """Main application entry point"""
    try:
        settings = BridgeSettings()

        setup_structured_logging(settings)
        logger = get_logger(__name__)
        log_server_startup(logger, settings)

        bridge = MetricsBridge.from_settings(settings, Registry())
        server = MetricsServer(settings, bridge)

        uvicorn.run(
            server.get_app(),
            host=settings.metrics_host,
            port=settings.metrics_port,
            log_config=None  # We handle logging ourselves
        )

    except Exception as e:
        logger = get_logger(__name__)
        log_error(logger, e, {"component": "main", "phase": "startup"})
        sys.exit(1)


if __name__ == '__main__':
    main()

"""FastAPI server setup and routes"""
import time
from fastapi import FastAPI, HTTPException
from ..bridge import MetricsBridge
from ..config import BridgeSettings
from ..logging_config import get_logger
from ..middleware.logging import RequestLoggingMiddleware
from .handler import create_pull_router


logger = get_logger(__name__)


class MetricsServer:
    """FastAPI server exposing a bridge's pull endpoint"""

    def __init__(self, settings: BridgeSettings, bridge: MetricsBridge):
        self.settings = settings
        self.bridge = bridge
        self.app = FastAPI(
            title="Metrics Bridge",
            version=settings.service_version,
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )
        self.app.state.start_time = time.time()

        self._setup_middleware()
        self._setup_routes()
        self._setup_events()

    def _setup_middleware(self):
        """Setup middleware"""
        if self.settings.enable_request_logging:
            self.app.add_middleware(RequestLoggingMiddleware, metrics_path=self.settings.metrics_path)

    def _setup_routes(self):
        """Setup FastAPI routes"""
        self.app.include_router(create_pull_router(self.bridge, self.settings.metrics_path))

        @self.app.get('/health')
        def health_check():
            """Health check endpoint"""
            sampler = self.bridge.sampler
            health_data = {
                "status": "healthy" if self.bridge.is_running else "unhealthy",
                "hostname": self.bridge.hostname,
                "push_enabled": self.bridge.push_enabled,
                "samples_taken": sampler.samples_taken,
            }

            if not self.bridge.is_running:
                raise HTTPException(status_code=503, detail=health_data)

            return health_data

        @self.app.get('/status')
        def get_status():
            """Detailed status information"""
            sampler = self.bridge.sampler
            publisher = self.bridge.publisher

            return {
                "service": {
                    "name": self.settings.service_name,
                    "version": self.settings.service_version,
                    "uptime_seconds": round(time.time() - self.app.state.start_time, 1),
                    "hostname": self.bridge.hostname
                },
                "bridge": {
                    "prefix": self.bridge.prefix,
                    "running": self.bridge.is_running,
                    "registry_size": len(self.bridge.registry),
                    "push_enabled": self.bridge.push_enabled,
                    "push_url": self.bridge.config.push_url or None
                },
                "sampler": {
                    "interval_seconds": sampler.interval,
                    "samples_taken": sampler.samples_taken,
                    "sample_errors": sampler.sample_errors,
                    "gc_cycles_observed": sampler.last_observed_gc
                },
                "publisher": {
                    "pushes_sent": publisher.pushes_sent,
                    "pushes_failed": publisher.pushes_failed,
                    "last_status_code": publisher.last_status_code
                } if publisher is not None else None
            }

    def _setup_events(self):
        """Setup FastAPI startup/shutdown events"""

        @self.app.on_event("startup")
        async def startup_event():
            """Start the bridge background loops"""
            self.app.state.start_time = time.time()
            await self.bridge.start()

        @self.app.on_event("shutdown")
        async def shutdown_event():
            """Stop the bridge background loops"""
            logger.info("Shutting down metrics bridge", event_type="server_shutdown")
            await self.bridge.stop()

    def get_app(self) -> FastAPI:
        """Get the FastAPI application"""
        return self.app

"""Configuration for the metrics bridge"""
from pathlib import Path
from typing import Literal, Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings


class BridgeSettings(BaseSettings):
    """Bridge and server settings, read from the environment"""

    # Push settings
    push_url: str = Field(default="", description="Collector URL for periodic JSON push (empty disables push)")
    push_timeout: float = Field(default=5.0, gt=0, description="Push request timeout in seconds")

    # Naming
    metric_prefix: str = Field(default="app", description="Prefix prepended to every metric name")

    # Pull server settings
    metrics_host: str = Field(default="0.0.0.0", description="Metrics server host")
    metrics_port: int = Field(default=9100, ge=1, le=65535, description="Metrics server port")
    metrics_path: str = Field(default="/metrics", description="Path of the pull endpoint")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file path")

    # Service settings
    service_name: str = Field(default="metrics-bridge", description="Service name")
    service_version: str = Field(default="1.0.0", description="Service version")
    enable_request_logging: bool = Field(default=True, description="Enable HTTP request logging")

    class Config:
        env_prefix = ""
        case_sensitive = False

    @validator('push_url')
    def validate_push_url(cls, v):
        """Push URL must be absolute http(s) when set"""
        v = v.strip()
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("PUSH_URL must start with http:// or https://")
        return v

    @validator('metric_prefix')
    def validate_metric_prefix(cls, v):
        if not v or v.startswith('.') or v.endswith('.'):
            raise ValueError("METRIC_PREFIX must be non-empty and must not start or end with '.'")
        return v

    @validator('metrics_path')
    def validate_metrics_path(cls, v):
        if not v.startswith('/'):
            raise ValueError("METRICS_PATH must start with '/'")
        return v

    @validator('log_level', pre=True)
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @validator('log_file')
    def ensure_parent_directories(cls, v):
        """Ensure parent directories exist for file paths"""
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def push_enabled(self) -> bool:
        return bool(self.push_url)

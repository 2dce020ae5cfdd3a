"""Configuration management for blob-tools."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "blob-tools"
    # OTLP/gRPC collector, e.g. http://localhost:4317; unset prints spans
    otel_exporter_endpoint: Optional[str] = None

    # Worker pool for maintenance passes
    max_workers: int = 8

    # Passed to botocore; the pipeline has no timeouts of its own
    s3_connect_timeout: float = 10.0
    s3_read_timeout: float = 60.0
    s3_max_attempts: int = 3

    # Re-grant an object's ACL when it is rewritten in place
    preserve_acl: bool = True

    model_config = {
        "env_prefix": "BLOB_TOOLS_",
        "case_sensitive": False,
    }


settings = Settings()

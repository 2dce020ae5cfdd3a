"""Core utilities and shared components for blob-tools."""

from .config import settings
from .exceptions import BlobToolsError, ConfigError, ValidationError
from .observability import get_logger, get_tracer

__all__ = [
    "settings",
    "BlobToolsError",
    "ConfigError",
    "ValidationError",
    "get_logger",
    "get_tracer",
]

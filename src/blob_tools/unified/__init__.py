"""Configuration-driven interface to the maintenance passes."""

from .maintenance_operations import (
    apply_cache_control,
    compress_container,
    configure_wildcard_cors,
)

__all__ = [
    "apply_cache_control",
    "compress_container",
    "configure_wildcard_cors",
]

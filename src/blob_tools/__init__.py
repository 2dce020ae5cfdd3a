"""Bulk maintenance passes for objects in S3-compatible buckets.

This package compresses eligible objects with gzip and stamps Cache-Control
headers on them so they can be served efficiently through a CDN or HTTP
cache. Passes are idempotent, run concurrently over a lazy listing, and
can be simulated without writing anything.

Recommended Usage:
    Use the unified interface from this module for most operations:

    >>> from blob_tools import compress_container, S3StorageConfig
    >>> config = S3StorageConfig(aws_profile="site-admin")
    >>> report = compress_container(
    ...     "s3://site/assets", config, extensions=[".js", ".css"],
    ...     max_age_seconds=3600,
    ... )

Advanced Usage:
    Drive a pass against any ObjectStore implementation:

    >>> from blob_tools.maintenance import run_compression_pass
"""

__version__ = "0.1.0"

from .maintenance import (
    ObjectEvent,
    ObjectFailure,
    ObjectOutcome,
    RunReport,
    run_cache_header_pass,
    run_compression_pass,
)
from .objectstorage import (
    ObjectStore,
    S3ClientConfig,
    S3ObjectStore,
    set_wildcard_read_cors,
)
from .schemas import (
    ObjectDescriptor,
    PolicySpec,
    RunMode,
    S3StorageConfig,
    ScopeSpec,
)

# Unified interface (recommended)
from .unified import (
    apply_cache_control,
    compress_container,
    configure_wildcard_cors,
)

__all__ = [
    # Specs and configuration
    "ObjectDescriptor",
    "PolicySpec",
    "RunMode",
    "S3StorageConfig",
    "ScopeSpec",
    # Unified interface
    "apply_cache_control",
    "compress_container",
    "configure_wildcard_cors",
    # Passes
    "ObjectEvent",
    "ObjectFailure",
    "ObjectOutcome",
    "RunReport",
    "run_cache_header_pass",
    "run_compression_pass",
    # Object storage
    "ObjectStore",
    "S3ClientConfig",
    "S3ObjectStore",
    "set_wildcard_read_cors",
]

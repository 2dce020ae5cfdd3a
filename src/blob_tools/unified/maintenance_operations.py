"""Maintenance operations driven by an S3 path and a storage configuration.

Callers pass ``s3://bucket`` or ``s3://bucket/subpath`` plus plain option
values; this layer validates them into specs, builds the store and runs
the pass.
"""

import threading
from typing import Iterable, Optional

from blob_tools.core import get_logger
from blob_tools.maintenance import run_cache_header_pass, run_compression_pass
from blob_tools.maintenance.report import ReportSink, RunReport
from blob_tools.objectstorage.clients import S3ClientConfig, S3ClientManager
from blob_tools.objectstorage.cors import CorsRules, set_wildcard_read_cors
from blob_tools.objectstorage.store import S3ObjectStore
from blob_tools.schemas import (
    PolicySpec,
    RunMode,
    S3StorageConfig,
    ScopeSpec,
    build_config,
)

logger = get_logger(__name__)


def _client_for(config: S3StorageConfig):
    return S3ClientManager(S3ClientConfig.from_storage_config(config)).client


def _resolve_target(
    path: str, subpath: Optional[str]
) -> tuple[str, Optional[str]]:
    """Bucket and subpath; an explicit subpath wins over one in the path."""
    bucket, prefix = S3ClientManager.parse_s3_path(path)
    return bucket, subpath if subpath is not None else (prefix or None)


def compress_container(
    path: str,
    config: S3StorageConfig,
    extensions: Iterable[str],
    max_age_seconds: int,
    in_place: bool = True,
    new_extension: str = ".gz",
    subpath: Optional[str] = None,
    simulate: bool = False,
    max_workers: Optional[int] = None,
    sink: Optional[ReportSink] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RunReport:
    """
    Gzip eligible objects under an S3 path.

    Args:
        path: s3://bucket or s3://bucket/subpath
        config: S3 storage configuration
        extensions: Extensions to compress, e.g. [".js", ".css"]
        max_age_seconds: Cache-Control max-age stamped on compressed objects
        in_place: Overwrite originals instead of writing siblings
        new_extension: Sibling suffix when not in place
        subpath: Overrides the subpath taken from ``path``
        simulate: Compute and log, write nothing
        max_workers: Worker threads
        sink: Per-object event callback
        cancel_event: Stops dispatch once set

    Returns:
        RunReport for the pass

    Raises:
        ConfigError: If the options are invalid
        EnumerationError: If the bucket cannot be listed
    """
    bucket, subpath = _resolve_target(path, subpath)
    scope = build_config(
        ScopeSpec,
        allowed_extensions=list(extensions),
        subpath_prefix=subpath,
        in_place=in_place,
        new_extension_suffix=new_extension,
    )
    policy = build_config(PolicySpec, cache_control_max_age_seconds=max_age_seconds)

    logger.info("Compressing bucket", path=path, storage_type=config.type)
    store = S3ObjectStore(_client_for(config))
    return run_compression_pass(
        store,
        bucket,
        scope,
        policy,
        RunMode(simulate=simulate),
        sink=sink,
        max_workers=max_workers,
        cancel_event=cancel_event,
    )


def apply_cache_control(
    path: str,
    config: S3StorageConfig,
    extensions: Iterable[str],
    max_age_seconds: int,
    subpath: Optional[str] = None,
    simulate: bool = False,
    max_workers: Optional[int] = None,
    sink: Optional[ReportSink] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RunReport:
    """
    Stamp Cache-Control on eligible objects under an S3 path.

    Raises:
        ConfigError: If the options are invalid
        EnumerationError: If the bucket cannot be listed
    """
    bucket, subpath = _resolve_target(path, subpath)
    scope = build_config(
        ScopeSpec, allowed_extensions=list(extensions), subpath_prefix=subpath
    )
    policy = build_config(PolicySpec, cache_control_max_age_seconds=max_age_seconds)

    logger.info("Applying cache control", path=path, storage_type=config.type)
    store = S3ObjectStore(_client_for(config))
    return run_cache_header_pass(
        store,
        bucket,
        scope,
        policy,
        RunMode(simulate=simulate),
        sink=sink,
        max_workers=max_workers,
        cancel_event=cancel_event,
    )


def configure_wildcard_cors(path: str, config: S3StorageConfig) -> CorsRules:
    """Allow GET from any origin on the bucket of an S3 path."""
    bucket, _ = S3ClientManager.parse_s3_path(path)
    return set_wildcard_read_cors(_client_for(config), bucket)

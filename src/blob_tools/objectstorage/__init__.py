"""Object storage access for S3-compatible services."""

from .clients import S3ClientConfig, S3ClientManager
from .cors import WILDCARD_READ_RULE, set_wildcard_read_cors, update_cors_rules
from .store import ObjectStore, S3ObjectStore

__all__ = [
    "ObjectStore",
    "S3ClientConfig",
    "S3ClientManager",
    "S3ObjectStore",
    "WILDCARD_READ_RULE",
    "set_wildcard_read_cors",
    "update_cors_rules",
]

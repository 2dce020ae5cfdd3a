"""Gzip transform and commit for the compression pass."""

import gzip
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from blob_tools.core import get_logger
from blob_tools.core.exceptions import ReadError, WriteError
from blob_tools.maintenance.eligibility import GZIP_ENCODING, sibling_key
from blob_tools.objectstorage.store import ObjectStore
from blob_tools.schemas import (
    ObjectDescriptor,
    ObjectProperties,
    PolicySpec,
    RunMode,
    ScopeSpec,
)

logger = get_logger(__name__)

STORE_ERRORS = (ClientError, BotoCoreError)


def gzip_bytes(data: bytes, compresslevel: int = 9) -> bytes:
    """Gzip a buffer. mtime is pinned so equal input gives equal output."""
    return gzip.compress(data, compresslevel=compresslevel, mtime=0)


def gunzip_bytes(data: bytes) -> bytes:
    return gzip.decompress(data)


def target_key(descriptor: ObjectDescriptor, scope: ScopeSpec) -> str:
    """Key that receives the compressed body."""
    if scope.in_place:
        return descriptor.key
    return sibling_key(descriptor, scope)


def compress_object(store: ObjectStore, descriptor: ObjectDescriptor) -> bytes:
    """Download an object's body and gzip it in memory.

    Raises:
        ReadError: If the body cannot be read
    """
    logger.debug("Downloading object", path=descriptor.path)
    try:
        body = store.read_body(descriptor)
    except STORE_ERRORS as e:
        raise ReadError(
            f"Failed to read '{descriptor.path}': {e}", path=descriptor.path
        ) from e

    compressed = gzip_bytes(body)
    logger.debug(
        "Object compressed",
        path=descriptor.path,
        original_bytes=len(body),
        compressed_bytes=len(compressed),
    )
    return compressed


def commit_compressed(
    store: ObjectStore,
    descriptor: ObjectDescriptor,
    target: str,
    payload: bytes,
    policy: PolicySpec,
    mode: RunMode,
) -> Optional[ObjectProperties]:
    """Write the compressed body together with its gzip headers.

    Body and headers go to the store in one write, so the target is
    never left holding a compressed body without Content-Encoding: gzip.
    A failed or interrupted commit leaves the old object in place and the
    next run compresses it from scratch.

    Returns:
        The properties written, or None in simulate mode

    Raises:
        WriteError: If the write fails
    """
    target_path = f"/{descriptor.container}/{target}"

    if mode.simulate:
        logger.info(
            "NOT writing object, due to simulation",
            path=descriptor.path,
            target=target_path,
            compressed_bytes=len(payload),
        )
        return None

    properties = ObjectProperties(
        content_encoding=GZIP_ENCODING,
        content_type=descriptor.content_type,
        cache_control=policy.cache_control_header,
    )

    logger.info("Writing object", path=descriptor.path, target=target_path)
    try:
        store.write_body(descriptor.container, target, payload, properties)
    except STORE_ERRORS as e:
        raise WriteError(
            f"Failed to write '{target_path}': {e}", path=descriptor.path
        ) from e

    return properties

"""Decides which listed objects a pass touches and which are already done."""

import posixpath
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from blob_tools.core.exceptions import ProbeError, ReadError
from blob_tools.objectstorage.store import ObjectStore
from blob_tools.schemas import ObjectDescriptor, PipelineKind, ScopeSpec

GZIP_ENCODING = "gzip"


def path_extension(path: str) -> str:
    """Extension of the last path segment, dot included, lower-cased.

    Returns an empty string when the segment has no dot or ends in one.
    """
    name = posixpath.basename(path)
    dot = name.rfind(".")
    if dot == -1 or dot == len(name) - 1:
        return ""
    return name[dot:].lower()


def is_in_scope(descriptor: ObjectDescriptor, scope: ScopeSpec) -> bool:
    """Check the subpath prefix and the extension of an object."""
    path = descriptor.path

    if scope.subpath_prefix:
        directory = f"/{descriptor.container}/{scope.subpath_prefix}/"
        exact_file = f"/{descriptor.container}/{scope.subpath_prefix}"
        if not path.lower().startswith(directory.lower()) and path != exact_file:
            return False

    return path_extension(path) in scope.allowed_extensions


def sibling_key(descriptor: ObjectDescriptor, scope: ScopeSpec) -> str:
    return descriptor.key + scope.new_extension_suffix


def describe_object(
    store: ObjectStore, descriptor: ObjectDescriptor
) -> ObjectDescriptor:
    """Fetch the content headers of a listed object.

    Raises:
        ReadError: If the headers cannot be fetched or the object is gone
    """
    try:
        described = store.describe(descriptor)
    except (ClientError, BotoCoreError) as e:
        raise ReadError(
            f"Failed to describe '{descriptor.path}': {e}",
            path=descriptor.path,
            stage="describe",
        ) from e

    if described is None:
        raise ReadError(
            f"'{descriptor.path}' no longer exists",
            path=descriptor.path,
            stage="describe",
        )
    return described


def is_already_done(
    descriptor: ObjectDescriptor,
    scope: ScopeSpec,
    kind: PipelineKind,
    store: Optional[ObjectStore] = None,
) -> bool:
    """Check whether an in-scope object is already in the target state.

    In-place checks read the encoding, so the descriptor must have been
    described. In sibling mode this probes the store for the sibling
    object, so the answer reflects the store now, not the listing.

    Raises:
        ProbeError: If the sibling existence check fails
    """
    if kind is PipelineKind.CACHE_CONTROL:
        # Re-stamping the same header is harmless
        return False

    if scope.in_place:
        encoding = descriptor.content_encoding or ""
        return encoding.lower() == GZIP_ENCODING

    if store is None:
        raise ValueError("a store is required to probe for sibling objects")

    target = sibling_key(descriptor, scope)
    try:
        return store.exists(descriptor.container, target)
    except (ClientError, BotoCoreError) as e:
        raise ProbeError(
            f"Failed to check for '{target}': {e}", path=descriptor.path
        ) from e

"""Cache-Control stamping for the cache-header pass."""

from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from blob_tools.core import get_logger
from blob_tools.core.exceptions import WriteError
from blob_tools.objectstorage.store import ObjectStore
from blob_tools.schemas import ObjectDescriptor, ObjectProperties, PolicySpec, RunMode

logger = get_logger(__name__)


def commit_cache_control(
    store: ObjectStore,
    descriptor: ObjectDescriptor,
    policy: PolicySpec,
    mode: RunMode,
) -> Optional[ObjectProperties]:
    """Set Cache-Control on an object, leaving its body alone.

    Returns:
        The properties written, or None in simulate mode

    Raises:
        WriteError: If the property update fails
    """
    properties = ObjectProperties(cache_control=policy.cache_control_header)

    if mode.simulate:
        logger.info(
            "NOT configuring headers, due to simulation",
            path=descriptor.path,
            cache_control=properties.cache_control,
        )
        return None

    logger.info(
        "Configuring headers",
        path=descriptor.path,
        cache_control=properties.cache_control,
    )
    try:
        store.set_properties(descriptor.container, descriptor.key, properties)
    except (ClientError, BotoCoreError) as e:
        raise WriteError(
            f"Failed to set headers on '{descriptor.path}': {e}",
            path=descriptor.path,
            stage="set_properties",
        ) from e

    return properties

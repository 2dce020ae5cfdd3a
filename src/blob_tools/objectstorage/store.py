"""Object store capability surface used by the maintenance passes.

The passes only depend on the ObjectStore protocol below. S3ObjectStore
implements it on top of a boto3 S3 client; tests supply in-memory fakes.
"""

from typing import Any, Dict, Iterator, List, Optional, Protocol

from botocore.exceptions import ClientError

from blob_tools.core import get_logger, settings
from blob_tools.core.exceptions import EnumerationError
from blob_tools.schemas import ObjectDescriptor, ObjectProperties

logger = get_logger(__name__)

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")

# head_object fields that are sent back unchanged when an object is
# rewritten in place. Anything not listed here is reset by S3.
_PRESERVED_HEADERS = (
    "ContentType",
    "ContentEncoding",
    "CacheControl",
    "ContentDisposition",
    "ContentLanguage",
    "Expires",
    "WebsiteRedirectLocation",
    "StorageClass",
    "ServerSideEncryption",
    "SSEKMSKeyId",
    "BucketKeyEnabled",
)

_GRANT_ARGUMENTS = {
    "READ": "GrantRead",
    "READ_ACP": "GrantReadACP",
    "WRITE_ACP": "GrantWriteACP",
    "FULL_CONTROL": "GrantFullControl",
}


class ObjectStore(Protocol):
    """Protocol for the object storage operations a pass needs."""

    def list_objects(self, container: str) -> Iterator[ObjectDescriptor]:
        """Lazily list every object in the container.

        Descriptors may carry only the key and size; see describe().
        """
        ...

    def describe(self, descriptor: ObjectDescriptor) -> Optional[ObjectDescriptor]:
        """Fetch an object's content headers, or None if it no longer exists."""
        ...

    def read_body(self, descriptor: ObjectDescriptor) -> bytes:
        """Read the full body of an object."""
        ...

    def exists(self, container: str, key: str) -> bool:
        """Check whether an object currently exists."""
        ...

    def write_body(
        self,
        container: str,
        key: str,
        data: bytes,
        properties: Optional[ObjectProperties] = None,
    ) -> None:
        """Write an object's body and headers in one request.

        Either both land or neither does.
        """
        ...

    def set_properties(
        self, container: str, key: str, properties: ObjectProperties
    ) -> None:
        """Update an object's headers without touching its body."""
        ...


def _is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES


def _property_headers(properties: Optional[ObjectProperties]) -> Dict[str, str]:
    if properties is None:
        return {}
    headers = {}
    if properties.content_type is not None:
        headers["ContentType"] = properties.content_type
    if properties.content_encoding is not None:
        headers["ContentEncoding"] = properties.content_encoding
    if properties.cache_control is not None:
        headers["CacheControl"] = properties.cache_control
    return headers


def _grantee_ref(grantee: Dict[str, Any]) -> Optional[str]:
    kind = grantee.get("Type")
    if kind == "CanonicalUser":
        return f'id="{grantee["ID"]}"'
    if kind == "Group":
        return f'uri="{grantee["URI"]}"'
    if kind == "AmazonCustomerByEmail":
        return f'emailAddress="{grantee["EmailAddress"]}"'
    return None


class S3ObjectStore:
    """ObjectStore backed by a boto3 S3 client.

    boto3 clients are thread-safe, so one store is shared by all workers.

    Rewriting an object in place (put_object, or copy_object onto itself)
    resets everything not sent with the request. The headers listed in
    _PRESERVED_HEADERS and the user metadata are sent back. With
    preserve_acl, non-default ACL grants are re-sent too; this needs
    s3:GetObjectAcl. Tags survive copies but not body rewrites, and
    object lock settings are not carried over.
    """

    def __init__(self, client: Any, preserve_acl: Optional[bool] = None):
        self.client = client
        self.preserve_acl = (
            settings.preserve_acl if preserve_acl is None else preserve_acl
        )

    def list_objects(self, container: str) -> Iterator[ObjectDescriptor]:
        """List all objects in a bucket, yielding one descriptor per object.

        Pages are fetched as the iterator is consumed. Descriptors carry the
        key and size only; headers are fetched per object by describe().

        Raises:
            EnumerationError: If a listing page cannot be fetched
        """
        logger.info("Enumerating objects", bucket=container)

        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=container):
                for obj in page.get("Contents", []):
                    yield ObjectDescriptor(
                        container=container, key=obj["Key"], size=obj.get("Size", 0)
                    )
        except ClientError as e:
            error_msg = f"Failed to list objects in bucket '{container}': {e}"
            logger.error(error_msg, error=str(e))
            raise EnumerationError(error_msg) from e

    def describe(self, descriptor: ObjectDescriptor) -> Optional[ObjectDescriptor]:
        try:
            head = self.client.head_object(
                Bucket=descriptor.container, Key=descriptor.key
            )
        except ClientError as e:
            if _is_not_found(e):
                logger.debug("Listed object vanished", path=descriptor.path)
                return None
            raise

        return ObjectDescriptor(
            container=descriptor.container,
            key=descriptor.key,
            content_type=head.get("ContentType", "application/octet-stream"),
            content_encoding=head.get("ContentEncoding"),
            cache_control=head.get("CacheControl"),
            size=head.get("ContentLength", descriptor.size),
        )

    def read_body(self, descriptor: ObjectDescriptor) -> bytes:
        response = self.client.get_object(
            Bucket=descriptor.container, Key=descriptor.key
        )
        return response["Body"].read()

    def exists(self, container: str, key: str) -> bool:
        try:
            self.client.head_object(Bucket=container, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return False
            raise
        return True

    def _acl_grants(self, container: str, key: str) -> Dict[str, str]:
        """Grant arguments restating an object's ACL.

        Empty when the only grant is the owner's full control, which is
        what S3 applies anyway; buckets with ACLs disabled reject any
        explicit grant.
        """
        acl = self.client.get_object_acl(Bucket=container, Key=key)
        owner_id = acl.get("Owner", {}).get("ID")

        grants: Dict[str, List[str]] = {}
        beyond_owner = False
        for grant in acl.get("Grants", []):
            argument = _GRANT_ARGUMENTS.get(grant.get("Permission"))
            grantee = grant.get("Grantee", {})
            ref = _grantee_ref(grantee)
            if argument is None or ref is None:
                continue
            grants.setdefault(argument, []).append(ref)
            if argument != "GrantFullControl" or grantee.get("ID") != owner_id:
                beyond_owner = True

        if not beyond_owner:
            return {}
        return {argument: ", ".join(refs) for argument, refs in grants.items()}

    def _rewrite_headers(self, container: str, key: str) -> Dict[str, Any]:
        """Arguments that keep an object as it is across a rewrite.

        Empty if the object does not exist yet.
        """
        try:
            head = self.client.head_object(Bucket=container, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return {}
            raise

        headers: Dict[str, Any] = {
            field: head[field] for field in _PRESERVED_HEADERS if head.get(field)
        }
        headers["Metadata"] = dict(head.get("Metadata", {}))
        if self.preserve_acl:
            headers.update(self._acl_grants(container, key))
        return headers

    def write_body(
        self,
        container: str,
        key: str,
        data: bytes,
        properties: Optional[ObjectProperties] = None,
    ) -> None:
        """Upload a new body with its headers in a single put_object.

        The existing object's headers are kept unless properties replaces
        them, except Content-Encoding: the body it described is gone.
        """
        headers = self._rewrite_headers(container, key)
        headers.pop("ContentEncoding", None)
        headers.update(_property_headers(properties))

        self.client.put_object(Bucket=container, Key=key, Body=data, **headers)
        logger.debug(
            "Object written",
            bucket=container,
            key=key,
            bytes=len(data),
            content_encoding=headers.get("ContentEncoding"),
        )

    def set_properties(
        self, container: str, key: str, properties: ObjectProperties
    ) -> None:
        """Replace headers with an in-place copy, keeping unchanged ones."""
        headers = self._rewrite_headers(container, key)
        headers.setdefault("Metadata", {})
        headers.update(_property_headers(properties))

        self.client.copy_object(
            Bucket=container,
            Key=key,
            CopySource={"Bucket": container, "Key": key},
            MetadataDirective="REPLACE",
            **headers,
        )
        logger.debug(
            "Object properties updated",
            bucket=container,
            key=key,
            content_encoding=properties.content_encoding,
            cache_control=properties.cache_control,
        )

"""Bucket CORS configuration."""

from typing import Any, Callable, Dict, List, Optional

from botocore.exceptions import ClientError

from blob_tools.core import get_logger
from blob_tools.core.exceptions import CommandExecutionError

logger = get_logger(__name__)

CorsRules = List[Dict[str, Any]]

WILDCARD_READ_RULE: Dict[str, Any] = {
    "AllowedMethods": ["GET"],
    "AllowedOrigins": ["*"],
}


def get_cors_rules(client: Any, bucket: str) -> CorsRules:
    """Return the bucket's CORS rules, an empty list if none are configured."""
    try:
        response = client.get_bucket_cors(Bucket=bucket)
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") == "NoSuchCORSConfiguration":
            return []
        raise
    return list(response.get("CORSRules", []))


def update_cors_rules(
    client: Any,
    bucket: str,
    alter: Callable[[CorsRules], Optional[CorsRules]],
) -> CorsRules:
    """Read, alter and write back a bucket's CORS rules.

    Args:
        client: boto3 S3 client
        bucket: Bucket name
        alter: Receives the current rules and returns the new ones. An empty
            or None result removes the CORS configuration.

    Returns:
        The rules now in effect

    Raises:
        CommandExecutionError: If reading or writing the configuration fails
    """
    if alter is None:
        raise ValueError("alter is required")

    logger.info("Configuring CORS", bucket=bucket)

    try:
        current = get_cors_rules(client, bucket)
        rules = alter(list(current)) or []

        if rules:
            client.put_bucket_cors(
                Bucket=bucket, CORSConfiguration={"CORSRules": rules}
            )
        else:
            client.delete_bucket_cors(Bucket=bucket)
    except ClientError as e:
        error_msg = f"Failed to configure CORS on bucket '{bucket}': {e}"
        logger.error(error_msg, error=str(e))
        raise CommandExecutionError(error_msg) from e

    logger.info(
        "CORS configured",
        bucket=bucket,
        previous_rule_count=len(current),
        rule_count=len(rules),
    )
    return rules


def set_wildcard_read_cors(client: Any, bucket: str) -> CorsRules:
    """Replace all CORS rules with a single GET-from-anywhere rule."""
    return update_cors_rules(client, bucket, lambda _rules: [dict(WILDCARD_READ_RULE)])

"""S3 upload event parsing helpers.

This module extracts the uploaded object from a storage notification
and maps its bucket onto a deployment environment tag.
"""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import unquote_plus

from core.config import CsvRelayConfig
from core.errors import CsvRelayEventError
from core.types import ObjectLocation


def parse_upload_event(event: Mapping[str, Any]) -> ObjectLocation:
    """Read bucket and key from the first record of an S3 event.

    Args:
        event: Lambda S3 notification payload.

    Returns:
        Bucket name and URL-decoded object key.

    Raises:
        CsvRelayEventError: If the event carries no usable S3 record.
    """
    records = event.get("Records") or []
    if not records:
        raise CsvRelayEventError(
            "Invalid upload event: no Records found. "
            "Trigger the ingestion function from an S3 ObjectCreated notification."
        )
    s3_info = records[0].get("s3") or {}
    bucket = (s3_info.get("bucket") or {}).get("name")
    key = (s3_info.get("object") or {}).get("key")
    if not bucket or not key:
        raise CsvRelayEventError(
            "Invalid upload event: expected Records[0].s3.bucket.name "
            "and Records[0].s3.object.key."
        )
    return ObjectLocation(bucket=bucket, key=unquote_plus(key))


def resolve_environment(bucket: str, config: CsvRelayConfig) -> str:
    """Map a bucket name to its environment tag.

    An explicit ``CSVRELAY_BUCKET_ENV_MAP`` entry wins. Without one, the
    second hyphen-delimited token of the bucket name is used, so
    ``app-dev-uploads`` maps to ``dev``.

    Args:
        bucket: Source bucket name.
        config: Runtime configuration holding the explicit mapping.

    Returns:
        Environment tag.

    Raises:
        CsvRelayEventError: If neither rule yields an environment.
    """
    mapped_env = config.bucket_env_map.get(bucket)
    if mapped_env:
        return mapped_env
    tokens = bucket.split("-")
    if len(tokens) < 2 or not tokens[1]:
        raise CsvRelayEventError(
            f"Cannot derive environment from bucket '{bucket}': "
            "expected <app>-<env>-... naming. "
            "Add the bucket to CSVRELAY_BUCKET_ENV_MAP."
        )
    return tokens[1]

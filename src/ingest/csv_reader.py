"""Uploaded CSV readers for ingestion.

This module downloads an uploaded object and parses it into rows.
Rows keep every value as text; no type coercion happens here.
"""

from __future__ import annotations

import csv
import io
from typing import Any, Iterator

from botocore.exceptions import BotoCoreError, ClientError

from core.constants import CSV_TEXT_ENCODING
from core.errors import CsvRelayIngestError
from core.logging_config import get_logger
from core.types import ObjectLocation, Row

_LOGGER = get_logger(__name__)


def fetch_object_text(s3_client: Any, location: ObjectLocation) -> str:
    """Download the whole object and decode it as text.

    The full body is buffered in memory.

    Args:
        s3_client: Boto3 S3 client.
        location: Uploaded bucket and key.

    Returns:
        Decoded object body.

    Raises:
        CsvRelayIngestError: If the download or decoding fails.
    """
    try:
        body = s3_client.get_object(Bucket=location.bucket, Key=location.key)["Body"].read()
    except (BotoCoreError, ClientError) as error:
        _LOGGER.error(
            "object_fetch_failed", bucket=location.bucket, key=location.key, error=str(error)
        )
        raise CsvRelayIngestError(
            f"Failed to read s3://{location.bucket}/{location.key}: {error}. "
            "Check the object exists and the function can read the bucket."
        ) from error
    try:
        return body.decode(CSV_TEXT_ENCODING)
    except UnicodeDecodeError as error:
        raise CsvRelayIngestError(
            f"Failed to decode s3://{location.bucket}/{location.key} as UTF-8: {error.reason}. "
            "Upload the CSV with UTF-8 encoding."
        ) from error


def parse_rows(text: str) -> Iterator[Row]:
    """Yield one row per CSV data line, in file order.

    The first line is the header. Blank lines are skipped. A short line
    omits its missing trailing columns; cells beyond the header are kept
    under positional ``_<index>`` keys.

    Args:
        text: Full CSV document.

    Yields:
        Column name to string value mappings.

    Raises:
        CsvRelayIngestError: If the CSV syntax is invalid.
    """
    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        header = next(reader, None)
        if header is None:
            return
        for cells in reader:
            if not cells:
                continue
            yield {_column_name(header, index): value for index, value in enumerate(cells)}
    except csv.Error as error:
        raise CsvRelayIngestError(
            f"Failed to parse CSV at line {reader.line_num}: {error}. "
            "Fix the CSV syntax and re-upload the file."
        ) from error


def _column_name(header: list[str], index: int) -> str:
    if index < len(header):
        return header[index]
    return f"_{index}"

"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

from typing import Iterator, Optional

import boto3
from botocore.exceptions import ClientError

try:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import GetObjectOutputTypeDef, HeadObjectOutputTypeDef
except ImportError:
    ...

DEFAULT_MAX_KEYS = 1000
MISSING_OBJECT_ERROR_CODES = {"404", "NoSuchKey", "NotFound"}


def _is_missing(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in MISSING_OBJECT_ERROR_CODES


def iter_s3_object_keys(
    bucket_name: str,
    prefix: str = "",
    max_keys: int = DEFAULT_MAX_KEYS,
    s3_client: Optional["S3Client"] = None,
) -> Iterator[str]:
    """
    Yield every object key in a bucket, following continuation tokens.

    :param bucket_name: The name of the S3 bucket.
    :param prefix: Only keys starting with this prefix are returned.
    :param max_keys: Page size used for each ``ListObjectsV2`` call.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    """
    s3_client = s3_client or boto3.client("s3")
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(
        Bucket=bucket_name,
        Prefix=prefix,
        PaginationConfig={"PageSize": max_keys},
    )
    for page in pages:
        for obj in page.get("Contents", []):
            yield obj["Key"]


def head_s3_object(
    bucket_name: str,
    object_key: str,
    s3_client: Optional["S3Client"] = None,
) -> Optional["HeadObjectOutputTypeDef"]:
    """
    Fetch the metadata of an object without its body.

    :return: The ``HeadObject`` response, or ``None`` if the key does not exist.
    """
    s3_client = s3_client or boto3.client("s3")
    try:
        return s3_client.head_object(Bucket=bucket_name, Key=object_key)
    except ClientError as e:
        if _is_missing(e):
            return None
        raise


def fetch_s3_object(
    bucket_name: str,
    object_key: str,
    s3_client: Optional["S3Client"] = None,
) -> Optional["GetObjectOutputTypeDef"]:
    """
    Fetch an object, body included.

    :return: The ``GetObject`` response whose ``Body`` is a streaming body,
        or ``None`` if the key does not exist.
    """
    s3_client = s3_client or boto3.client("s3")
    try:
        return s3_client.get_object(Bucket=bucket_name, Key=object_key)
    except ClientError as e:
        if _is_missing(e):
            return None
        raise


def bucket_exists(bucket_name: str, s3_client: Optional["S3Client"] = None) -> bool:
    """Check whether a bucket exists and is reachable with the current credentials."""
    s3_client = s3_client or boto3.client("s3")
    try:
        s3_client.head_bucket(Bucket=bucket_name)
        return True
    except ClientError as e:
        if _is_missing(e) or e.response.get("Error", {}).get("Code") == "NoSuchBucket":
            return False
        raise

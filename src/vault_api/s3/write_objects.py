"""Functions for writing objects to an S3 bucket--the "C" in CRUD."""

from typing import Dict, Optional

import boto3

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...


def upload_s3_object(
    bucket_name: str,
    object_key: str,
    file_content: bytes,
    content_type: Optional[str] = None,
    metadata: Optional[Dict[str, str]] = None,
    s3_client: Optional["S3Client"] = None,
) -> dict:
    """
    Upload a file to an S3 bucket.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param file_content: The content of the file to upload.
    :param content_type: The MIME type of the file, e.g. "text/plain" for a text file.
    :param metadata: Custom ``x-amz-meta-*`` metadata. Values must be ASCII.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    :return: The ``PutObject`` response, which carries the new ``ETag``.
    """
    content_type = content_type or "application/octet-stream"
    s3_client = s3_client or boto3.client("s3")
    return s3_client.put_object(
        Bucket=bucket_name,
        Key=object_key,
        Body=file_content,
        ContentType=content_type,
        Metadata=metadata or {},
    )


def create_s3_bucket(
    bucket_name: str,
    region: Optional[str] = None,
    s3_client: Optional["S3Client"] = None,
) -> None:
    """
    Create a bucket. ``us-east-1`` must not be sent as a location constraint.

    :param bucket_name: The name of the S3 bucket.
    :param region: Region to create the bucket in.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    """
    s3_client = s3_client or boto3.client("s3")
    if region and region != "us-east-1":
        s3_client.create_bucket(
            Bucket=bucket_name,
            CreateBucketConfiguration={"LocationConstraint": region},
        )
    else:
        s3_client.create_bucket(Bucket=bucket_name)

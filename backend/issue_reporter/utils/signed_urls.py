"""Utilities for generating presigned S3 URLs for issue photos."""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Literal
from uuid import UUID, uuid4

import boto3
from botocore.client import Config

from issue_reporter.core.config import settings

PresignMethod = Literal["get_object", "put_object"]

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _s3_client():
    return boto3.client(
        "s3",
        region_name=settings.AWS_REGION,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
        config=Config(signature_version="s3v4"),
    )


def photo_object_key(user_id: UUID, filename: str) -> str:
    """
    Build a unique object key for a reporter's photo.

    Keys look like ``<prefix>/<user_id>/<uuid>_<sanitised filename>``.
    """
    safe_name = _UNSAFE_CHARS.sub("_", filename.rsplit("/", 1)[-1]).strip("._") or "photo"
    return f"{settings.PHOTO_UPLOAD_PREFIX}/{user_id}/{uuid4().hex}_{safe_name}"


def generate_presigned_url(
    key: str,
    method: PresignMethod,
    expires_in: int = 900,
    content_type: str | None = None,
    bucket: str | None = None,
) -> str:
    bucket_name = bucket or settings.S3_BUCKET_NAME
    if not bucket_name:
        raise ValueError("S3 bucket name is not configured")

    client = _s3_client()
    params: dict[str, str] = {"Bucket": bucket_name, "Key": key}
    if method == "put_object" and content_type:
        params["ContentType"] = content_type

    return client.generate_presigned_url(
        ClientMethod=method,
        Params=params,
        ExpiresIn=expires_in,
    )


def generate_presigned_put(
    key: str,
    expires: timedelta = timedelta(minutes=15),
    content_type: str | None = None,
) -> str:
    return generate_presigned_url(
        key=key,
        method="put_object",
        expires_in=int(expires.total_seconds()),
        content_type=content_type,
    )


def generate_presigned_get(
    key: str,
    expires: timedelta = timedelta(minutes=15),
) -> str:
    return generate_presigned_url(
        key=key,
        method="get_object",
        expires_in=int(expires.total_seconds()),
    )

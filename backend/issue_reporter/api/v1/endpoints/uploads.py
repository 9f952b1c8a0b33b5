"""Presigned upload URLs for issue photos."""

from datetime import timedelta
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from issue_reporter.core.access import AccessDeniedError, Principal, View
from issue_reporter.core.config import settings
from issue_reporter.core.security import require_view
from issue_reporter.utils.signed_urls import (
    generate_presigned_get,
    generate_presigned_put,
    photo_object_key,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class PresignRequest(BaseModel):
    filename: str = Field("photo.jpg", min_length=1, max_length=255)
    mode: str = Field("put", pattern="^(put|get)$")
    key: str | None = Field(None, description="Existing object key, required for mode=get")
    content_type: str | None = Field(None, pattern="^image/[A-Za-z0-9.+-]+$")
    ttl_seconds: int = Field(900, ge=60, le=3600)


class PresignResponse(BaseModel):
    url: str
    key: str


@router.post("/presign", response_model=PresignResponse)
async def create_presigned_url(
    request: PresignRequest,
    principal: Principal = Depends(require_view(View.REPORT_ISSUE)),
):
    """
    Presign an S3 URL for a report photo.

    ``put`` mints a fresh key under the caller's prefix; ``get`` is limited to
    keys under that prefix unless the caller is an admin.
    """
    ttl = timedelta(seconds=request.ttl_seconds)
    if request.mode == "put":
        key = photo_object_key(principal.user_id, request.filename)
    else:
        if not request.key:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="key is required for mode=get",
            )
        own_prefix = f"{settings.PHOTO_UPLOAD_PREFIX}/{principal.user_id}/"
        if not request.key.startswith(own_prefix) and not principal.is_admin:
            raise AccessDeniedError(principal, "another user's upload")
        key = request.key

    try:
        if request.mode == "put":
            url = generate_presigned_put(key=key, expires=ttl, content_type=request.content_type)
        else:
            url = generate_presigned_get(key=key, expires=ttl)
    except ValueError as exc:
        logger.error("Photo upload storage misconfigured: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Photo uploads are not configured",
        )
    if not url:
        raise HTTPException(status_code=500, detail="Failed to generate presigned URL")
    return PresignResponse(url=url, key=key)

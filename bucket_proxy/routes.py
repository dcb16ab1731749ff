"""
Read-only routes exposed by the proxy.

``/health`` is declared first so it is matched before the ``/{bucket}`` route.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from .access import get_store, require_public_bucket
from .listing import list_bucket
from .models import BucketListing, ErrorResponse, HealthStatus
from .objects import fetch_object
from .store import ObjectStore

router = APIRouter(tags=["public-buckets"])

ERROR_RESPONSES = {
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("/health", response_model=HealthStatus)
async def health_check():
    return {"status": "ok"}


@router.get(
    "/{bucket}",
    response_model=BucketListing,
    responses={403: ERROR_RESPONSES[403], 500: ERROR_RESPONSES[500]},
    dependencies=[Depends(require_public_bucket)],
)
async def get_bucket_listing(
    bucket: str,
    prefix: str = "",
    store: ObjectStore = Depends(get_store),
) -> BucketListing:
    """List every object under ``prefix`` in an allow-listed bucket."""
    return await list_bucket(store, bucket, prefix)


@router.get(
    "/{bucket}/{key:path}",
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_public_bucket)],
)
async def get_object(
    bucket: str,
    key: str,
    store: ObjectStore = Depends(get_store),
):
    """Stream an object from an allow-listed bucket."""
    return await fetch_object(store, bucket, key)

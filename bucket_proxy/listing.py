"""
Prefix listing for an allow-listed bucket.
"""
from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import List, Optional

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool

from .models import BucketListing, ObjectEntry
from .store import ListingEntry, ObjectStore, StoreError

logger = logging.getLogger(__name__)

LIST_ERROR_MESSAGE = "Error al listar objetos"


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render ``value`` as UTC with millisecond precision, e.g. ``2024-01-01T12:00:00.000Z``."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def to_entry(item: ListingEntry) -> ObjectEntry:
    return ObjectEntry(
        name=item.name,
        size=item.size,
        last_modified=format_timestamp(item.last_modified),
        etag=item.etag,
    )


def collect_listing(store: ObjectStore, bucket: str, prefix: str = "") -> BucketListing:
    """
    Drain the store enumeration into a single listing.

    Any failure discards what was accumulated so far; a partial listing is
    never returned.
    """
    objects: List[ObjectEntry] = []
    try:
        for item in store.iter_objects(bucket, prefix):
            objects.append(to_entry(item))
    except StoreError as exc:
        logger.error(
            "Error listing objects in %s with prefix %r after %s entries: %s",
            bucket,
            prefix,
            len(objects),
            exc.cause,
        )
        raise HTTPException(status_code=500, detail=LIST_ERROR_MESSAGE)

    logger.info("Listed %s objects in %s with prefix %r", len(objects), bucket, prefix)
    return BucketListing(bucket=bucket, prefix=prefix, objects=objects)


async def list_bucket(store: ObjectStore, bucket: str, prefix: str = "") -> BucketListing:
    return await run_in_threadpool(collect_listing, store, bucket, prefix)

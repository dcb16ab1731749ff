"""
Object fetch: metadata lookup followed by a streamed relay of the content.

Headers are fixed from the metadata query before the first body byte is sent,
so a stream failure can only be turned into a JSON error while nothing has
been written yet. After that point the failure is logged and re-raised, which
makes the server drop the connection.
"""
from __future__ import annotations

import logging
from typing import AsyncIterator

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from .store import (
    ObjectNotFound,
    ObjectStore,
    ObjectStream,
    StoreError,
    TransferFailure,
)

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=31536000"
CHUNK_SIZE = 64 * 1024

NOT_FOUND_MESSAGE = "Archivo no encontrado"
FETCH_ERROR_MESSAGE = "Error al obtener el archivo"
STREAM_ERROR_MESSAGE = "Error al transmitir el archivo"


def quote_etag(etag: str) -> str:
    if not etag or (etag.startswith('"') and etag.endswith('"')) or etag.startswith('W/'):
        return etag
    return f'"{etag}"'


async def relay(stream: ObjectStream, first_chunk: bytes) -> AsyncIterator[bytes]:
    """Yield ``first_chunk`` and then the rest of ``stream`` as it is read."""
    try:
        chunk = first_chunk
        while chunk:
            yield chunk
            chunk = await run_in_threadpool(stream.read, CHUNK_SIZE)
    except TransferFailure as exc:
        logger.error(
            "Error streaming object %s/%s after headers were sent: %s",
            stream.bucket,
            stream.key,
            exc.cause,
        )
        raise
    finally:
        stream.close()


async def fetch_object(store: ObjectStore, bucket: str, key: str) -> StreamingResponse:
    if not key:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)

    try:
        stat = await run_in_threadpool(store.stat_object, bucket, key)
        stream = await run_in_threadpool(store.open_object, bucket, key)
    except ObjectNotFound:
        logger.info("Object %s/%s not found", bucket, key)
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except StoreError as exc:
        logger.error("Error getting object %s/%s: %s", bucket, key, exc.cause)
        raise HTTPException(status_code=500, detail=FETCH_ERROR_MESSAGE)

    try:
        first_chunk = await run_in_threadpool(stream.read, CHUNK_SIZE)
    except TransferFailure as exc:
        stream.close()
        logger.error("Error streaming object %s/%s: %s", bucket, key, exc.cause)
        raise HTTPException(status_code=500, detail=STREAM_ERROR_MESSAGE)

    # Passed as a header so Starlette keeps text/* types without a charset.
    headers = {
        "Content-Type": stat.content_type,
        "Content-Length": str(stat.size),
        "ETag": quote_etag(stat.etag),
        "Cache-Control": CACHE_CONTROL,
    }
    return StreamingResponse(relay(stream, first_chunk), headers=headers)

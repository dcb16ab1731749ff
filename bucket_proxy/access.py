"""
Bucket allow-list gate and the request-scoped dependencies it relies on.
"""
import logging

from fastapi import Depends, HTTPException, Request

from .config import GatewaySettings
from .store import ObjectStore

logger = logging.getLogger(__name__)

FORBIDDEN_MESSAGE = "Bucket no permitido"


def get_settings(request: Request) -> GatewaySettings:
    return request.app.state.settings


def get_store(request: Request) -> ObjectStore:
    return request.app.state.store


def require_public_bucket(
    bucket: str,
    settings: GatewaySettings = Depends(get_settings),
) -> str:
    """Reject the request with 403 unless ``bucket`` is allow-listed."""
    if not settings.is_public(bucket):
        logger.warning("Rejected request for non-public bucket %s", bucket)
        raise HTTPException(status_code=403, detail=FORBIDDEN_MESSAGE)
    return bucket

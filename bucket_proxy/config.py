"""
Centralized configuration for the public bucket proxy.

Environment variables are read once at startup into an immutable
``GatewaySettings`` object that is handed to the app factory. Documented
defaults match the in-cluster MinIO deployment; local runs should override
the endpoint and credentials.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from typing import FrozenSet, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "minio.minio-system.svc.cluster.local"
DEFAULT_STORE_PORT = 9000
DEFAULT_REGION = "us-east-1"
DEFAULT_PUBLIC_BUCKETS = ("material-didactico", "papeleria-fotos-productos")
DEFAULT_LISTEN_PORT = 3000
DEFAULT_HOST = "0.0.0.0"


def parse_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_port(value: Optional[str], default: int, name: str) -> int:
    if not value:
        return default
    try:
        port = int(value)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, value, default)
        return default
    if port <= 0:
        logger.warning("Ignoring invalid %s=%r, using %s", name, value, default)
        return default
    return port


def parse_log_level(value: Optional[str], default: str = "INFO") -> str:
    if not value:
        return default
    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Ignoring unknown LOG_LEVEL=%r, using %s", value, default)
        return default
    return level


@dataclass(frozen=True)
class GatewaySettings:
    """Store connection parameters plus the read-only bucket allow-list."""

    endpoint: str = DEFAULT_ENDPOINT
    store_port: int = DEFAULT_STORE_PORT
    use_ssl: bool = False
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = DEFAULT_REGION
    public_buckets: FrozenSet[str] = field(
        default_factory=lambda: frozenset(DEFAULT_PUBLIC_BUCKETS)
    )
    listen_port: int = DEFAULT_LISTEN_PORT
    host: str = DEFAULT_HOST
    allowed_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    @property
    def endpoint_url(self) -> str:
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.endpoint}:{self.store_port}"

    def is_public(self, bucket: str) -> bool:
        return bucket in self.public_buckets

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewaySettings":
        """
        Build settings from ``environ`` (defaults to ``os.environ``).

        PUBLIC_BUCKETS falls back to the two default buckets only when unset;
        an explicitly empty value yields an empty allow-list.
        """
        env = os.environ if environ is None else environ

        raw_buckets = env.get("PUBLIC_BUCKETS")
        if raw_buckets is None:
            buckets = frozenset(DEFAULT_PUBLIC_BUCKETS)
        else:
            buckets = frozenset(parse_list(raw_buckets))

        origins = tuple(parse_list(env.get("ALLOWED_ORIGINS"))) or ("*",)

        return cls(
            endpoint=env.get("MINIO_ENDPOINT") or DEFAULT_ENDPOINT,
            store_port=parse_port(env.get("MINIO_PORT"), DEFAULT_STORE_PORT, "MINIO_PORT"),
            use_ssl=env.get("MINIO_USE_SSL") == "true",
            access_key=env.get("MINIO_ACCESS_KEY") or None,
            secret_key=env.get("MINIO_SECRET_KEY") or None,
            region=env.get("MINIO_REGION") or DEFAULT_REGION,
            public_buckets=buckets,
            listen_port=parse_port(env.get("PORT"), DEFAULT_LISTEN_PORT, "PORT"),
            host=env.get("HOST") or DEFAULT_HOST,
            allowed_origins=origins,
            log_level=parse_log_level(env.get("LOG_LEVEL")),
        )

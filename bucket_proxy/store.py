"""
Store-facing collaborator wrapping the boto3 S3 client.

The HTTP layer only sees the dataclasses and ``StoreError`` subclasses defined
here; botocore error shapes never leave this module. Every method is blocking
(boto3 is synchronous), so callers run them in the threadpool.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Dict, Iterator, Optional

from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
NOT_FOUND_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


@dataclass(frozen=True)
class ObjectStat:
    size: int
    content_type: str
    etag: str
    last_modified: Optional[datetime] = None


@dataclass(frozen=True)
class ListingEntry:
    name: str
    size: int
    last_modified: Optional[datetime]
    etag: str


class StoreError(Exception):
    """Base class for failures reported by :class:`ObjectStore`."""

    def __init__(self, bucket: str, key: str = "", cause: Optional[BaseException] = None):
        self.bucket = bucket
        self.key = key
        self.cause = cause
        target = f"{bucket}/{key}" if key else bucket
        message = f"{type(self).__name__} for {target}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ObjectNotFound(StoreError):
    pass


class TransferFailure(StoreError):
    """The content stream broke while bytes were being read."""


class InternalFailure(StoreError):
    """Any other store failure (metadata query, listing, connection)."""


def error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def translate_error(exc: Exception, bucket: str, key: str = "") -> StoreError:
    if isinstance(exc, ClientError) and error_code(exc) in NOT_FOUND_CODES:
        return ObjectNotFound(bucket, key, exc)
    return InternalFailure(bucket, key, exc)


class ObjectStream:
    """
    Finite byte producer over a boto3 ``StreamingBody``.

    ``read`` returns ``b""`` once the body is exhausted. Read errors surface
    as :class:`TransferFailure`.
    """

    def __init__(self, bucket: str, key: str, body: Any):
        self.bucket = bucket
        self.key = key
        self._body = body
        self._closed = False

    def read(self, amt: int) -> bytes:
        try:
            return self._body.read(amt)
        except Exception as exc:
            raise TransferFailure(self.bucket, self.key, exc) from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._body.close()
        except Exception:  # pragma: no cover - close failures are not actionable
            logger.debug("Error closing stream for %s/%s", self.bucket, self.key, exc_info=True)

    @property
    def closed(self) -> bool:
        return self._closed


class ObjectStore:
    """Read-only view of an S3-compatible store."""

    def __init__(self, client: Any, page_size: int = 1000):
        self._client = client
        self._page_size = page_size

    def stat_object(self, bucket: str, key: str) -> ObjectStat:
        try:
            response = self._client.head_object(Bucket=bucket, Key=key)
        except Exception as exc:
            raise translate_error(exc, bucket, key) from exc
        return ObjectStat(
            size=int(response.get("ContentLength", 0)),
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
            etag=response.get("ETag", ""),
            last_modified=response.get("LastModified"),
        )

    def open_object(self, bucket: str, key: str) -> ObjectStream:
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
        except Exception as exc:
            raise translate_error(exc, bucket, key) from exc
        return ObjectStream(bucket, key, response["Body"])

    def iter_objects(self, bucket: str, prefix: str = "") -> Iterator[ListingEntry]:
        """
        Lazily yield every object under ``prefix``, following continuation
        tokens until the store reports the listing is complete.

        The generator is finite and single-use. Failures on any page raise
        :class:`InternalFailure` from the point of iteration.
        """
        continuation_token = None
        while True:
            params: Dict[str, Any] = {
                "Bucket": bucket,
                "Prefix": prefix,
                "MaxKeys": self._page_size,
            }
            if continuation_token:
                params["ContinuationToken"] = continuation_token
            try:
                response = self._client.list_objects_v2(**params)
            except Exception as exc:
                raise InternalFailure(bucket, prefix, exc) from exc

            for obj in response.get("Contents", []):
                yield ListingEntry(
                    name=obj["Key"],
                    size=obj["Size"],
                    last_modified=obj.get("LastModified"),
                    etag=obj.get("ETag", "").strip('"'),
                )

            continuation_token = response.get("NextContinuationToken")
            if not response.get("IsTruncated") or not continuation_token:
                break

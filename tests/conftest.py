import io
from datetime import datetime, timezone

import anyio
import httpx
import pytest
from botocore.exceptions import ClientError

from bucket_proxy.config import GatewaySettings
from bucket_proxy.main import create_app
from bucket_proxy.store import ObjectStore

PUBLIC_BUCKET = "public-assets"
LAST_MODIFIED = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FailingBody:
    """Streaming body that returns ``chunks`` and then raises ``exc``."""

    def __init__(self, chunks, exc):
        self._chunks = list(chunks)
        self._exc = exc
        self.closed = False

    def read(self, amt=None):
        if self._chunks:
            return self._chunks.pop(0)
        raise self._exc

    def close(self):
        self.closed = True


class StubClient:
    def __init__(self):
        self.objects = {}
        self.calls = []
        self.bodies = []
        self.head_error = None
        self.get_body = None
        self.fail_list_on_page = None

    def put(self, bucket, key, data, content_type="binary/octet-stream", etag=None):
        self.objects[(bucket, key)] = {
            "data": data,
            "content_type": content_type,
            "etag": etag if etag is not None else f'"etag-{key}"',
        }

    def head_object(self, Bucket, Key):
        self.calls.append(("head_object", Bucket, Key))
        if self.head_error is not None:
            raise self.head_error
        obj = self.objects.get((Bucket, Key))
        if obj is None:
            raise client_error("404", "HeadObject")
        return {
            "ContentLength": len(obj["data"]),
            "ContentType": obj["content_type"],
            "ETag": obj["etag"],
            "LastModified": LAST_MODIFIED,
        }

    def get_object(self, Bucket, Key):
        self.calls.append(("get_object", Bucket, Key))
        obj = self.objects.get((Bucket, Key))
        if obj is None:
            raise client_error("NoSuchKey", "GetObject")
        body = self.get_body if self.get_body is not None else io.BytesIO(obj["data"])
        self.bodies.append(body)
        return {"Body": body, "ContentType": obj["content_type"], "ETag": obj["etag"]}

    def list_objects_v2(self, Bucket, Prefix="", MaxKeys=1000, ContinuationToken=None):
        self.calls.append(("list_objects_v2", Bucket, Prefix))
        page_number = sum(1 for call in self.calls if call[0] == "list_objects_v2")
        if self.fail_list_on_page == page_number:
            raise client_error("InternalError", "ListObjectsV2")
        keys = sorted(
            key for (bucket, key) in self.objects if bucket == Bucket and key.startswith(Prefix)
        )
        start = int(ContinuationToken or 0)
        page = keys[start:start + MaxKeys]
        response = {
            "Contents": [
                {
                    "Key": key,
                    "Size": len(self.objects[(Bucket, key)]["data"]),
                    "LastModified": LAST_MODIFIED,
                    "ETag": self.objects[(Bucket, key)]["etag"],
                }
                for key in page
            ],
            "IsTruncated": start + MaxKeys < len(keys),
            "KeyCount": len(page),
        }
        if response["IsTruncated"]:
            response["NextContinuationToken"] = str(start + MaxKeys)
        return response


class UnreachableClient:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise ConnectionError("store unreachable")

        return fail


@pytest.fixture()
def settings():
    return GatewaySettings(public_buckets=frozenset({PUBLIC_BUCKET}))


@pytest.fixture()
def stub_backend():
    return StubClient()


@pytest.fixture()
def client(settings, stub_backend):
    app = create_app(settings, ObjectStore(stub_backend, page_size=2))
    transport = httpx.ASGITransport(app=app)
    async_client = httpx.AsyncClient(transport=transport, base_url="http://testserver")
    yield async_client
    anyio.run(async_client.aclose)

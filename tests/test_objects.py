import logging

import anyio
import pytest

from bucket_proxy import objects, store

from conftest import FailingBody


def test_relay_failure_after_headers_is_logged_and_reraised(caplog):
    body = FailingBody([b"second"], ConnectionError("connection reset"))
    stream = store.ObjectStream("public-assets", "videos/intro.mp4", body)

    async def consume():
        received = []
        with pytest.raises(store.TransferFailure):
            async for chunk in objects.relay(stream, b"first"):
                received.append(chunk)
        return received

    with caplog.at_level(logging.ERROR, logger="bucket_proxy.objects"):
        received = anyio.run(consume)

    assert received == [b"first", b"second"]
    assert body.closed
    assert "public-assets/videos/intro.mp4" in caplog.text
    assert "connection reset" in caplog.text


def test_relay_closes_stream_when_consumer_stops_early():
    body = FailingBody([b"b", b"c"], AssertionError("should not read past close"))
    stream = store.ObjectStream("public-assets", "k", body)

    async def consume_one():
        generator = objects.relay(stream, b"a")
        first = await generator.__anext__()
        await generator.aclose()
        return first

    assert anyio.run(consume_one) == b"a"
    assert body.closed


def test_relay_empty_object_yields_nothing():
    body = FailingBody([], AssertionError("should not be read"))
    stream = store.ObjectStream("public-assets", "empty", body)

    async def consume():
        return [chunk async for chunk in objects.relay(stream, b"")]

    assert anyio.run(consume) == []
    assert body.closed


@pytest.mark.parametrize(
    "etag, expected",
    [
        ("abc123", '"abc123"'),
        ('"abc123"', '"abc123"'),
        ('W/"weak"', 'W/"weak"'),
        ("", ""),
    ],
)
def test_quote_etag(etag, expected):
    assert objects.quote_etag(etag) == expected

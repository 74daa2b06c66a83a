import httpx
import pytest

from reel.storage.s3 import S3Handle

BODY = bytes(range(200))


def serve_ranges(request: httpx.Request) -> httpx.Response:
    start, end = request.headers["Range"].removeprefix("bytes=").split("-")
    return httpx.Response(206, content=BODY[int(start) : int(end) + 1])


@pytest.mark.anyio
async def test_reads_are_ranged_gets() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Range"])
        return serve_ranges(request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        handle = S3Handle(client, "https://bucket.example/recording.webm", len(BODY))
        await handle.seek(150)
        assert await handle.read(30) == BODY[150:180]
        # clipped to the object size
        assert await handle.read(100) == BODY[180:]
        assert await handle.read(10) == b""
        await handle.aclose()

    assert seen == ["bytes=150-179", "bytes=180-199"]


@pytest.mark.anyio
async def test_read_error_propagates() -> None:
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as client:
        handle = S3Handle(client, "https://bucket.example/recording.webm", len(BODY))
        with pytest.raises(httpx.HTTPStatusError):
            await handle.read(10)


@pytest.mark.anyio
async def test_ignored_range_is_an_error() -> None:
    # a server that answers a ranged GET with the whole object
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Range"])
        return httpx.Response(200, content=BODY)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        handle = S3Handle(client, "https://bucket.example/recording.webm", len(BODY))
        await handle.seek(150)
        with pytest.raises(OSError):
            await handle.read(30)
        assert handle.position == 150

    assert seen == ["bytes=150-179"]

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from aioaws.s3 import S3Client, S3Config
from httpx import AsyncClient

from reel.storage import ObjectHandle, ObjectStorage


@dataclass
class S3Handle(ObjectHandle):
    """Each read is a ranged GET, so the handle holds no connection between reads."""

    client: AsyncClient
    url: str
    size: int
    position: int = 0

    async def seek(self, offset: int) -> None:
        self.position = offset

    async def read(self, n: int) -> bytes:
        if n <= 0 or self.position >= self.size:
            return b""
        end = min(self.position + n, self.size) - 1
        response = await self.client.get(self.url, headers={"Range": f"bytes={self.position}-{end}"})
        response.raise_for_status()
        if response.status_code != 206:
            # the server ignored Range and sent the whole object
            raise OSError(f"expected 206 for a ranged read, got {response.status_code}")
        self.position += len(response.content)
        return response.content

    async def aclose(self) -> None:
        pass


@dataclass
class S3Storage(ObjectStorage):
    client: AsyncClient
    access_key_id: str
    access_key_secret: str
    region: str
    bucket: str
    endpoint: str | None

    @classmethod
    @asynccontextmanager
    async def connect(
        cls,
        access_key_id: str,
        access_key_secret: str,
        region: str,
        bucket: str,
        endpoint: str | None = None,
    ) -> AsyncIterator[S3Storage]:
        async with AsyncClient() as client:
            yield cls(client, access_key_id, access_key_secret, region, bucket, endpoint)

    def _get_client(self) -> S3Client:
        return S3Client(
            self.client,
            S3Config(
                aws_access_key=self.access_key_id,
                aws_secret_key=self.access_key_secret,
                aws_region=self.region,
                aws_s3_bucket=self.bucket,
                aws_host=self.endpoint,
            ),
        )

    async def open(self, location: str) -> S3Handle | None:
        client = self._get_client()
        head = await self.client.head(client.signed_download_url(location, method="HEAD"))
        if head.status_code == 404:
            return None
        head.raise_for_status()
        # signed for long enough to cover a slow transfer
        url = client.signed_download_url(location, max_age=3600, method="GET")
        return S3Handle(self.client, url, int(head.headers["Content-Length"]))

    async def put(self, location: str, chunks: AsyncIterable[bytes]) -> int:
        # aioaws uploads a single body
        body = b"".join([chunk async for chunk in chunks])
        await self._get_client().upload(location, body)
        return len(body)

    async def delete(self, location: str) -> None:
        await self._get_client().delete(location)

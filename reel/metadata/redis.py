from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncIterator

from redis.asyncio import BlockingConnectionPool, Redis

from reel.metadata import MetadataStore, Recording


@dataclass
class RedisMetadataStore(MetadataStore):
    redis: Redis

    @classmethod
    @asynccontextmanager
    async def connect(cls, dsn: str) -> AsyncIterator[RedisMetadataStore]:
        pool = BlockingConnectionPool.from_url(dsn)  # type: ignore
        try:
            yield cls(Redis(connection_pool=pool))
        finally:
            await pool.aclose()

    async def lookup(self, id: str) -> Recording | None:
        raw = await self.redis.get(f"recording/{id}")  # type: ignore
        if raw is None:
            return None
        return Recording.loads(raw)

    async def add(self, filename: str, location: str, size: int, content_type: str) -> Recording:
        id = await self.redis.incr("recording:next-id")  # type: ignore
        recording = Recording(
            id=str(id),
            filename=filename,
            location=location,
            size=size,
            content_type=content_type,
            created_at=datetime.now(timezone.utc),
        )
        async with self.redis.pipeline(transaction=True) as pipe:  # type: ignore
            pipe.set(f"recording/{recording.id}", recording.dumps())
            pipe.zadd("recordings", {recording.id: recording.created_at.timestamp()})
            await pipe.execute()
        return recording

    async def list(self) -> list[Recording]:
        ids = await self.redis.zrevrange("recordings", 0, -1)  # type: ignore
        if not ids:
            return []
        rows = await self.redis.mget([f"recording/{id.decode()}" for id in ids])  # type: ignore
        return [Recording.loads(raw) for raw in rows if raw is not None]

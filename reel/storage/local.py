from __future__ import annotations

import logging
from collections.abc import AsyncIterable
from dataclasses import dataclass

import anyio
from anyio import AsyncFile

from reel.storage import ObjectHandle, ObjectStorage

logger = logging.getLogger(__name__)


@dataclass
class LocalHandle(ObjectHandle):
    file: AsyncFile[bytes]
    size: int

    async def seek(self, offset: int) -> None:
        await self.file.seek(offset)

    async def read(self, n: int) -> bytes:
        return await self.file.read(n)

    async def aclose(self) -> None:
        await self.file.aclose()


@dataclass
class LocalStorage(ObjectStorage):
    """Objects are plain files under `root`, addressed by their relative path."""

    root: anyio.Path

    @classmethod
    async def create(cls, root: str) -> LocalStorage:
        path = anyio.Path(root)
        await path.mkdir(parents=True, exist_ok=True)
        return cls(await path.resolve())

    async def _resolve(self, location: str) -> anyio.Path | None:
        path = await (self.root / location).resolve()
        if path != self.root and self.root not in path.parents:
            logger.warning("Refusing location %r outside of %s", location, self.root)
            return None
        return path

    async def open(self, location: str) -> LocalHandle | None:
        path = await self._resolve(location)
        if path is None:
            return None
        try:
            file = await anyio.open_file(path, "rb")
        except (FileNotFoundError, IsADirectoryError):
            return None
        try:
            size = (await path.stat()).st_size
        except BaseException:
            await file.aclose()
            raise
        return LocalHandle(file, size)

    async def put(self, location: str, chunks: AsyncIterable[bytes]) -> int:
        path = await self._resolve(location)
        if path is None:
            raise ValueError(f"Invalid location {location!r}")
        await path.parent.mkdir(parents=True, exist_ok=True)
        size = 0
        async with await anyio.open_file(path, "wb") as f:
            async for chunk in chunks:
                await f.write(chunk)
                size += len(chunk)
        return size

    async def delete(self, location: str) -> None:
        path = await self._resolve(location)
        if path is not None:
            await path.unlink(missing_ok=True)

from collections.abc import AsyncIterable
from typing import Protocol


class ObjectHandle(Protocol):
    """An open, seekable view of one stored object, owned by a single request."""

    size: int

    async def seek(self, offset: int) -> None: ...

    async def read(self, n: int) -> bytes: ...

    async def aclose(self) -> None: ...


class ObjectStorage(Protocol):
    async def open(self, location: str) -> ObjectHandle | None: ...

    async def put(self, location: str, chunks: AsyncIterable[bytes]) -> int: ...

    async def delete(self, location: str) -> None: ...

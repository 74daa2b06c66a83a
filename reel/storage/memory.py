from collections.abc import AsyncIterable
from dataclasses import dataclass, field

from reel.storage import ObjectHandle, ObjectStorage


@dataclass
class MemoryHandle(ObjectHandle):
    body: bytes
    position: int = 0
    closed: bool = False

    @property
    def size(self) -> int:  # type: ignore[override]
        return len(self.body)

    async def seek(self, offset: int) -> None:
        self.position = offset

    async def read(self, n: int) -> bytes:
        data = self.body[self.position : self.position + n]
        self.position += len(data)
        return data

    async def aclose(self) -> None:
        self.closed = True


@dataclass
class InMemoryStorage(ObjectStorage):
    storage: dict[str, bytes] = field(default_factory=dict)

    async def open(self, location: str) -> MemoryHandle | None:
        body = self.storage.get(location)
        if body is None:
            return None
        return MemoryHandle(body)

    async def put(self, location: str, chunks: AsyncIterable[bytes]) -> int:
        body = b"".join([chunk async for chunk in chunks])
        self.storage[location] = body
        return len(body)

    async def delete(self, location: str) -> None:
        self.storage.pop(location, None)

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol


@dataclass(frozen=True)
class Recording:
    id: str
    filename: str
    location: str
    size: int
    content_type: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "filepath": self.location,
            "filesize": self.size,
            "contentType": self.content_type,
            "createdAt": self.created_at.isoformat(),
        }

    def dumps(self) -> bytes:
        return json.dumps(self.to_dict()).encode()

    @classmethod
    def loads(cls, raw: bytes) -> Recording:
        data = json.loads(raw)
        return cls(
            id=data["id"],
            filename=data["filename"],
            location=data["filepath"],
            size=data["filesize"],
            content_type=data["contentType"],
            created_at=datetime.fromisoformat(data["createdAt"]),
        )


class MetadataStore(Protocol):
    async def lookup(self, id: str) -> Recording | None: ...

    async def add(self, filename: str, location: str, size: int, content_type: str) -> Recording: ...

    async def list(self) -> list[Recording]: ...

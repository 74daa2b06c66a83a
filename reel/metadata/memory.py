from dataclasses import dataclass, field
from datetime import datetime, timezone

from reel.metadata import MetadataStore, Recording


@dataclass
class MemoryMetadataStore(MetadataStore):
    recordings: dict[str, Recording] = field(default_factory=dict)

    async def lookup(self, id: str) -> Recording | None:
        return self.recordings.get(id)

    async def add(self, filename: str, location: str, size: int, content_type: str) -> Recording:
        recording = Recording(
            id=str(len(self.recordings) + 1),
            filename=filename,
            location=location,
            size=size,
            content_type=content_type,
            created_at=datetime.now(timezone.utc),
        )
        self.recordings[recording.id] = recording
        return recording

    async def list(self) -> list[Recording]:
        # insertion order breaks ties between equal timestamps
        ordered = list(self.recordings.values())
        ordered.reverse()
        return sorted(ordered, key=lambda r: r.created_at, reverse=True)

import logging
from dataclasses import dataclass

from reel.errors import IntegrityError, ObjectNotFound
from reel.metadata import MetadataStore, Recording
from reel.storage import ObjectHandle, ObjectStorage

logger = logging.getLogger(__name__)


@dataclass
class StoredObject:
    id: str
    total: int
    media_type: str
    handle: ObjectHandle


async def locate(object_id: str, metadata: MetadataStore, storage: ObjectStorage) -> StoredObject:
    """Resolve a recording to an open handle over its bytes.

    The caller owns the returned handle and must close it. Missing metadata and
    missing content both raise `ObjectNotFound`; a length disagreement between the
    two raises `IntegrityError` after the handle has been closed.
    """
    recording: Recording | None = await metadata.lookup(object_id)
    if recording is None:
        logger.debug("No metadata for recording %s", object_id)
        raise ObjectNotFound(object_id)
    handle = await storage.open(recording.location)
    if handle is None:
        logger.warning(
            "Recording %s is registered at %s but its content is missing from storage",
            object_id,
            recording.location,
        )
        raise ObjectNotFound(object_id)
    if handle.size != recording.size:
        await handle.aclose()
        logger.error(
            "Recording %s: metadata says %d bytes, storage has %d",
            object_id,
            recording.size,
            handle.size,
        )
        raise IntegrityError(object_id, recording.size, handle.size)
    return StoredObject(object_id, recording.size, recording.content_type, handle)

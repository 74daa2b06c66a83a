import logging
import os
import random
from collections.abc import AsyncIterator
from dataclasses import dataclass
from time import time
from typing import Annotated, Any

import anyio
from fastapi import APIRouter, File, Header, HTTPException, Path, Request, Response, UploadFile
from fastapi.responses import JSONResponse

from reel.depends import Injected
from reel.errors import IntegrityError, ObjectNotFound, UploadTooLarge
from reel.locator import locate
from reel.metadata import MetadataStore
from reel.plan import plan_transfer
from reel.ranges import MalformedRange, parse_range
from reel.storage import ObjectStorage
from reel.transfer import DEFAULT_CHUNK_SIZE, TransferResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass
class Config:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    media_type: str = "video/webm"
    max_upload_size: int = 50 * 1024 * 1024
    # reject malformed Range headers with 400 instead of sending the whole object
    strict_ranges: bool = False
    storage_root: str = "uploads"
    redis_url: str | None = None
    s3_bucket: str | None = None

    @classmethod
    def from_env(cls) -> "Config":
        env = os.environ
        return cls(
            chunk_size=int(env.get("REEL_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)),
            media_type=env.get("REEL_MEDIA_TYPE", "video/webm"),
            max_upload_size=int(env.get("REEL_MAX_UPLOAD_SIZE", 50 * 1024 * 1024)),
            strict_ranges=env.get("REEL_STRICT_RANGES", "").lower() in ("1", "true", "yes"),
            storage_root=env.get("REEL_STORAGE_ROOT", "uploads"),
            redis_url=env.get("REEL_REDIS_URL") or None,
            s3_bucket=env.get("REEL_S3_BUCKET") or None,
        )


@router.get("/health")
async def health() -> Response:
    return Response(status_code=200)


@router.api_route("/objects/{object_id}", methods=["GET", "HEAD"])
@router.api_route("/api/recordings/{object_id}", methods=["GET", "HEAD"])
async def download_object(
    request: Request,
    object_id: Annotated[str, Path()],
    metadata: Injected[MetadataStore],
    storage: Injected[ObjectStorage],
    config: Injected[Config],
    range: Annotated[str | None, Header()] = None,
) -> Response:
    try:
        stored = await locate(object_id, metadata, storage)
    except ObjectNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except IntegrityError:
        raise HTTPException(status_code=500, detail="Recording content is inconsistent")

    # the handle is ours until the response takes it over
    try:
        result = parse_range(range, stored.total)
        if config.strict_ranges and isinstance(result, MalformedRange):
            raise HTTPException(status_code=400, detail="Invalid range header")
        plan = plan_transfer(result, stored.total)
        logger.debug("Serving recording %s with %r", object_id, plan)
        return TransferResponse(
            stored,
            plan,
            chunk_size=config.chunk_size,
            send_body=request.method != "HEAD",
        )
    except BaseException:
        with anyio.CancelScope(shield=True):
            await stored.handle.aclose()
        raise


def _recording_filename() -> str:
    return f"recording-{int(time() * 1000)}-{random.randint(0, 10**9)}.webm"


async def _upload_chunks(upload: UploadFile, limit: int, chunk_size: int) -> AsyncIterator[bytes]:
    received = 0
    while chunk := await upload.read(chunk_size):
        received += len(chunk)
        if received > limit:
            raise UploadTooLarge(limit)
        yield chunk


@router.post("/api/recordings", status_code=201)
async def upload_recording(
    metadata: Injected[MetadataStore],
    storage: Injected[ObjectStorage],
    config: Injected[Config],
    video: Annotated[UploadFile | None, File()] = None,
) -> Response:
    if video is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    filename = _recording_filename()
    try:
        size = await storage.put(filename, _upload_chunks(video, config.max_upload_size, config.chunk_size))
    except UploadTooLarge as exc:
        await storage.delete(filename)
        raise HTTPException(status_code=413, detail=str(exc))
    content_type = video.content_type
    if not content_type or content_type == "application/octet-stream":
        content_type = config.media_type
    recording = await metadata.add(filename, filename, size, content_type)
    logger.info("Stored recording %s (%d bytes) at %s", recording.id, size, filename)
    return JSONResponse(
        status_code=201,
        content={"message": "Recording uploaded successfully", "recording": recording.to_dict()},
    )


@router.get("/api/recordings")
async def list_recordings(metadata: Injected[MetadataStore]) -> list[dict[str, Any]]:
    return [recording.to_dict() for recording in await metadata.list()]

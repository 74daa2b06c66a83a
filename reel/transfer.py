import logging

import anyio
import anyio.lowlevel
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from reel.errors import TransferError
from reel.locator import StoredObject
from reel.plan import TransferPlan, Unsatisfiable, body_interval, response_headers, response_status

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class TransferResponse(Response):
    """Streams the planned byte interval of a stored object.

    The response owns `stored.handle` from the moment it is called and closes it on
    every way out: a finished transfer, a client that went away, a storage read
    failure or cancellation. The body is streamed while another task waits on
    `receive` for `http.disconnect`; whichever finishes first cancels the other.

    Headers are committed before the first read, so a storage failure mid-body cannot
    turn into an error status. It is logged and `TransferError` is raised so the
    server drops the connection, leaving the client with fewer bytes than the
    announced `Content-Length`.
    """

    def __init__(
        self,
        stored: StoredObject,
        plan: TransferPlan,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        send_body: bool = True,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.stored = stored
        self.plan = plan
        self.chunk_size = chunk_size
        self.send_body = send_body and not isinstance(plan, Unsatisfiable)
        self.status_code = response_status(plan)
        self.background = None
        self.init_headers(response_headers(plan, stored.media_type))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        completed = False
        failure: TransferError | None = None
        try:
            async with anyio.create_task_group() as task_group:

                async def stream() -> None:
                    nonlocal completed, failure
                    try:
                        completed = await self._send_all(send)
                    except TransferError as exc:
                        failure = exc
                    task_group.cancel_scope.cancel()

                task_group.start_soon(stream)
                await self._listen_for_disconnect(receive)
                task_group.cancel_scope.cancel()
        finally:
            with anyio.CancelScope(shield=True):
                await self.stored.handle.aclose()
        if failure is not None:
            raise failure
        if completed and self.background is not None:
            await self.background()

    async def _listen_for_disconnect(self, receive: Receive) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                logger.debug("Client disconnected while receiving recording %s", self.stored.id)
                return

    async def _send_all(self, send: Send) -> bool:
        try:
            await send(
                {
                    "type": "http.response.start",
                    "status": self.status_code,
                    "headers": self.raw_headers,
                }
            )
            offset, length = body_interval(self.plan)
            if not self.send_body or length == 0:
                await send({"type": "http.response.body", "body": b"", "more_body": False})
                return True
            await self._stream(send, offset, length)
        except TransferError:
            raise
        except OSError:
            logger.debug("Client disconnected while receiving recording %s", self.stored.id)
            return False
        return True

    async def _read(self, n: int, position: int) -> bytes:
        handle = self.stored.handle
        try:
            chunk = await handle.read(n)
        except Exception as exc:
            logger.error(
                "Reading recording %s at offset %d failed: %s", self.stored.id, position, exc
            )
            raise TransferError(f"read failed at offset {position}") from exc
        if not chunk:
            logger.error(
                "Recording %s ended at offset %d, short of its %d bytes",
                self.stored.id,
                position,
                self.stored.total,
            )
            raise TransferError(f"unexpected end of data at offset {position}")
        if len(chunk) > n:
            logger.error(
                "Reading recording %s at offset %d returned %d bytes, %d were asked for",
                self.stored.id,
                position,
                len(chunk),
                n,
            )
            raise TransferError(f"over-long read at offset {position}")
        return chunk

    async def _stream(self, send: Send, offset: int, length: int) -> None:
        try:
            await self.stored.handle.seek(offset)
        except Exception as exc:
            logger.error("Seeking recording %s to %d failed: %s", self.stored.id, offset, exc)
            raise TransferError(f"seek to {offset} failed") from exc
        position = offset
        remaining = length
        while remaining > 0:
            chunk = await self._read(min(self.chunk_size, remaining), position)
            position += len(chunk)
            remaining -= len(chunk)
            await send({"type": "http.response.body", "body": chunk, "more_body": remaining > 0})
            # lets a disconnect cancel the loop even when neither side ever blocks
            await anyio.lowlevel.checkpoint()

import logging
import os
from contextlib import AsyncExitStack

import anyio
from fastapi import FastAPI

from reel.api import Config, router
from reel.depends import bind
from reel.metadata import MetadataStore
from reel.storage import ObjectStorage

logger = logging.getLogger(__name__)


def make_app(
    storage: ObjectStorage,
    metadata: MetadataStore,
    config: Config,
) -> FastAPI:
    app = FastAPI()
    app.include_router(router)
    bind(app, ObjectStorage, storage)
    bind(app, MetadataStore, metadata)
    bind(app, Config, config)
    return app


async def main() -> None:
    import uvicorn

    from reel.metadata.memory import MemoryMetadataStore
    from reel.metadata.redis import RedisMetadataStore
    from reel.storage.local import LocalStorage
    from reel.storage.s3 import S3Storage

    logging.basicConfig(
        level=os.environ.get("REEL_LOG_LEVEL", "INFO"),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    config = Config.from_env()

    async with AsyncExitStack() as stack:
        metadata: MetadataStore
        if config.redis_url:
            metadata = await stack.enter_async_context(RedisMetadataStore.connect(config.redis_url))
        else:
            # recordings are forgotten on restart
            metadata = MemoryMetadataStore()
        storage: ObjectStorage
        if config.s3_bucket:
            storage = await stack.enter_async_context(
                S3Storage.connect(
                    access_key_id=os.environ["AWS_ACCESS_KEY_ID"],
                    access_key_secret=os.environ["AWS_SECRET_ACCESS_KEY"],
                    region=os.environ.get("AWS_REGION", "us-east-1"),
                    bucket=config.s3_bucket,
                    endpoint=os.environ.get("REEL_S3_ENDPOINT"),
                )
            )
        else:
            storage = await LocalStorage.create(config.storage_root)
        logger.info("Serving recordings with %s and %s", type(storage).__name__, type(metadata).__name__)
        app = make_app(storage, metadata, config)

        server = uvicorn.Server(
            uvicorn.Config(app, host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
        )
        await server.serve()


def run() -> None:
    anyio.run(main)


if __name__ == "__main__":
    run()

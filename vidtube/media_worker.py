"""Background worker that retries deletes of orphaned media assets."""

import asyncio
import logging

from vidtube.config import get_settings
from vidtube.db.session import get_sessionmaker, init_models
from vidtube.logging import setup_logging
from vidtube.media import get_media_store, reconcile_orphaned_media

logger = logging.getLogger(__name__)

RECONCILE_INTERVAL_SECONDS = 3600  # Run reconciliation every hour


async def worker_loop(interval: float = RECONCILE_INTERVAL_SECONDS) -> None:
    """Reconcile orphaned media forever, one pass per ``interval``."""
    settings = get_settings()
    store = get_media_store(settings)
    await init_models()

    logger.info("Media reconciliation worker started")
    logger.info(f"Media backend: {settings.media_backend}")

    while True:
        try:
            async with get_sessionmaker()() as db:
                await reconcile_orphaned_media(db, store, settings.media_timeout_seconds)
        except Exception as e:
            logger.error(f"Unexpected error in worker loop: {e}", exc_info=True)

        await asyncio.sleep(interval)


def main():
    """Entry point for the media reconciliation worker."""
    setup_logging()
    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Worker shutting down...")


if __name__ == "__main__":
    main()

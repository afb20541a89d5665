"""Dev server launcher and local data helpers."""

import asyncio
import sys

import structlog

logger = structlog.get_logger(__name__)


def main() -> None:
    """Run the dev server."""
    from app.main import run

    run()


async def _reset_snapshot() -> None:
    from app.core.config import get_settings
    from app.persistence.record_store import RecordStore, empty_aggregate

    store = RecordStore(get_settings().storage)
    store.snapshot.ensure_directories()
    store.data = empty_aggregate()
    await store.save()
    logger.info("Snapshot reset", path=str(store.snapshot.snapshot_file))


def reset_data() -> None:
    """Replace the local snapshot with an empty one. Existing backups are kept."""
    from app.core.config import AppEnvironment, get_settings

    if get_settings().app.env == AppEnvironment.PROD:
        logger.error("Refusing to reset data with APP_ENV=prod")
        sys.exit(1)

    asyncio.run(_reset_snapshot())


if __name__ == "__main__":
    main()

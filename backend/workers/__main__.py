"""
Worker process entry point.

Connects the database, storage and queue from settings and runs the
file worker until SIGINT/SIGTERM. With --requeue-stale it instead
re-enqueues records stuck in UPLOADED and exits.

Dependencies: python-dotenv, backend.configs, backend.workers
System role: Standalone worker process
"""

import argparse
import asyncio
import logging
import signal
from datetime import timedelta

from dotenv import load_dotenv

from backend.application.services.ingestion_service import IngestionService
from backend.application.services.job_producer import FileJobProducer
from backend.boundary.db.connection import DatabaseConnection
from backend.boundary.queue.queue_factory import get_job_queue
from backend.boundary.storage.storage_factory import get_file_storage
from backend.configs import get_settings
from backend.observability.logger import configure_logging
from backend.workers.file_worker import build_file_worker

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="File processing worker")
    parser.add_argument(
        "--requeue-stale",
        type=float,
        metavar="SECONDS",
        default=None,
        help="Re-enqueue files still UPLOADED after SECONDS, then exit",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if settings.queue.backend == "memory":
        logger.warning(
            "%s:main - Memory queue is process-local; this worker will only see "
            "jobs it enqueues itself. Use WORKER_EMBEDDED=true on the API instead.",
            __name__,
        )

    database = DatabaseConnection(settings.database)
    await database.connect()
    storage = get_file_storage(settings.storage)
    queue = get_job_queue(settings.queue)

    try:
        if args.requeue_stale is not None:
            producer = FileJobProducer(
                queue, settings.queue.job_name, settings.queue.queue_name
            )
            async with database.session_factory() as db:
                service = IngestionService(
                    db, storage, producer, settings.storage.max_file_size_bytes
                )
                await service.requeue_stale_uploads(
                    timedelta(seconds=args.requeue_stale)
                )
            return

        worker = build_file_worker(settings, database.session_factory, storage, queue)
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, worker.stop)
            except NotImplementedError:
                # Windows event loops do not support signal handlers
                pass
        await worker.run()
    finally:
        await queue.close()
        await database.dispose()


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    asyncio.run(main())


if __name__ == "__main__":
    run()

#!/usr/bin/env python3
"""
Video Worker Startup Script
Starts worker processes that consume the video job queue.

Usage:
    python scripts/run_workers.py                    # One worker
    python scripts/run_workers.py --workers 4        # 4 worker processes
    python scripts/run_workers.py --check            # Check Redis and exit
"""

import argparse
import logging
import os
import sys
import signal
from multiprocessing import Process
from typing import List

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stitcher.core.config import settings
from stitcher.core.database import SessionLocal, engine, init_db
from stitcher.core.logging_config import configure_logging
from stitcher.core.redis import get_redis_manager, redis_health_check
from stitcher.services.fetcher import SourceFetcher
from stitcher.services.job_queue import JobQueue
from stitcher.services.job_store import JobStore
from stitcher.services.media import MediaPipeline
from stitcher.services.storage import StorageService
from stitcher.workers.consumer import VideoJobWorker
from stitcher.workers.processor import VideoJobProcessor


configure_logging()
logger = logging.getLogger("stitcher.worker")


def build_worker() -> VideoJobWorker:
    """Wire a worker with its own Redis and database handles."""
    queue = JobQueue(get_redis_manager().get_blocking_connection(), settings.VIDEO_QUEUE_NAME)
    processor = VideoJobProcessor(
        store=JobStore(SessionLocal),
        fetcher=SourceFetcher(timeout=settings.DOWNLOAD_TIMEOUT),
        media=MediaPipeline(timeout=settings.TRANSCODE_TIMEOUT),
        storage=StorageService(),
        scratch_root=settings.SCRATCH_DIR,
    )
    return VideoJobWorker(
        queue,
        processor,
        error_backoff=settings.WORKER_ERROR_BACKOFF,
        pop_timeout=settings.WORKER_POP_TIMEOUT,
    )


def start_worker(worker_name: str = "worker-main"):
    """
    Run a single worker until signalled.

    SIGINT/SIGTERM only set the stop flag. An idle worker exits once its
    current BRPOP wait ends; a worker holding a job finishes it first, so a
    popped payload is never abandoned.
    """
    worker = build_worker()

    def signal_handler(signum, frame):
        logger.info(f"{worker_name}: Received shutdown signal")
        worker.stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    logger.info(f"Worker {worker_name} starting on queue: {worker.queue.name}")
    try:
        worker.run()
    finally:
        worker.processor.fetcher.close()


def main():
    parser = argparse.ArgumentParser(description="Start video assembly workers")
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=1,
        help="Number of worker processes (default: 1)"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check Redis connection and exit"
    )

    args = parser.parse_args()

    # Health check only
    if args.check:
        health = redis_health_check()
        print(f"Redis Status: {health}")
        sys.exit(0 if health.get("connected") else 1)

    # Verify Redis connection
    logger.info("Checking Redis connection...")
    health = redis_health_check()

    if not health.get("connected"):
        logger.error(f"Cannot connect to Redis: {health.get('error')}")
        logger.error(f"Redis URL: {health.get('url')}")
        sys.exit(1)

    logger.info(f"Redis connected: {health.get('redis_version')}")
    init_db()
    # Workers open their own connections after fork
    engine.dispose()
    get_redis_manager().close()

    logger.info(f"Starting {args.workers} worker(s) on queue: {settings.VIDEO_QUEUE_NAME}")

    if args.workers == 1:
        # Single worker - run directly
        start_worker("worker-main")
    else:
        # Multiple workers - spawn processes
        processes: List[Process] = []

        def shutdown_all(signum, frame):
            logger.info("Shutting down all workers...")
            for p in processes:
                if p.is_alive():
                    p.terminate()

        signal.signal(signal.SIGTERM, shutdown_all)
        signal.signal(signal.SIGINT, shutdown_all)

        for i in range(args.workers):
            p = Process(
                target=start_worker,
                args=(f"worker-{i + 1}",),
                name=f"worker-{i + 1}"
            )
            p.start()
            processes.append(p)
            logger.info(f"Started worker process {i + 1}/{args.workers} (PID: {p.pid})")

        # Wait for all workers; each finishes its current job after SIGTERM
        for p in processes:
            p.join()


if __name__ == "__main__":
    main()

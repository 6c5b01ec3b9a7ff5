"""
Background workers module.

Async file processing fed by the job queue.

Dependencies: backend.boundary, backend.core, backend.configs
System role: Background task processing

Usage:
    python -m backend.workers
    python -m backend.workers --requeue-stale 600
"""

from backend.workers.file_worker import FileWorker, build_file_worker

__all__ = ["FileWorker", "build_file_worker"]

"""API-specific dependencies."""

# Re-export common dependencies
from .auth import get_current_user
from .dependencies import (
    get_file_storage,
    get_ingestion_service,
    get_job_producer,
    get_job_queue,
    get_query_service,
    get_settings_dependency,
)

__all__ = [
    "get_current_user",
    "get_file_storage",
    "get_ingestion_service",
    "get_job_producer",
    "get_job_queue",
    "get_query_service",
    "get_settings_dependency",
]

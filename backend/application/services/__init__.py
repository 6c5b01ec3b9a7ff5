"""Service orchestrators."""

from .ingestion_service import IngestionService
from .job_producer import FileJobProducer
from .query_service import FileQueryService

__all__ = [
    "FileJobProducer",
    "FileQueryService",
    "IngestionService",
]

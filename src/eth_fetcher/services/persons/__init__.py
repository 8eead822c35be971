"""Person info service module."""

from eth_fetcher.services.persons.schemas import (
    PersonCountResponse,
    PersonInfoEventRecord,
    PersonListResponse,
    PersonResponse,
    SavePersonRequest,
    SavePersonResponse,
    SubmissionOutcome,
    SubmissionStatus,
)
from eth_fetcher.services.persons.service import PersonInfoService

__all__ = [
    # Service
    "PersonInfoService",
    # Schemas
    "SubmissionOutcome",
    "SubmissionStatus",
    "SavePersonRequest",
    "SavePersonResponse",
    "PersonInfoEventRecord",
    "PersonListResponse",
    "PersonResponse",
    "PersonCountResponse",
]

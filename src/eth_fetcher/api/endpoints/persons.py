"""Person info API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from eth_fetcher.api.dependencies import DbSession, get_person_info_service
from eth_fetcher.services.persons import (
    PersonCountResponse,
    PersonInfoEventRecord,
    PersonInfoService,
    PersonListResponse,
    PersonResponse,
    SavePersonRequest,
    SavePersonResponse,
    SubmissionStatus,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Persons"])


@router.post("/savePerson", response_model=SavePersonResponse)
async def save_person(
    request: SavePersonRequest,
    response: Response,
    service: Annotated[PersonInfoService, Depends(get_person_info_service)],
) -> SavePersonResponse:
    """Store a person on-chain and wait for the transaction to be mined.

    txStatus is true only for a mined, successful transaction. A transaction
    still unconfirmed at the deadline is answered with 202 and its hash; it
    may yet be mined, so it must not be resubmitted blindly.
    """
    outcome = await service.save_person(request.name, request.age)
    if outcome.status == SubmissionStatus.UNCONFIRMED:
        response.status_code = status.HTTP_202_ACCEPTED
    return SavePersonResponse(
        tx_hash=outcome.tx_hash, tx_status=outcome.confirmed, status=outcome.status
    )


@router.get("/listPersons", response_model=PersonListResponse)
async def list_persons(
    session: DbSession,
    service: Annotated[PersonInfoService, Depends(get_person_info_service)],
) -> PersonListResponse:
    """List ingested PersonInfoUpdated events."""
    events = await service.list_persons(session)
    return PersonListResponse(
        persons=[PersonInfoEventRecord.model_validate(e) for e in events]
    )


@router.get("/persons/count", response_model=PersonCountResponse)
async def get_persons_count(
    service: Annotated[PersonInfoService, Depends(get_person_info_service)],
) -> PersonCountResponse:
    """Read the number of on-chain entries."""
    return PersonCountResponse(count=await service.get_count())


@router.get("/persons/{index}", response_model=PersonResponse)
async def get_person(
    service: Annotated[PersonInfoService, Depends(get_person_info_service)],
    index: int = Path(..., ge=0, description="Contract index"),
) -> PersonResponse:
    """Read the on-chain entry at an index."""
    name, age = await service.get_person(index)
    return PersonResponse(index=index, name=name, age=age)

"""Transaction lookup API endpoints."""

import logging
from typing import Annotated, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, status

from eth_fetcher.api.dependencies import DbSession, get_transaction_resolver
from eth_fetcher.core.errors import NotFoundError
from eth_fetcher.models.transaction import Transaction
from eth_fetcher.repositories.transaction import TransactionRepository
from eth_fetcher.repositories.user import UserRepository
from eth_fetcher.services.auth import CurrentUser, OptionalUser
from eth_fetcher.services.resolver import (
    TransactionListResponse,
    TransactionRecord,
    TransactionResolver,
    decode_rlp_hashes,
    normalize_hashes,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Transactions"])


def _to_response(records: Sequence[Transaction]) -> TransactionListResponse:
    return TransactionListResponse(
        transactions=[TransactionRecord.model_validate(r) for r in records]
    )


async def _resolve_for_user(
    hashes: list[str],
    resolver: TransactionResolver,
    session: DbSession,
    user: OptionalUser,
) -> TransactionListResponse:
    if not hashes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No transaction hashes provided",
        )

    records = await resolver.resolve_batch(hashes)

    if user is not None:
        try:
            await UserRepository(session).add_searched_transaction_ids(
                user.username, [r.id for r in records]
            )
        except NotFoundError:
            logger.warning(f"Token user {user.username} no longer exists")

    return _to_response(records)


@router.get("/eth", response_model=TransactionListResponse)
async def get_transactions(
    resolver: Annotated[TransactionResolver, Depends(get_transaction_resolver)],
    session: DbSession,
    user: OptionalUser,
    transaction_hashes: list[str] = Query(
        [], alias="transactionHashes", description="Transaction hashes, comma separated"
    ),
) -> TransactionListResponse:
    """Resolve transactions by hash.

    With a valid token, the results are remembered for the user.
    """
    hashes = normalize_hashes(transaction_hashes)
    return await _resolve_for_user(hashes, resolver, session, user)


@router.get("/eth/{rlphex}", response_model=TransactionListResponse)
async def get_transactions_rlp(
    rlphex: str,
    resolver: Annotated[TransactionResolver, Depends(get_transaction_resolver)],
    session: DbSession,
    user: OptionalUser,
) -> TransactionListResponse:
    """Resolve transactions from a hex-encoded RLP list of hashes."""
    hashes = normalize_hashes(decode_rlp_hashes(rlphex))
    return await _resolve_for_user(hashes, resolver, session, user)


@router.get("/all", response_model=TransactionListResponse)
async def get_all_transactions(session: DbSession) -> TransactionListResponse:
    """List every stored transaction."""
    return _to_response(await TransactionRepository(session).get_all())


@router.get("/my", response_model=TransactionListResponse)
async def get_my_transactions(
    user: CurrentUser, session: DbSession
) -> TransactionListResponse:
    """List the transactions the current user has looked up."""
    account = await UserRepository(session).get(user.username)
    records = await TransactionRepository(session).get_by_ids(
        account.searched_transaction_ids or []
    )
    return _to_response(records)

"""HTTP API module."""

from fastapi import APIRouter

from eth_fetcher.api.endpoints import auth, persons, transactions

api_router = APIRouter()

# Include routers
api_router.include_router(transactions.router)
api_router.include_router(auth.router)
api_router.include_router(persons.router)

"""Authentication API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from eth_fetcher.api.dependencies import get_auth_service
from eth_fetcher.services.auth import AuthService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Authentication"])


# Request/Response Models
class AuthenticateRequest(BaseModel):
    """Username and password."""

    username: str = Field(..., min_length=1, description="Username")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """Issued access token."""

    token: str


# Endpoints
@router.post("/authenticate", response_model=TokenResponse)
async def authenticate(
    request: AuthenticateRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """Exchange credentials for a bearer token valid for 24 hours."""
    token = await auth_service.authenticate(request.username, request.password)
    logger.info(f"User {request.username} authenticated")
    return TokenResponse(token=token)

"""Admin authentication routes"""

from fastapi import APIRouter, Depends
import logging

from api.dependencies import get_token_claims
from domain.schemas.auth_schemas import (
    LoginRequest,
    LoginResponse,
    TokenClaims,
    VerifyResponse,
)
from services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("mymixes.api.auth")


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest):
    """Exchange the shared admin password for a bearer token"""
    return AuthService.login(payload.password)


@router.get("/verify", response_model=VerifyResponse)
def verify(claims: TokenClaims = Depends(get_token_claims)):
    return VerifyResponse(valid=True, user=claims)

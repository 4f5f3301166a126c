"""Pydantic schemas for admin authentication."""

from typing import Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    # Optional so a missing password is reported by the service, not the schema
    password: Optional[str] = None


class TokenClaims(BaseModel):
    """Decoded admin token payload"""

    role: str
    iat: int
    exp: int


class AuthUser(BaseModel):
    role: str


class LoginResponse(BaseModel):
    token: str
    user: AuthUser


class VerifyResponse(BaseModel):
    valid: bool
    user: TokenClaims

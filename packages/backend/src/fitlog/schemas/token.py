"""Pydantic schemas for token login."""

from datetime import datetime

from pydantic import BaseModel, Field


class TokenCreate(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenRead(BaseModel):
    """Returned once, at issuance. The plaintext is never retrievable again."""
    token: str
    expiry: datetime

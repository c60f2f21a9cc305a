"""Pydantic schemas for users.

Learn: Registration rules live here so a bad payload is a 422 before any
hashing happens: username 5–50 chars, a plausible email, password ≥ 10.
UserRead never includes password_hash.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"


class UserCreate(BaseModel):
    username: str = Field(..., min_length=5, max_length=50)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=10)
    bio: str = ""


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=5, max_length=50)
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    bio: Optional[str] = None


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    bio: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserPublic(BaseModel):
    """What other users may see."""
    id: int
    username: str
    bio: str

    model_config = {"from_attributes": True}

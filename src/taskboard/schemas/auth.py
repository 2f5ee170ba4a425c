"""Pydantic schemas for signup, login and the current user.

Email and password are plain strings here; AccountService owns the
rules (required fields, password strength) so every caller gets the
same messages.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from taskboard.schemas.base import CamelModel


class Credentials(CamelModel):
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = None


class TokenResponse(CamelModel):
    token: str


class UserRead(CamelModel):
    id: uuid.UUID
    email: str
    created_at: datetime

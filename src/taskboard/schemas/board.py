"""Pydantic schemas for boards."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from taskboard.schemas.base import CamelModel


class BoardWrite(CamelModel):
    name: Optional[str] = Field(None, max_length=200)


class BoardRead(CamelModel):
    id: uuid.UUID
    name: str
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT to modify a task (all optional; only the
  fields actually sent are applied — see model_dump(exclude_unset=True))
- TaskRead: what the API returns

`progress` is accepted loosely (number or numeric string) because the
service decides what an unusable value means, and that depends on the
status: it falls back to a default in some cases and is rejected in others.
"""

import uuid
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import Field, field_validator

from taskboard.schemas.base import CamelModel

_DATE_FIELDS = ("start_date", "estimated_finish_date", "reminder_date_time")


class _TaskFields(CamelModel):
    description: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[Union[int, float, str]] = None
    start_date: Optional[datetime] = None
    estimated_finish_date: Optional[datetime] = None
    reminder_date_time: Optional[datetime] = None

    @field_validator(*_DATE_FIELDS, mode="before")
    @classmethod
    def blank_date_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class TaskCreate(_TaskFields):
    title: Optional[str] = Field(None, max_length=500)


class TaskUpdate(_TaskFields):
    """Partial update — only fields present in the request are applied."""
    title: Optional[str] = Field(None, max_length=500)


class TaskRead(CamelModel):
    id: uuid.UUID
    board_id: uuid.UUID
    title: str
    description: Optional[str]
    status: str
    progress: int
    start_date: Optional[datetime]
    estimated_finish_date: Optional[datetime]
    reminder_date_time: Optional[datetime]
    created_at: datetime
    updated_at: datetime

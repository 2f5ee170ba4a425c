"""Task service — ownership-scoped CRUD with the status/progress policy.

Learn: Two rules drive every write here:

1. Status pins progress:
     todo       → 0
     done       → 100
     inprogress → caller's value, or a default
2. Progress is only freely adjustable while a task is in progress.
   A progress change on a todo/done task is silently dropped; the rest
   of the update still applies.

Ownership is one hop further away than for boards: a task belongs to the
requester when task.board.user_id matches. Missing and not-owned tasks
both raise NotFoundError.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.models import TASK_STATUSES, Board, Task
from taskboard.errors import NotFoundError, ValidationError
from taskboard.services.board_service import BoardService

logger = structlog.get_logger()

# Progress given to a task entering "inprogress" without an explicit value.
DEFAULT_START_PROGRESS = 25

_DATE_FIELDS = ("start_date", "estimated_finish_date", "reminder_date_time")


# ═══════════════════════════════════════════════════════════
# Status / progress policy
# ═══════════════════════════════════════════════════════════


def parse_progress(value: Any) -> Optional[int]:
    """Coerce a client-supplied progress value to an int in [0, 100].

    Accepts ints, integral floats and numeric strings. Anything else,
    or anything out of range, gives None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    if not isinstance(value, int) or not 0 <= value <= 100:
        return None
    return value


def validate_status(status: str) -> str:
    if status not in TASK_STATUSES:
        raise ValidationError("Invalid status value.")
    return status


def progress_for_new_task(status: str, progress: Any = None) -> int:
    if status == "todo":
        return 0
    if status == "done":
        return 100
    parsed = parse_progress(progress)
    return parsed if parsed is not None else 0


def progress_for_status_change(
    current_status: str, current_progress: int, new_status: str, progress: Any = None
) -> int:
    if new_status == "todo":
        return 0
    if new_status == "done":
        return 100
    if progress is None:
        if current_status == "inprogress":
            return current_progress
        return DEFAULT_START_PROGRESS
    parsed = parse_progress(progress)
    return parsed if parsed is not None else DEFAULT_START_PROGRESS


# ═══════════════════════════════════════════════════════════
# Service
# ═══════════════════════════════════════════════════════════


class TaskService:
    """Business logic for tasks under a user's boards."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.boards = BoardService(db)

    async def get_owned_task(self, owner_id: uuid.UUID, task_id: uuid.UUID) -> Task:
        result = await self.db.execute(
            select(Task, Board.user_id)
            .join(Board, Task.board_id == Board.id)
            .where(Task.id == task_id)
        )
        row = result.first()
        if not row or row.user_id != owner_id:
            raise NotFoundError("Task not found.")
        return row.Task

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(self, owner_id: uuid.UUID, board_id: uuid.UUID) -> list[Task]:
        await self.boards.get_owned_board(owner_id, board_id)
        result = await self.db.execute(
            select(Task)
            .where(Task.board_id == board_id)
            .order_by(Task.created_at.asc())
        )
        return list(result.scalars().all())

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        owner_id: uuid.UUID,
        board_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
        progress: Any = None,
        start_date: Optional[datetime] = None,
        estimated_finish_date: Optional[datetime] = None,
        reminder_date_time: Optional[datetime] = None,
    ) -> Task:
        """Create a task. Status defaults to 'todo'."""
        title = (title or "").strip()
        if not title:
            raise ValidationError("Task title is required.")
        status = validate_status(status or "todo")

        await self.boards.get_owned_board(owner_id, board_id)

        task = Task(
            board_id=board_id,
            title=title,
            description=description,
            status=status,
            progress=progress_for_new_task(status, progress),
            start_date=start_date,
            estimated_finish_date=estimated_finish_date,
            reminder_date_time=reminder_date_time,
        )
        self.db.add(task)
        await self.db.commit()
        logger.info("task.created", task_id=str(task.id), board_id=str(board_id))
        return task

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self, owner_id: uuid.UUID, task_id: uuid.UUID, changes: dict[str, Any]
    ) -> Task:
        """Apply a partial update.

        Learn: `changes` holds only the fields the client actually sent
        (exclude_unset), so an explicit null can clear a date while an
        absent key leaves it alone. Input is validated before the lookup,
        matching the order clients see errors in: 400 before 404.
        """
        updates: dict[str, Any] = {}

        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise ValidationError("Task title cannot be empty.")
            updates["title"] = title
        if "description" in changes:
            updates["description"] = changes["description"]
        for field in _DATE_FIELDS:
            if field in changes:
                updates[field] = changes[field]

        new_status = changes.get("status")
        raw_progress = changes.get("progress")
        if new_status is not None:
            validate_status(new_status)
        elif raw_progress is not None and parse_progress(raw_progress) is None:
            raise ValidationError("Invalid progress value.")

        if not updates and new_status is None and raw_progress is None:
            raise ValidationError("No valid update data provided.")

        task = await self.get_owned_task(owner_id, task_id)

        if new_status is not None:
            updates["progress"] = progress_for_status_change(
                task.status, task.progress, new_status, raw_progress
            )
            updates["status"] = new_status
        elif raw_progress is not None:
            if task.status == "inprogress":
                updates["progress"] = parse_progress(raw_progress)
            else:
                logger.info(
                    "task.progress_ignored", task_id=str(task_id), status=task.status
                )

        for key, value in updates.items():
            setattr(task, key, value)
        await self.db.commit()
        logger.info("task.updated", task_id=str(task_id), fields=sorted(updates))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, owner_id: uuid.UUID, task_id: uuid.UUID) -> None:
        task = await self.get_owned_task(owner_id, task_id)
        await self.db.delete(task)
        await self.db.commit()
        logger.info("task.deleted", task_id=str(task_id))

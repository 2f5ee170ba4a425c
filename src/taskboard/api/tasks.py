"""Task API routes.

Learn: Tasks are listed and created under their board
(/boards/{board_id}/tasks) but updated and deleted by their own id
(/tasks/{task_id}). Either way the service walks task → board → user
to check ownership.

PUT is a partial update: only the keys present in the JSON body are
applied, so {"startDate": null} clears the date while omitting it
leaves the date alone.
"""

import uuid

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import CurrentUser, get_current_user
from taskboard.db.engine import get_db
from taskboard.schemas.task import TaskCreate, TaskRead, TaskUpdate
from taskboard.services.task_service import TaskService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.get("/boards/{board_id}/tasks", response_model=list[TaskRead])
async def list_tasks(
    board_id: uuid.UUID,
    current: CurrentUser = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    """List a board's tasks, oldest first."""
    return await svc.list_tasks(current.user_id, board_id)


@router.post("/boards/{board_id}/tasks", response_model=TaskRead, status_code=201)
async def create_task(
    board_id: uuid.UUID,
    body: TaskCreate,
    current: CurrentUser = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    """Create a task. Status defaults to 'todo'; progress follows status."""
    return await svc.create_task(
        current.user_id,
        board_id,
        title=body.title,
        description=body.description,
        status=body.status,
        progress=body.progress,
        start_date=body.start_date,
        estimated_finish_date=body.estimated_finish_date,
        reminder_date_time=body.reminder_date_time,
    )


@router.put("/tasks/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: uuid.UUID,
    body: TaskUpdate,
    current: CurrentUser = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    return await svc.update_task(
        current.user_id, task_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: uuid.UUID,
    current: CurrentUser = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    await svc.delete_task(current.user_id, task_id)
    return Response(status_code=204)

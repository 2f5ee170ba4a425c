"""Board API routes.

Learn: Routes only translate HTTP to service calls. The requester's id
comes from the bearer token (get_current_user); BoardService does the
ownership check, and domain errors become status codes in api.errors.
"""

import uuid

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import CurrentUser, get_current_user
from taskboard.db.engine import get_db
from taskboard.schemas.board import BoardRead, BoardWrite
from taskboard.services.board_service import BoardService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> BoardService:
    return BoardService(db)


@router.get("/boards", response_model=list[BoardRead])
async def list_boards(
    current: CurrentUser = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    """List the caller's boards, oldest first."""
    return await svc.list_boards(current.user_id)


@router.post("/boards", response_model=BoardRead, status_code=201)
async def create_board(
    body: BoardWrite,
    current: CurrentUser = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    return await svc.create_board(current.user_id, body.name)


@router.put("/boards/{board_id}", response_model=BoardRead)
async def rename_board(
    board_id: uuid.UUID,
    body: BoardWrite,
    current: CurrentUser = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    return await svc.update_board(current.user_id, board_id, body.name)


@router.delete("/boards/{board_id}", status_code=204)
async def delete_board(
    board_id: uuid.UUID,
    current: CurrentUser = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    """Delete a board and every task on it."""
    await svc.delete_board(current.user_id, board_id)
    return Response(status_code=204)

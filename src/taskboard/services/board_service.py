"""Board service — ownership-scoped CRUD for boards.

Learn: Every read or write starts with get_owned_board(), which folds
"doesn't exist" and "belongs to someone else" into the same NotFoundError.
A user can't probe for other users' board ids.
"""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.models import Board, User
from taskboard.errors import NotFoundError, ValidationError

logger = structlog.get_logger()


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Board name is required.")
    return name


class BoardService:
    """Business logic for boards."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_owned_board(self, owner_id: uuid.UUID, board_id: uuid.UUID) -> Board:
        board = await self.db.get(Board, board_id)
        if not board or board.user_id != owner_id:
            raise NotFoundError("Board not found.")
        return board

    async def list_boards(self, owner_id: uuid.UUID) -> list[Board]:
        result = await self.db.execute(
            select(Board)
            .where(Board.user_id == owner_id)
            .order_by(Board.created_at.asc())
        )
        return list(result.scalars().all())

    async def create_board(self, owner_id: uuid.UUID, name: str) -> Board:
        name = _clean_name(name)
        # The token outlives the account if the user deleted it meanwhile.
        if not await self.db.get(User, owner_id):
            raise NotFoundError("User not found.")

        board = Board(name=name, user_id=owner_id)
        self.db.add(board)
        await self.db.commit()
        logger.info("board.created", board_id=str(board.id))
        return board

    async def update_board(
        self, owner_id: uuid.UUID, board_id: uuid.UUID, name: str
    ) -> Board:
        name = _clean_name(name)
        board = await self.get_owned_board(owner_id, board_id)
        board.name = name
        await self.db.commit()
        logger.info("board.updated", board_id=str(board_id))
        return board

    async def delete_board(self, owner_id: uuid.UUID, board_id: uuid.UUID) -> None:
        """Delete a board and, by cascade, all of its tasks."""
        board = await self.get_owned_board(owner_id, board_id)
        await self.db.delete(board)
        await self.db.commit()
        logger.info("board.deleted", board_id=str(board_id))

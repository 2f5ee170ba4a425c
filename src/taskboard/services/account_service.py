"""Account service — signup, password login, account removal.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database. Failures are
raised as taskboard.errors exceptions; the API layer maps them to
status codes.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.password import (
    DEFAULT_ROUNDS,
    hash_password,
    password_problem,
    verify_password,
)
from taskboard.db.models import User
from taskboard.errors import AuthenticationError, NotFoundError, ValidationError

logger = structlog.get_logger()


class AccountService:
    """Business logic for local user accounts."""

    def __init__(self, db: AsyncSession, bcrypt_rounds: int = DEFAULT_ROUNDS):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found.")
        return user

    # ─── Signup ──────────────────────────────────────────

    async def signup(self, email: str, password: str) -> User:
        """Create a password account.

        Learn: Strength rules are checked in order and the first failure
        wins, so the client gets one actionable message at a time.
        """
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required.")

        problem = password_problem(password)
        if problem:
            raise ValidationError(problem)

        if await self.get_by_email(email):
            raise ValidationError("Email already in use.")

        user = User(
            email=email,
            password_hash=hash_password(password, self.bcrypt_rounds),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            await self.db.rollback()
            raise ValidationError("Email already in use.")
        logger.info("account.created", user_id=str(user.id))
        return user

    # ─── Login ───────────────────────────────────────────

    async def authenticate(self, email: str, password: str) -> User:
        """Check email/password and return the user."""
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required.")

        user = await self.get_by_email(email)
        if not user or not user.password_hash:
            logger.info("auth.login_failed", reason="no_password_account")
            raise AuthenticationError(
                "Invalid credentials. Please use Google Sign-In if you "
                "registered with Google."
            )

        if not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", reason="bad_password", user_id=str(user.id))
            raise AuthenticationError("Invalid credentials.")

        logger.info("auth.login", user_id=str(user.id))
        return user

    # ─── Delete ──────────────────────────────────────────

    async def delete_account(self, user_id: uuid.UUID) -> None:
        """Delete a user together with all boards and tasks."""
        user = await self.get_user(user_id)
        await self.db.delete(user)
        await self.db.commit()
        logger.info("account.deleted", user_id=str(user_id))

"""External identity linking — maps a Google profile onto a local user.

Learn: Resolution order matters:
1. Known google_id → that user (the common, returning-user case)
2. Known email     → attach google_id to the existing password account
3. Otherwise       → new user with an empty password hash (Google-only)

An email is only required for steps 2 and 3; a returning user whose
provider profile lost its email still signs in.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.google import ExternalProfile
from taskboard.db.models import User
from taskboard.errors import ValidationError

logger = structlog.get_logger()


class MissingEmailError(ValidationError):
    """The external profile can't be linked or created without an email."""


class IdentityService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _by_google_id(self, external_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.google_id == external_id))
        return result.scalars().first()

    async def _by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent signup or link claimed the email or google_id first
            await self.db.rollback()
            raise ValidationError("Email already in use.")

    async def link_or_create(self, profile: ExternalProfile) -> User:
        user = await self._by_google_id(profile.external_id)
        if user:
            logger.info("identity.found", user_id=str(user.id))
            return user

        if not profile.email:
            raise MissingEmailError("No email found in Google profile.")

        user = await self._by_email(profile.email)
        if user:
            user.google_id = profile.external_id
            await self._commit()
            logger.info("identity.linked", user_id=str(user.id))
            return user

        user = User(google_id=profile.external_id, email=profile.email, password_hash="")
        self.db.add(user)
        await self._commit()
        logger.info("identity.created", user_id=str(user.id))
        return user

from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_identifier(self, identifier: str) -> Optional[User]:
        """
        Case-insensitive match on email, username or employee code.

        The unique constraints are case-sensitive, so several users can match.
        Then the one whose identifier matches exactly wins; if that is still
        not a single user, nobody is returned.
        """
        raw = identifier.strip()
        needle = raw.lower()
        stmt = select(User).where(
            or_(
                func.lower(User.email) == needle,
                func.lower(User.username) == needle,
                func.lower(User.employee_code) == needle,
            )
        )
        result = await self.session.exec(stmt)
        candidates = result.all()
        if len(candidates) <= 1:
            return candidates[0] if candidates else None

        exact = [u for u in candidates if raw in (u.email, u.username, u.employee_code)]
        if len(exact) == 1:
            return exact[0]
        return None

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

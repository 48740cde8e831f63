from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session, User


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = (
            select(Session)
            .where(Session.id == session_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def compare_and_swap_secret(
        self,
        session_id: UUID,
        expected_hash: str,
        new_hash: str,
        new_token_id: UUID,
        now: datetime,
    ) -> bool:
        """
        Conditional UPDATE keyed on the current digest.

        The WHERE clause is the whole concurrency guard: a second writer
        presenting the same old digest matches zero rows once the first
        writer's swap is visible.
        """
        stmt = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.refresh_token_hash == expected_hash,
                Session.revoked == False,  # noqa: E712
                Session.expires_at > now,
            )
            .values(
                refresh_token_hash=new_hash,
                refresh_token_id=new_token_id,
                last_rotated_at=now,
                version=Session.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def revoke_by_id(self, session_id: UUID, reason: str, now: datetime) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=now, revoked_reason=reason)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_by_user_id(self, user_id: UUID, reason: str, now: datetime) -> int:
        """Revoke all active sessions for a user"""
        stmt = (
            update(Session)
            .where(Session.user_id == user_id, Session.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=now, revoked_reason=reason)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def list_active(
        self, now: datetime, user_id: Optional[UUID] = None
    ) -> List[Tuple[Session, User]]:
        """Active sessions joined with their owners"""
        stmt = (
            select(Session, User)
            .join(User, User.id == Session.user_id)
            .where(Session.revoked == False, Session.expires_at > now)  # noqa: E712
            .execution_options(populate_existing=True)
        )
        if user_id is not None:
            stmt = stmt.where(Session.user_id == user_id)
        result = await self.session.execute(stmt)
        rows = [(row[0], row[1]) for row in result.all()]
        rows.sort(key=lambda pair: pair[0].last_activity, reverse=True)
        return rows

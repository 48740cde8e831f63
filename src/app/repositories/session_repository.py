from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import Session, User


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def compare_and_swap_secret(
        self,
        session_id: UUID,
        expected_hash: str,
        new_hash: str,
        new_token_id: UUID,
        now: datetime,
    ) -> bool:
        """
        Atomically replace the refresh token digest.

        Succeeds only if the session still holds expected_hash, is not
        revoked and has not expired. Returns True if exactly one row changed.
        """
        pass

    @abstractmethod
    async def revoke_by_id(self, session_id: UUID, reason: str, now: datetime) -> bool:
        """Revoke a specific session. Returns True if it was active before."""
        pass

    @abstractmethod
    async def revoke_all_by_user_id(self, user_id: UUID, reason: str, now: datetime) -> int:
        """Revoke all active sessions for a user. Returns count of revoked sessions."""
        pass

    @abstractmethod
    async def list_active(
        self, now: datetime, user_id: Optional[UUID] = None
    ) -> List[Tuple[Session, User]]:
        """Non-revoked, unexpired sessions with their owners, most recent activity first"""
        pass

"""
Logout Use Case

Revokes the session named by the caller's refresh token.
"""

import logging
from typing import Optional

from src.api.utils.jwt import AccessClaims
from src.app.services.registry_guard import bounded_registry_call
from src.app.services.session_registry import SessionRegistry, parse_refresh_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, RevocationReason
from src.libs.result import Result, Return
from .dtos import LogoutResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for logging out one session.

    Business Rules:
    - Caller is already authenticated by access token
    - Always succeeds, including for already-revoked sessions (idempotent)
    - Only a session owned by the caller is revoked; anything else is a no-op
    - Access tokens already issued stay valid until their short TTL ends
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @bounded_registry_call
    async def execute(
        self, claims: AccessClaims, refresh_token: Optional[str]
    ) -> Result[LogoutResponse]:
        parsed = parse_refresh_token(refresh_token) if refresh_token else None
        if parsed is None:
            logger.info(f"Logout by user {claims.user_id} without a usable refresh token")
            return Return.ok(LogoutResponse())
        session_id, _ = parsed

        async with self.uow:
            session = await self.uow.sessions.get_by_id(session_id)

            if session is None or str(session.user_id) != claims.user_id:
                logger.warning(
                    f"Logout by user {claims.user_id} named session {session_id} it does not own"
                )
                return Return.ok(LogoutResponse())

            revoked = await SessionRegistry(self.uow).revoke(session_id, RevocationReason.logout)
            if revoked:
                await self.uow.audit_events.create(
                    AuditEvent(
                        user_id=session.user_id,
                        action="logout",
                        event_metadata={"session_id": str(session_id)},
                    )
                )
            await self.uow.commit()

        return Return.ok(LogoutResponse())

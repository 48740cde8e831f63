"""
Refresh Token Use Case

Exchanges a refresh token for a new access/refresh pair (rotation).
"""

import logging

from config import ApplicationConfig
from src.api.utils.jwt import issue_access_token
from src.app.services.keyed_lock import rotation_locks
from src.app.services.registry_guard import bounded_registry_call
from src.app.services.session_registry import (
    SessionRegistry,
    compose_refresh_token,
    parse_refresh_token,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, RevocationReason
from src.libs.result import Error, Result, Return
from .dtos import RefreshTokenResponse
from .role_claims import load_role_claims

logger = logging.getLogger(__name__)


class RefreshTokenUseCase:
    """
    Use case for refreshing access tokens.

    Business Rules:
    - Refresh token rotation: old token invalidated, new token issued
    - Presenting an already-rotated token revokes the whole session (TOKEN_REUSED)
    - Session must not be revoked or past its absolute expiry
    - Role and permissions are re-read so the new access token is current
    - Owner must still be active; otherwise the session is revoked
    - Rotations of one session are serialized in-process; the storage
      layer's conditional update covers other processes
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @bounded_registry_call
    async def execute(self, refresh_token: str) -> Result[RefreshTokenResponse]:
        """
        Execute refresh token use case.

        Args:
            refresh_token: Composite "<session id>.<secret>" token

        Returns:
            Result with RefreshTokenResponse, or
            TOKEN_INVALID / TOKEN_EXPIRED / TOKEN_REUSED / SESSION_REVOKED
        """
        parsed = parse_refresh_token(refresh_token)
        if parsed is None:
            return Return.err(Error("TOKEN_INVALID", "Invalid refresh token"))
        session_id, secret = parsed

        async with rotation_locks.hold(session_id):
            async with self.uow:
                registry = SessionRegistry(self.uow)
                rotated = await registry.rotate(session_id, secret)

                if rotated.is_err():
                    if rotated.error.code == "TOKEN_REUSED":
                        # Persist the revocation the reuse triggered
                        await self.uow.commit()
                    logger.info(f"Refresh rejected for session {session_id}: {rotated.error.code}")
                    return Return.err(rotated.error)

                session, new_secret = rotated.value

                user = await self.uow.users.get_by_id(session.user_id)
                if user is None or not user.can_login:
                    await registry.revoke(session.id, RevocationReason.account_inactive)
                    await self.uow.commit()
                    return Return.err(Error("SESSION_REVOKED", "Session has been revoked"))

                role_name, permissions = await load_role_claims(self.uow, user)

                await self.uow.audit_events.create(
                    AuditEvent(
                        user_id=user.id,
                        action="token_refresh",
                        event_metadata={
                            "session_id": str(session.id),
                            "version": session.version,
                        },
                    )
                )

                await self.uow.commit()

                access_token, expires_at = issue_access_token(
                    user.id, role_name, permissions, session.id
                )

                return Return.ok(
                    RefreshTokenResponse(
                        access_token=access_token,
                        refresh_token=compose_refresh_token(session.id, new_secret),
                        expires_in=ApplicationConfig.ACCESS_TOKEN_TTL_MINUTES * 60,
                        expires_at=expires_at,
                        session_id=str(session.id),
                    )
                )

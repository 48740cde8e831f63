"""
Session Registry

Durable record of refresh-token chains, one per login/device.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import timedelta
from typing import List, Optional, Tuple
from uuid import UUID, uuid4

from config import ApplicationConfig
from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import utc_now
from src.domain.entities import AuditEvent, RevocationReason, Session, User
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


def generate_refresh_secret() -> str:
    """256 bits from the OS CSPRNG, URL-safe"""
    return secrets.token_urlsafe(32)


def digest_secret(raw_secret: str) -> str:
    """
    SHA-256 hex digest of a refresh secret.

    The secret is already high-entropy, so a fast deterministic hash is
    enough and lets the rotation swap match on the stored digest in SQL.
    """
    return hashlib.sha256(raw_secret.encode()).hexdigest()


def compose_refresh_token(session_id: UUID, raw_secret: str) -> str:
    """Client-facing refresh token: <session id>.<raw secret>"""
    return f"{session_id}.{raw_secret}"


def parse_refresh_token(refresh_token: str) -> Optional[Tuple[UUID, str]]:
    """Split a composite refresh token; None if it is not one"""
    if not isinstance(refresh_token, str):
        return None
    session_part, sep, secret = refresh_token.strip().partition(".")
    if not sep or not secret:
        return None
    try:
        return UUID(session_part), secret
    except ValueError:
        return None


class SessionRegistry:
    """
    Business Rules:
    - Raw refresh secrets are returned once and never stored
    - One current refresh token per session; rotate swaps it atomically
    - Presenting a non-current secret for a live session is reuse: the
      session is revoked on the spot
    - Revocation is idempotent and terminal
    - Must be used inside an open unit of work; the caller commits
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def create(self, user_id: UUID, device_label: Optional[str]) -> Tuple[Session, str]:
        now = utc_now()
        raw_secret = generate_refresh_secret()
        session = Session(
            user_id=user_id,
            refresh_token_hash=digest_secret(raw_secret),
            device_label=(device_label or None) and device_label[:255],
            issued_at=now,
            expires_at=now + timedelta(days=ApplicationConfig.REFRESH_TOKEN_TTL_DAYS),
        )
        session = await self.uow.sessions.create(session)
        logger.info(f"Session {session.id} created for user {user_id}")
        return session, raw_secret

    async def rotate(self, session_id: UUID, presented_secret: str) -> Result[Tuple[Session, str]]:
        """
        Exchange the current refresh secret for a new one.

        Returns:
            Result with (session, new raw secret), or
            TOKEN_INVALID / SESSION_REVOKED / TOKEN_EXPIRED / TOKEN_REUSED
        """
        now = utc_now()
        session = await self.uow.sessions.get_by_id(session_id)

        if session is None:
            return Return.err(Error("TOKEN_INVALID", "Invalid refresh token"))

        presented_hash = digest_secret(presented_secret)
        is_current = hmac.compare_digest(presented_hash, session.refresh_token_hash)

        if session.revoked:
            # Later replays of rotated-away tokens keep reporting reuse
            if session.revoked_reason == RevocationReason.token_reuse.value and not is_current:
                return Return.err(Error("TOKEN_REUSED", "Refresh token has already been used"))
            return Return.err(Error("SESSION_REVOKED", "Session has been revoked"))

        if session.is_expired(now):
            return Return.err(Error("TOKEN_EXPIRED", "Refresh token has expired"))

        if not is_current:
            return await self._reuse_detected(session, now)

        new_secret = generate_refresh_secret()
        new_token_id = uuid4()
        swapped = await self.uow.sessions.compare_and_swap_secret(
            session.id, presented_hash, digest_secret(new_secret), new_token_id, now
        )
        if not swapped:
            # Someone else changed the row between our read and the swap.
            current = await self.uow.sessions.get_by_id(session.id)
            if current is not None and current.revoked:
                if current.revoked_reason == RevocationReason.token_reuse.value:
                    return Return.err(
                        Error("TOKEN_REUSED", "Refresh token has already been used")
                    )
                return Return.err(Error("SESSION_REVOKED", "Session has been revoked"))
            if current is not None and current.is_expired(now):
                return Return.err(Error("TOKEN_EXPIRED", "Refresh token has expired"))
            return await self._reuse_detected(session, now)

        rotated = await self.uow.sessions.get_by_id(session.id)
        return Return.ok((rotated, new_secret))

    async def _reuse_detected(self, session: Session, now) -> Result:
        await self.uow.sessions.revoke_by_id(session.id, RevocationReason.token_reuse.value, now)
        await self.uow.audit_events.create(
            AuditEvent(
                user_id=session.user_id,
                action="token_reuse_detected",
                event_metadata={"session_id": str(session.id)},
            )
        )
        logger.warning(f"Refresh token reuse on session {session.id}; session revoked")
        return Return.err(Error("TOKEN_REUSED", "Refresh token has already been used"))

    async def revoke(self, session_id: UUID, reason: RevocationReason = RevocationReason.logout) -> bool:
        """Returns True if this call revoked it, False if already revoked or unknown"""
        return await self.uow.sessions.revoke_by_id(session_id, reason.value, utc_now())

    async def revoke_all_for_user(
        self, user_id: UUID, reason: RevocationReason = RevocationReason.force_logout
    ) -> int:
        count = await self.uow.sessions.revoke_all_by_user_id(user_id, reason.value, utc_now())
        logger.info(f"Revoked {count} session(s) for user {user_id} ({reason.value})")
        return count

    async def list(self, user_id: Optional[UUID] = None) -> List[Tuple[Session, User]]:
        """Active (non-revoked, unexpired) sessions, system-wide when user_id is None"""
        return await self.uow.sessions.list_active(utc_now(), user_id)

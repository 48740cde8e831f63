"""
Login Use Case

Verifies credentials, opens a session and issues an access/refresh pair.
"""

import logging
from typing import Optional

from config import ApplicationConfig
from src.api.utils.jwt import issue_access_token
from src.app.services.credential_verifier import CredentialVerifier
from src.app.services.registry_guard import bounded_registry_call
from src.app.services.session_registry import SessionRegistry, compose_refresh_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import utc_now
from src.domain.entities import AuditEvent
from src.libs.result import Result, Return
from .dtos import LoginResponse, UserInfo
from .role_claims import load_role_claims

logger = logging.getLogger(__name__)


class LoginUseCase:
    """
    Use case for user login and token issuance.

    Business Rules:
    - Unknown identifier and wrong password fail identically (INVALID_CREDENTIALS)
    - Failed attempts are audited with the identifier (rate-limit hook point)
    - Each login opens a new session; other devices are untouched
    - Refresh token is "<session id>.<secret>"; only the secret's digest is stored
    - Updates user.last_login_at
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @bounded_registry_call
    async def execute(
        self, identifier: str, password: str, device_label: Optional[str] = None
    ) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            identifier: Email, username or employee code
            password: Plain text password
            device_label: Free-text client description

        Returns:
            Result with LoginResponse, or INVALID_CREDENTIALS
        """
        async with self.uow:
            verified = await CredentialVerifier(self.uow).verify(identifier, password)

            if verified.is_err():
                await self.uow.audit_events.create(
                    AuditEvent(action="login_failed", event_metadata={"identifier": identifier})
                )
                await self.uow.commit()
                return Return.err(verified.error)

            user = verified.value
            role_name, permissions = await load_role_claims(self.uow, user)

            session, raw_secret = await SessionRegistry(self.uow).create(user.id, device_label)

            user.last_login_at = utc_now()
            await self.uow.users.update(user)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="login",
                    event_metadata={
                        "session_id": str(session.id),
                        "device_label": session.device_label,
                    },
                )
            )

            await self.uow.commit()

            access_token, expires_at = issue_access_token(
                user.id, role_name, permissions, session.id
            )
            logger.info(f"User {user.id} logged in (session {session.id})")

            return Return.ok(
                LoginResponse(
                    access_token=access_token,
                    refresh_token=compose_refresh_token(session.id, raw_secret),
                    expires_in=ApplicationConfig.ACCESS_TOKEN_TTL_MINUTES * 60,
                    expires_at=expires_at,
                    session_id=str(session.id),
                    user=UserInfo(
                        id=str(user.id),
                        name=user.name,
                        email=user.email,
                        username=user.username,
                        employee_code=user.employee_code,
                        role_name=role_name,
                    ),
                )
            )

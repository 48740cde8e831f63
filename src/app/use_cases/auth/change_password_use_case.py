"""
Change Password Use Case

Lets an authenticated user replace their password.
"""

import re
from typing import Optional
from uuid import UUID

from src.app.services.password_hasher import hash_password, verify_password
from src.app.services.registry_guard import bounded_registry_call
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import utc_now
from src.domain.entities import AuditEvent, RevocationReason
from src.libs.result import Error, Result, Return
from .dtos import ChangePasswordResponse


class ChangePasswordUseCase:
    """
    Use case for changing the caller's password.

    Business Rules:
    - Current password must verify (INVALID_CREDENTIALS otherwise)
    - New password: 6-100 chars and at most 72 bytes, at least one upper,
      one lower, one digit
    - Confirmation, when supplied, must match
    - Every session of the user is revoked; the user must log in again
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _validate_password(
        self, new_password: str, confirm_password: Optional[str]
    ) -> Result[None]:
        """
        Validate password complexity.

        Returns:
            Result with None if valid, or INVALID_PASSWORD
        """
        if len(new_password) < 6:
            return Return.err(
                Error("INVALID_PASSWORD", "New password must be at least 6 characters long")
            )
        if len(new_password) > 100:
            return Return.err(
                Error("INVALID_PASSWORD", "New password cannot exceed 100 characters")
            )
        # bcrypt only accepts 72 bytes of input
        if len(new_password.encode()) > 72:
            return Return.err(
                Error("INVALID_PASSWORD", "New password cannot exceed 72 bytes")
            )
        if not (
            re.search(r"[A-Z]", new_password)
            and re.search(r"[a-z]", new_password)
            and re.search(r"\d", new_password)
        ):
            return Return.err(
                Error(
                    "INVALID_PASSWORD",
                    "New password must contain at least one uppercase letter, "
                    "one lowercase letter, and one number",
                )
            )
        if confirm_password is not None and confirm_password != new_password:
            return Return.err(
                Error("INVALID_PASSWORD", "New password and confirm password do not match")
            )
        return Return.ok(None)

    @bounded_registry_call
    async def execute(
        self,
        user_id: UUID,
        current_password: str,
        new_password: str,
        confirm_password: Optional[str] = None,
    ) -> Result[ChangePasswordResponse]:
        password_validation = self._validate_password(new_password, confirm_password)
        if password_validation.is_err():
            return Return.err(password_validation.error)

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None or not user.can_login:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if not verify_password(current_password, user.password_hash):
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Current password is incorrect")
                )

            user.password_hash = hash_password(new_password)
            user.updated_at = utc_now()
            await self.uow.users.update(user)

            revoked = await SessionRegistry(self.uow).revoke_all_for_user(
                user.id, RevocationReason.password_change
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="password_changed",
                    event_metadata={"revoked_sessions": revoked},
                )
            )

            await self.uow.commit()

            return Return.ok(ChangePasswordResponse(revoked_sessions=revoked))

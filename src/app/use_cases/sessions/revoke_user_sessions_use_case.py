"""
Revoke User Sessions Use Case

Administrative force-logout of every device of one user.
"""

from uuid import UUID

from src.app.services.registry_guard import bounded_registry_call
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import RevokeUserSessionsResponse
from src.domain.entities import AuditEvent, RevocationReason
from src.libs.result import Error, Result, Return


class RevokeUserSessionsUseCase:
    """
    Business Rules:
    - Caller must hold an admin role (enforced before this use case runs)
    - Target user must exist
    - Idempotent: revoking a user with no active sessions reports 0
    - Audit-logged with the acting admin
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @bounded_registry_call
    async def execute(
        self, target_user_id: UUID, requesting_user_id: UUID
    ) -> Result[RevokeUserSessionsResponse]:
        async with self.uow:
            target_user = await self.uow.users.get_by_id(target_user_id)
            if target_user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            count = await SessionRegistry(self.uow).revoke_all_for_user(
                target_user_id, RevocationReason.force_logout
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=requesting_user_id,
                    action="force_logout",
                    event_metadata={
                        "target_user_id": str(target_user_id),
                        "revoked_count": count,
                    },
                )
            )

            await self.uow.commit()

            return Return.ok(
                RevokeUserSessionsResponse(user_id=str(target_user_id), revoked_count=count)
            )

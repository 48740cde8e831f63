"""
List Sessions Use Cases

Admin views over the session registry.
"""

from collections import Counter
from typing import Optional
from uuid import UUID

from src.app.services.registry_guard import bounded_registry_call
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import AuthStatsResponse, SessionInfo, SessionListResponse
from src.libs.result import Result, Return


class ListActiveSessionsUseCase:
    """
    Active sessions, system-wide or for one user.

    Business Rules:
    - Caller must hold an admin role (enforced before this use case runs)
    - Revoked and expired sessions are excluded
    - Most recently active first
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @bounded_registry_call
    async def execute(self, target_user_id: Optional[UUID] = None) -> Result[SessionListResponse]:
        async with self.uow:
            rows = await SessionRegistry(self.uow).list(target_user_id)

            sessions = [
                SessionInfo(
                    session_id=str(session.id),
                    user_id=str(user.id),
                    user_name=user.name,
                    email=user.email,
                    username=user.username,
                    employee_code=user.employee_code,
                    role=user.role_name,
                    device_label=session.device_label,
                    state=session.state.value,
                    issued_at=session.issued_at,
                    last_rotated_at=session.last_rotated_at,
                    last_activity=session.last_activity,
                    expires_at=session.expires_at,
                )
                for session, user in rows
            ]

            return Return.ok(
                SessionListResponse(sessions=sessions, total_active_sessions=len(sessions))
            )


class GetAuthStatsUseCase:
    """Aggregate counts over active sessions (admin only)"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @bounded_registry_call
    async def execute(self) -> Result[AuthStatsResponse]:
        async with self.uow:
            rows = await SessionRegistry(self.uow).list()

            by_role = Counter(user.role_name or "Unknown" for _, user in rows)
            last_activity = max((session.last_activity for session, _ in rows), default=None)

            return Return.ok(
                AuthStatsResponse(
                    total_active_sessions=len(rows),
                    active_users=len({user.id for _, user in rows}),
                    sessions_by_role=dict(by_role),
                    last_activity=last_activity,
                )
            )

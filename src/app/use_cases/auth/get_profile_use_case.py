from uuid import UUID

from src.app.services.registry_guard import bounded_registry_call
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Error, Result, Return
from .dtos import PermissionInfo, ProfileResponse, RoleInfo, UserProfile


class GetProfileUseCase:
    """Profile of the authenticated user with role and permission pairs"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @bounded_registry_call
    async def execute(self, user_id: UUID) -> Result[ProfileResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None or user.deleted:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            role_info = None
            if user.role_id is not None:
                role = await self.uow.roles.get_with_permissions(user.role_id)
                if role is not None:
                    role_info = RoleInfo(
                        name=role.name,
                        permissions=[
                            PermissionInfo(action=p.action, subject=p.subject)
                            for p in role.permissions
                        ],
                    )

            return Return.ok(
                ProfileResponse(
                    user=UserProfile(
                        id=str(user.id),
                        name=user.name,
                        email=user.email,
                        username=user.username,
                        employee_code=user.employee_code,
                        active=user.active,
                        last_login_at=user.last_login_at,
                        created_at=user.created_at,
                        role=role_info,
                    )
                )
            )

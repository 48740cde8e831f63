from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.role_repository import IRoleRepository
from src.domain.entities import Role


class RoleRepository(IRoleRepository):
    """Role repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_with_permissions(self, role_id: int) -> Optional[Role]:
        """Permissions are eager-loaded by the relationship config"""
        stmt = select(Role).where(Role.id == role_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

from typing import List, Optional, Tuple

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User


async def load_role_claims(
    uow: UnitOfWork, user: User
) -> Tuple[Optional[str], List[Tuple[str, str]]]:
    """Current role name and (action, subject) pairs for a user, read fresh from the role store"""
    if user.role_id is None:
        return None, []
    role = await uow.roles.get_with_permissions(user.role_id)
    if role is None:
        return None, []
    return role.name, [(p.action, p.subject) for p in role.permissions]

from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities import Role


class IRoleRepository(ABC):
    """Role repository interface - application layer"""

    @abstractmethod
    async def get_with_permissions(self, role_id: int) -> Optional[Role]:
        """Get role by ID with its permission pairs loaded"""
        pass

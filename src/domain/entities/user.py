"""
User Entity

Owned by the master-data subsystem; consumed here for credential checks.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Relationship, SQLModel

from src.domain.clock import utc_now

from .role import Role


class User(SQLModel, table=True):
    """
    User entity - anyone who may log in.

    Business Rules:
    - Email, username and employee code are each unique identifiers
    - Identifier lookup is case-insensitive
    - Password stored as bcrypt hash
    - Only active, non-deleted users may authenticate
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(default="", max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    username: Optional[str] = Field(default=None, unique=True, index=True, max_length=100)
    employee_code: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=50
    )
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    role_id: Optional[int] = Field(default=None, foreign_key="roles.id")
    active: bool = Field(default=True)
    deleted: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    role: Optional[Role] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})

    @property
    def can_login(self) -> bool:
        return self.active and not self.deleted

    @property
    def role_name(self) -> Optional[str]:
        return self.role.name if self.role else None

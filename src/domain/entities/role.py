"""
Role and Permission Entities

Roles are owned by the master-data side of the application; this service
only reads them to stamp claims into access tokens.
"""

from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class Role(SQLModel, table=True):
    """
    Role entity - a named set of (action, subject) permission pairs.

    Business Rules:
    - Name is unique and compared case-insensitively by the authorization guard
    - Permissions load eagerly so they are usable outside the unit of work
    """

    __tablename__ = "roles"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=50)

    permissions: List["Permission"] = Relationship(
        back_populates="role", sa_relationship_kwargs={"lazy": "selectin"}
    )


class Permission(SQLModel, table=True):
    """Permission pair; subject "all" grants the action on every subject"""

    __tablename__ = "permissions"

    id: Optional[int] = Field(default=None, primary_key=True)
    role_id: int = Field(foreign_key="roles.id", nullable=False, index=True)
    action: str = Field(max_length=50)
    subject: str = Field(max_length=100)

    role: Optional[Role] = Relationship(back_populates="permissions")

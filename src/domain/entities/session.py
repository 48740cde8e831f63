"""
Session Entity

One logical login (device/browser instance) and its refresh-token chain.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.clock import utc_now

from .enums import SessionState


class Session(SQLModel, table=True):
    """
    Session entity - durable record of a refresh-token chain.

    Business Rules:
    - Only the SHA-256 digest of the current refresh secret is stored
    - Exactly one refresh token is current at a time; rotation swaps the
      digest with a conditional update and bumps version
    - expires_at is absolute; rotation never extends it
    - Revocation is terminal
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    refresh_token_id: UUID = Field(default_factory=uuid4)
    refresh_token_hash: str = Field(max_length=64)  # SHA-256 hex
    version: int = Field(default=1)

    device_label: Optional[str] = Field(default=None, max_length=255)

    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    revoked_reason: Optional[str] = Field(default=None, max_length=50)

    # Timestamps
    issued_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    last_rotated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_revoked", "user_id", "revoked"),
    )

    @property
    def state(self) -> SessionState:
        if self.revoked:
            return SessionState.revoked
        if self.last_rotated_at is None:
            return SessionState.authenticated
        return SessionState.refreshed

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    @property
    def last_activity(self) -> datetime:
        return self.last_rotated_at or self.issued_at

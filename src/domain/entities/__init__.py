"""
Auth Service Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import RevocationReason, SessionState

# Export all entities
from .role import Permission, Role
from .user import User
from .session import Session
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "RevocationReason",
    "SessionState",
    # Entities
    "Role",
    "Permission",
    "User",
    "Session",
    "AuditEvent",
]

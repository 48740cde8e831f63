"""
Auth Service Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class SessionState(str, Enum):
    """Lifecycle position of a session; revoked is terminal"""

    authenticated = "authenticated"
    refreshed = "refreshed"
    revoked = "revoked"


class RevocationReason(str, Enum):
    """Why a session was revoked"""

    logout = "logout"
    token_reuse = "token_reuse"
    force_logout = "force_logout"
    password_change = "password_change"
    account_inactive = "account_inactive"

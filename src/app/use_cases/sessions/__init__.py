"""
Session Management Use Cases

Admin-facing views and actions over the session registry.
"""

from .list_sessions_use_case import GetAuthStatsUseCase, ListActiveSessionsUseCase
from .revoke_user_sessions_use_case import RevokeUserSessionsUseCase

__all__ = [
    "ListActiveSessionsUseCase",
    "GetAuthStatsUseCase",
    "RevokeUserSessionsUseCase",
]

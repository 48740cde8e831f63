"""
Use Cases

Organized by domain folder:
- auth/: Login, token refresh, logout, validation, profile, password change
- sessions/: Admin session views and force-logout
"""

from .auth import (
    ChangePasswordUseCase,
    GetProfileUseCase,
    LoginUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
    ValidateTokenUseCase,
)
from .sessions import (
    GetAuthStatsUseCase,
    ListActiveSessionsUseCase,
    RevokeUserSessionsUseCase,
)

__all__ = [
    # Auth
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "ValidateTokenUseCase",
    "GetProfileUseCase",
    "ChangePasswordUseCase",
    # Sessions
    "ListActiveSessionsUseCase",
    "GetAuthStatsUseCase",
    "RevokeUserSessionsUseCase",
]

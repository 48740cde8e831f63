"""
Authentication Use Cases

All authentication-related business logic.
"""

from .login_use_case import LoginUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .validate_token_use_case import ValidateTokenUseCase
from .get_profile_use_case import GetProfileUseCase
from .change_password_use_case import ChangePasswordUseCase
from .dtos import (
    AuthStatsResponse,
    ChangePasswordResponse,
    LoginResponse,
    LogoutResponse,
    ProfileResponse,
    RefreshTokenResponse,
    RevokeUserSessionsResponse,
    SessionInfo,
    SessionListResponse,
    UserInfo,
    ValidateTokenResponse,
)

__all__ = [
    # Use Cases
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "ValidateTokenUseCase",
    "GetProfileUseCase",
    "ChangePasswordUseCase",
    # DTOs - Responses
    "LoginResponse",
    "RefreshTokenResponse",
    "LogoutResponse",
    "ValidateTokenResponse",
    "ProfileResponse",
    "ChangePasswordResponse",
    "SessionListResponse",
    "AuthStatsResponse",
    "RevokeUserSessionsResponse",
    # DTOs - Nested Models
    "UserInfo",
    "SessionInfo",
]

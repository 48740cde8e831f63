"""
Authentication Use Case DTOs (Data Transfer Objects)

All Response classes for the auth domain.
Serialized camelCase on the wire; snake_case attribute names in Python.
"""

from datetime import datetime
from typing import Dict, List, Optional

from src.api.utils.jwt import AccessClaims
from src.domain.base import CamelModel


# ============================================================================
# Nested Models
# ============================================================================


class UserInfo(CamelModel):
    """User summary returned on login"""

    id: str
    name: str
    email: str
    username: Optional[str] = None
    employee_code: Optional[str] = None
    role_name: Optional[str] = None


class PermissionInfo(CamelModel):
    action: str
    subject: str


class RoleInfo(CamelModel):
    name: str
    permissions: List[PermissionInfo]


class UserProfile(CamelModel):
    """Full profile of the authenticated user"""

    id: str
    name: str
    email: str
    username: Optional[str] = None
    employee_code: Optional[str] = None
    active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    role: Optional[RoleInfo] = None


class SessionInfo(CamelModel):
    """One active session in the admin sessions view"""

    session_id: str
    user_id: str
    user_name: str
    email: str
    username: Optional[str] = None
    employee_code: Optional[str] = None
    role: Optional[str] = None
    device_label: Optional[str] = None
    state: str
    issued_at: datetime
    last_rotated_at: Optional[datetime] = None
    last_activity: datetime
    expires_at: datetime


# ============================================================================
# Response DTOs
# ============================================================================


class LoginResponse(CamelModel):
    """Response for user login use case"""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    expires_at: datetime
    session_id: str
    user: UserInfo


class RefreshTokenResponse(CamelModel):
    """Response for refresh token use case"""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    expires_at: datetime
    session_id: str


class LogoutResponse(CamelModel):
    """Response for logout use case; identical whether or not anything was revoked"""

    success: bool = True
    message: str = "Logged out successfully"


class ValidateTokenResponse(CamelModel):
    is_valid: bool
    claims: AccessClaims


class ProfileResponse(CamelModel):
    user: UserProfile


class ChangePasswordResponse(CamelModel):
    success: bool = True
    message: str = "Password changed successfully"
    revoked_sessions: int


class SessionListResponse(CamelModel):
    sessions: List[SessionInfo]
    total_active_sessions: int


class AuthStatsResponse(CamelModel):
    total_active_sessions: int
    active_users: int
    sessions_by_role: Dict[str, int]
    last_activity: Optional[datetime] = None


class RevokeUserSessionsResponse(CamelModel):
    user_id: str
    revoked_count: int
    message: str = "User sessions revoked successfully"

from datetime import UTC, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import Field

from src.api.error import raise_for_error
from src.api.utils.jwt import AccessClaims
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    ChangePasswordResponse,
    ChangePasswordUseCase,
    GetProfileUseCase,
    LoginResponse,
    LoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    ProfileResponse,
    RefreshTokenResponse,
    RefreshTokenUseCase,
    ValidateTokenResponse,
    ValidateTokenUseCase,
)
from src.app.use_cases.sessions import (
    GetAuthStatsUseCase,
    ListActiveSessionsUseCase,
    RevokeUserSessionsUseCase,
)
from src.app.use_cases.auth.dtos import (
    AuthStatsResponse,
    RevokeUserSessionsResponse,
    SessionListResponse,
)
from src.depends import get_bearer_token, get_current_user, get_unit_of_work, require_admin
from src.domain.base import CamelModel

router = APIRouter(prefix="/auth", tags=["Authentication"])


class LoginRequest(CamelModel):
    """
    Login HTTP request payload

    identifier is an email, username or employee code.
    """

    identifier: str = Field(..., min_length=1, description="Email, username or employee code")
    password: str = Field(..., min_length=1, description="User password")
    device_label: Optional[str] = Field(
        default=None, max_length=255, description="Client device description"
    )


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest, http_request: Request, uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    User Login

    Verifies credentials and opens a new session for this device.

    Raises:
        - 400 Bad Request: Missing or malformed fields
        - 401 Unauthorized: Invalid credentials (same for unknown user and wrong password)
        - 503 Service Unavailable: Session store unavailable (retryable)
    """
    device_label = request.device_label or http_request.headers.get("user-agent")

    use_case = LoginUseCase(uow)
    result = await use_case.execute(request.identifier, request.password, device_label)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class RefreshRequest(CamelModel):
    """Refresh token HTTP request payload"""

    refresh_token: str = Field(..., min_length=1, description="Refresh token")


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse)
async def refresh(request: RefreshRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Refresh Tokens

    Rotates the refresh token and issues a new access token. Replaying a
    rotated refresh token revokes the session.

    Raises:
        - 400 Bad Request: Missing refresh token
        - 401 Unauthorized: Invalid, expired, reused or revoked token
        - 503 Service Unavailable: Session store unavailable (retryable)
    """
    use_case = RefreshTokenUseCase(uow)
    result = await use_case.execute(request.refresh_token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class LogoutRequest(CamelModel):
    """Logout HTTP request payload"""

    refresh_token: Optional[str] = Field(default=None, description="Refresh token of this session")


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: Optional[LogoutRequest] = None,
    current_user: AccessClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Logout

    Revokes the session the refresh token belongs to. Idempotent.

    Raises:
        - 401 Unauthorized: Missing or invalid access token
    """
    use_case = LogoutUseCase(uow)
    result = await use_case.execute(current_user, request.refresh_token if request else None)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/validate", status_code=status.HTTP_200_OK, response_model=ValidateTokenResponse)
async def validate(token: str = Depends(get_bearer_token)):
    """
    Validate Access Token

    Signature and expiry only; no session lookup.

    Raises:
        - 401 Unauthorized: Missing, invalid or expired token
    """
    result = ValidateTokenUseCase().execute(token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/profile", status_code=status.HTTP_200_OK, response_model=ProfileResponse)
async def profile(
    current_user: AccessClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current User Profile

    Raises:
        - 401 Unauthorized: Missing or invalid access token
        - 404 Not Found: User no longer exists
    """
    use_case = GetProfileUseCase(uow)
    result = await use_case.execute(UUID(current_user.user_id))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ChangePasswordRequest(CamelModel):
    """Change password HTTP request payload"""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
    confirm_password: Optional[str] = None


@router.post(
    "/change-password", status_code=status.HTTP_200_OK, response_model=ChangePasswordResponse
)
async def change_password(
    request: ChangePasswordRequest,
    current_user: AccessClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Change Password

    Revokes every session of the user on success.

    Raises:
        - 400 Bad Request: New password fails complexity rules or confirmation
        - 401 Unauthorized: Wrong current password or missing auth
    """
    use_case = ChangePasswordUseCase(uow)
    result = await use_case.execute(
        UUID(current_user.user_id),
        request.current_password,
        request.new_password,
        request.confirm_password,
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/sessions", status_code=status.HTTP_200_OK, response_model=SessionListResponse)
async def list_sessions(
    user_id: Optional[UUID] = Query(default=None, alias="userId"),
    current_user: AccessClaims = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Active Sessions (admin only)

    System-wide, or for one user with ?userId=.

    Raises:
        - 401 Unauthorized: Missing or invalid access token
        - 403 Forbidden: Caller is not an admin
    """
    use_case = ListActiveSessionsUseCase(uow)
    result = await use_case.execute(user_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete(
    "/sessions/{user_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeUserSessionsResponse,
)
async def revoke_user_sessions(
    user_id: UUID,
    current_user: AccessClaims = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Force Logout (admin only)

    Revokes every session of the given user.

    Raises:
        - 403 Forbidden: Caller is not an admin
        - 404 Not Found: User not found
    """
    use_case = RevokeUserSessionsUseCase(uow)
    result = await use_case.execute(user_id, UUID(current_user.user_id))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/stats", status_code=status.HTTP_200_OK, response_model=AuthStatsResponse)
async def stats(
    current_user: AccessClaims = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Aggregate session counts (admin only)"""
    use_case = GetAuthStatsUseCase(uow)
    result = await use_case.execute()

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/health", status_code=status.HTTP_200_OK)
async def health():
    """Liveness probe; unauthenticated"""
    return {
        "success": True,
        "message": "Authentication service is healthy",
        "service": "auth",
        "timestamp": datetime.now(UTC).isoformat(),
    }

import hashlib
from datetime import UTC, datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from jose import JWTError, jwt
from pydantic import Field

from config import ApplicationConfig
from src.domain.base import CamelModel
from src.libs.result import Error, Result, Return

_REQUIRED_CLAIMS = ("user_id", "role", "permissions_digest", "iat", "exp")


class AccessClaims(CamelModel):
    """Decoded access token claims"""

    user_id: str
    role_name: Optional[str] = Field(default=None)
    permissions_digest: str
    session_id: Optional[str] = None
    issued_at: datetime
    expires_at: datetime


def permissions_digest(permissions: Iterable[Tuple[str, str]]) -> str:
    """
    Order-independent SHA-256 over (action, subject) pairs.

    Lets downstream services detect that a role's permission set changed
    since the token was issued without carrying the whole set.
    """
    canonical = ",".join(sorted(f"{action}:{subject}" for action, subject in permissions))
    return hashlib.sha256(canonical.encode()).hexdigest()


def create_access_token(
    user_id: str,
    role: Optional[str],
    perms_digest: str,
    expires_delta: timedelta,
    session_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[str, datetime]:
    """
    Create JWT access token with custom expiry

    Args:
        user_id: User UUID as string
        role: Role name (may be None for role-less users)
        perms_digest: Digest of the role's permission pairs
        expires_delta: Token lifetime
        session_id: Session the token was issued for
        now: Issue time override (tests)

    Returns:
        (JWT string, expiry as aware UTC datetime)
    """
    issued_at = (now or datetime.now(UTC)).replace(microsecond=0)
    expires_at = issued_at + expires_delta
    payload = {
        "user_id": user_id,
        "role": role,
        "permissions_digest": perms_digest,
        "sid": session_id,
        "iat": issued_at,
        "exp": expires_at,
        "iss": ApplicationConfig.JWT_ISSUER,
        "aud": ApplicationConfig.JWT_AUDIENCE,
    }
    token = jwt.encode(
        payload, ApplicationConfig.JWT_SECRET, algorithm=ApplicationConfig.JWT_ALGORITHM
    )
    return token, expires_at


def issue_access_token(
    user_id,
    role_name: Optional[str],
    permissions: List[Tuple[str, str]],
    session_id=None,
) -> Tuple[str, datetime]:
    """
    Issue a short-lived access token (ACCESS_TOKEN_TTL_MINUTES).

    Returns:
        (JWT string, expiry as aware UTC datetime)
    """
    return create_access_token(
        str(user_id),
        role_name,
        permissions_digest(permissions),
        timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_TTL_MINUTES),
        session_id=str(session_id) if session_id else None,
    )


def validate_access_token(token: str, now: Optional[datetime] = None) -> Result[AccessClaims]:
    """
    Verify signature, issuer and audience, then expiry. No I/O.

    Expiry is checked here rather than by jose so that a token whose
    exp equals now is already expired.

    Returns:
        Result with AccessClaims, or TOKEN_INVALID / TOKEN_EXPIRED
    """
    try:
        payload = jwt.decode(
            token,
            ApplicationConfig.JWT_SECRET,
            algorithms=[ApplicationConfig.JWT_ALGORITHM],
            audience=ApplicationConfig.JWT_AUDIENCE,
            issuer=ApplicationConfig.JWT_ISSUER,
            options={"verify_exp": False},
        )
    except (JWTError, AttributeError, ValueError):
        return Return.err(Error("TOKEN_INVALID", "Invalid access token"))

    if any(claim not in payload for claim in _REQUIRED_CLAIMS):
        return Return.err(Error("TOKEN_INVALID", "Invalid access token"))

    try:
        issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
    except (TypeError, ValueError, OverflowError):
        return Return.err(Error("TOKEN_INVALID", "Invalid access token"))

    if (now or datetime.now(UTC)) >= expires_at:
        return Return.err(Error("TOKEN_EXPIRED", "Access token has expired"))

    return Return.ok(
        AccessClaims(
            user_id=payload["user_id"],
            role_name=payload.get("role"),
            permissions_digest=payload["permissions_digest"],
            session_id=payload.get("sid"),
            issued_at=issued_at,
            expires_at=expires_at,
        )
    )

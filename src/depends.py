from typing import Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import AccessClaims, validate_access_token
from src.app.services.authorization import authorize
from src.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# auto_error=False so a missing header yields our 401 envelope
security = HTTPBearer(auto_error=False)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Raw bearer token from the Authorization header, or 401 UNAUTHENTICATED"""
    if credentials is None or not credentials.credentials:
        raise ClientError(
            Error("UNAUTHENTICATED", "Authentication token is required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return credentials.credentials


async def get_current_user(token: str = Depends(get_bearer_token)) -> AccessClaims:
    """
    Dependency to extract and verify the access token from the Authorization header.

    Stateless: signature and expiry only, no session lookup.

    Returns:
        Validated AccessClaims

    Raises:
        ClientError: 401 if token is missing, invalid or expired
    """
    validated = validate_access_token(token)
    if validated.is_err():
        raise ClientError(validated.error, status_code=status.HTTP_401_UNAUTHORIZED)
    return validated.value


def require_roles(*roles: str):
    """
    Dependency factory: 401 without a valid token, 403 with the wrong role.
    """

    async def check_roles(claims: AccessClaims = Depends(get_current_user)) -> AccessClaims:
        allowed = authorize(claims, roles)
        if allowed.is_err():
            raise ClientError(allowed.error, status_code=status.HTTP_403_FORBIDDEN)
        return claims

    return check_roles


require_admin = require_roles(*ApplicationConfig.ADMIN_ROLES)

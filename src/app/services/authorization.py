"""
Authorization Guard

Pure role and permission checks over validated access-token claims.
"""

from typing import Iterable

from src.libs.result import Error, Result, Return


def _normalize(role_name) -> str:
    return (role_name or "").strip().casefold()


def authorize(claims, required_roles: Iterable[str]) -> Result[None]:
    """
    Allow if the claims' role is one of required_roles.

    Role names compare case-insensitively ("Admin" == "admin"). Callers must
    only pass claims that already validated; a missing or invalid token is an
    authentication failure, handled before this point.
    """
    allowed = {_normalize(role) for role in required_roles}
    if _normalize(claims.role_name) in allowed:
        return Return.ok(None)
    return Return.err(Error("FORBIDDEN", "Insufficient permissions"))

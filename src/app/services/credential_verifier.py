"""
Credential Verifier

Checks an identifier + password pair against the user store.
"""

import logging

from src.app.services.password_hasher import DUMMY_PASSWORD_HASH, verify_password
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = Error("INVALID_CREDENTIALS", "Invalid credentials")


class CredentialVerifier:
    """
    Business Rules:
    - Identifier matches email, username or employee code, case-insensitively
    - User must be active and not deleted
    - Every failure returns the same INVALID_CREDENTIALS error, so callers
      cannot tell an unknown identifier from a wrong password
    - A bcrypt check always runs, even for unknown identifiers
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def verify(self, identifier: str, password: str) -> Result[User]:
        """
        Verify credentials. Must be called inside an open unit of work.

        Returns:
            Result with the User, or INVALID_CREDENTIALS
        """
        user = await self.uow.users.get_by_identifier(identifier)

        if user is None:
            verify_password(password, DUMMY_PASSWORD_HASH)
            logger.info("Login rejected: unknown identifier")
            return Return.err(INVALID_CREDENTIALS)

        password_valid = verify_password(password, user.password_hash)

        if not user.can_login:
            logger.info(f"Login rejected: user {user.id} inactive or deleted")
            return Return.err(INVALID_CREDENTIALS)

        if not password_valid:
            logger.info(f"Login rejected: wrong password for user {user.id}")
            return Return.err(INVALID_CREDENTIALS)

        return Return.ok(user)

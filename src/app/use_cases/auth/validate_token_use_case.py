from src.api.utils.jwt import validate_access_token
from src.libs.result import Result, Return
from .dtos import ValidateTokenResponse


class ValidateTokenUseCase:
    """
    Stateless access token validation.

    Signature and expiry only; no session lookup. A revoked session's access
    tokens keep validating until they expire.
    """

    def execute(self, access_token: str) -> Result[ValidateTokenResponse]:
        validated = validate_access_token(access_token)
        if validated.is_err():
            return Return.err(validated.error)
        return Return.ok(ValidateTokenResponse(is_valid=True, claims=validated.value))

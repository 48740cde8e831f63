import bcrypt

from config import ApplicationConfig


def hash_password(password: str) -> str:
    """bcrypt hash with the configured cost factor"""
    salt = bcrypt.gensalt(ApplicationConfig.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time bcrypt comparison; malformed hashes never match"""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, AttributeError):
        return False


# Compared against when the identifier is unknown so both failure paths cost
# one bcrypt verification.
DUMMY_PASSWORD_HASH = bcrypt.hashpw(
    b"dummy_password", bcrypt.gensalt(ApplicationConfig.BCRYPT_ROUNDS)
).decode()

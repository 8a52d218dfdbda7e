"""
Password hashing for dealer credentials.

Dealer accounts carry a login password. It is stored as a bcrypt hash and
never returned by the API.
"""

from passlib.context import CryptContext

from dealerhub.core.logging import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=12,
    bcrypt__ident="2b",
)


class PasswordError(Exception):
    """Raised when a dealer password cannot be hashed."""

    def __init__(self, message: str, code: str, **context):
        super().__init__(message)
        self.code = code
        self.context = context


def hash_password(password: str) -> str:
    """
    Hash a dealer password with bcrypt.

    Raises:
        PasswordError: If the password is empty or the backend fails
    """
    if not password:
        raise PasswordError("Password cannot be empty", code="EMPTY_PASSWORD")

    try:
        return pwd_context.hash(password)
    except (ValueError, TypeError) as e:
        logger.error("Password hashing failed", error=str(e), error_type=type(e).__name__)
        raise PasswordError("Failed to hash password", code="HASH_FAILED") from e

"""Password hashing for locally authenticated users."""

from passlib.context import CryptContext

MIN_PASSWORD_LENGTH = 8

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check ``password`` against a stored hash; users without a hash never match."""
    if not password or not password_hash:
        return False
    return _pwd_context.verify(password, password_hash)

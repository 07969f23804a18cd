"""Password hashing and verification, and API key generation."""

import secrets

import bcrypt

from filedrop.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation (input validation).
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 64
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Checked when a username does not exist so that path costs one bcrypt round trip too.
_DUMMY_HASH = bcrypt.hashpw(b"filedrop-timing-equalizer", bcrypt.gensalt(rounds=BCRYPT_ROUNDS))


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def check_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored bcrypt hash.

    Raises ValueError or TypeError when the stored hash is malformed; callers
    decide how to report that.
    """
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))


def burn_password_check(plain_password: str) -> None:
    """Spend the same work as a real check, against a hash nobody owns."""
    bcrypt.checkpw(plain_password.encode("utf-8")[:72], _DUMMY_HASH)


def generate_api_key() -> str:
    """Return a new random bearer token for an account."""
    return secrets.token_urlsafe(settings.API_KEY_BYTES)

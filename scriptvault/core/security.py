"""Password hashing and credential validation rules."""

import hmac
import re
import secrets

import bcrypt

# bcrypt-pbkdf rounds are linear (not a log2 cost); bcrypt warns below 50.
KDF_ROUNDS = 64
KDF_KEY_BYTES = 32
SALT_BYTES = 16
HASH_SEPARATOR = ":"

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 64
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

# Usernames become part of object-store keys, so only path-safe characters.
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _derive(plain_password: str, salt: bytes) -> bytes:
    return bcrypt.kdf(
        password=plain_password.encode("utf-8"),
        salt=salt,
        desired_key_bytes=KDF_KEY_BYTES,
        rounds=KDF_ROUNDS,
    )


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password as 'salt_hex:derived_hex'. Do not store plain passwords."""
    salt = secrets.token_bytes(SALT_BYTES)
    derived = _derive(plain_password, salt)
    return f"{salt.hex()}{HASH_SEPARATOR}{derived.hex()}"


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Malformed hashes never match."""
    try:
        salt_hex, derived_hex = hashed.split(HASH_SEPARATOR)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(derived_hex)
    except (ValueError, TypeError, AttributeError):
        return False
    if not salt or len(expected) != KDF_KEY_BYTES:
        return False
    try:
        candidate = _derive(plain_password, salt)
    except (ValueError, TypeError):
        return False
    return hmac.compare_digest(candidate, expected)


def username_problem(username: str) -> str | None:
    """Return why a username is unacceptable, or None if it is fine."""
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        return (
            f"Username must be {USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} characters."
        )
    if not USERNAME_PATTERN.match(username):
        return "Username may only contain letters, digits, '.', '_' and '-'."
    return None


def password_problem(password: str) -> str | None:
    """Return why a password is unacceptable, or None if it is fine."""
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        return (
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters."
        )
    return None

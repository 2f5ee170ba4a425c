"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor is fixed by configuration (10 rounds by default).

An empty hash is the "no password set" marker for Google-only accounts;
it never verifies.
"""

import re
from typing import Optional

import bcrypt

DEFAULT_ROUNDS = 10

_PASSWORD_RULES: list[tuple[re.Pattern, str]] = [
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter."),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter."),
    (re.compile(r"[0-9]"), "Password must contain at least one number."),
]


def _password_bytes(password: str) -> bytes:
    """UTF-8 bytes, truncated to bcrypt's 72-byte limit.

    Raises UnicodeEncodeError for strings that aren't valid text
    (lone surrogates); password_problem() rejects those up front.
    """
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt.

    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash. Never raises for str input."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def password_problem(password: str) -> Optional[str]:
    """Return the first rule the password breaks, or None."""
    if len(password) < 8:
        return "Password must be at least 8 characters long."
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(password):
            return message
    try:
        _password_bytes(password)
    except UnicodeEncodeError:
        return "Password contains invalid characters."
    return None

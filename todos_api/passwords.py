"""
Salted one-way password hashing backed by bcrypt.
"""

from __future__ import annotations

import secrets
from functools import lru_cache

import bcrypt

DEFAULT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Recompute the hash of ``password`` with the stored salt and compare."""
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"), password_hash.encode("utf-8")
        )
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


@lru_cache(maxsize=None)
def dummy_password_hash(rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Hash of a random password nobody knows. Checking against it for unknown
    usernames keeps failed logins equally slow either way.
    """
    return hash_password(secrets.token_urlsafe(32), rounds=rounds)

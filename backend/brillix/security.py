# Overview: bcrypt primitives shared by the account model and the auth service.

from __future__ import annotations

import bcrypt
from flask import current_app


def hash_password(password: str, rounds: int | None = None) -> str:
    """
    Hash password with a fresh bcrypt salt.

    Cost factor comes from BCRYPT_ROUNDS unless given explicitly.
    """
    if rounds is None:
        rounds = current_app.config.get("BCRYPT_ROUNDS", 10)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise.
    bcrypt.checkpw() is timing-safe.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False

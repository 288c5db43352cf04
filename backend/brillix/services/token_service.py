# Overview: Service-layer operations for identity tokens; signs and verifies JWTs.

"""
Identity Token Service

Tokens are stateless HS256 JWTs carrying the account id as the subject.
There is no server-side session table: logout is a client-side discard and a
token stays valid until it expires.

Lifetime comes from JWT_EXPIRES_IN ("7d" by default).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone

import jwt
from flask import current_app

from ..time_utils import parse_duration, utcnow


class TokenError(Exception):
    """Raised when a token is missing, malformed, tampered with, or expired."""
    pass


@dataclass
class TokenClaims:
    user_id: int


def issue_token(user_id: int) -> str:
    """Sign a time-limited token for the given account id."""
    config = current_app.config
    now = utcnow().replace(tzinfo=timezone.utc)
    lifetime = parse_duration(config.get("JWT_EXPIRES_IN", "7d"))

    payload = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
    }
    return jwt.encode(payload, config["JWT_SECRET_KEY"], algorithm=config.get("JWT_ALGORITHM", "HS256"))


def verify_token(token: str) -> TokenClaims:
    """
    Verify signature and expiry, returning the decoded claims.

    Raises TokenError for any invalid token.
    """
    if not token:
        raise TokenError("Token missing")

    config = current_app.config
    try:
        payload = jwt.decode(
            token,
            config["JWT_SECRET_KEY"],
            algorithms=[config.get("JWT_ALGORITHM", "HS256")],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError("Invalid token") from exc

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise TokenError("Invalid token subject") from exc

    return TokenClaims(user_id=user_id)

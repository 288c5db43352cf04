# Overview: Request decorators for API routes: authentication, roles, rate limits.

from functools import wraps
from flask import current_app, g, request

from .extensions import db
from .errors import AuthenticationError, AuthorizationError, RateLimitExceeded
from .models import User
from .services import token_service
from .services.token_service import TokenError


NO_TOKEN_MESSAGE = "Not authorized to access this route. No token provided."
INVALID_TOKEN_MESSAGE = "Not authorized. Invalid token."


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer"):
        return None
    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or not parts[1].strip():
        return None
    return parts[1].strip()


def resolve_current_user(token: str | None) -> User:
    """
    Turn a bearer token into an active account.

    Raises AuthenticationError if:
    - No token
    - Invalid or expired token
    - Account no longer exists
    - Account deactivated
    """
    if not token:
        raise AuthenticationError(NO_TOKEN_MESSAGE)

    try:
        claims = token_service.verify_token(token)
    except TokenError as e:
        current_app.logger.warning("Token verification failed: %s", e)
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)

    user = db.session.get(User, claims.user_id)

    if not user:
        raise AuthenticationError("User no longer exists")

    if not user.is_active:
        raise AuthenticationError("Your account has been deactivated")

    return user


def require_auth(f):
    """
    Require a valid bearer token.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User (password hash never serialized)
    - g.current_business: Reduced business projection (id, name, industry, plan), or None
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = resolve_current_user(_bearer_token())

        g.current_user = user
        g.current_business = user.business.to_summary_dict() if user.business else None

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Require the authenticated user's role to be one of roles.

    Must be applied below @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = getattr(g, "current_user", None)
            if user is None:
                raise AuthenticationError(NO_TOKEN_MESSAGE)

            if user.role not in roles:
                current_app.logger.warning(
                    "Role %s denied on %s %s", user.role, request.method, request.path
                )
                raise AuthorizationError(f"User role '{user.role}' is not authorized to access this route")

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def optional_auth(f):
    """
    Attach the account when a valid token is present; never reject.

    g.current_user is None for anonymous callers or on any token failure.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.current_user = None
        g.current_business = None

        token = _bearer_token()
        if token:
            try:
                user = resolve_current_user(token)
            except AuthenticationError:
                current_app.logger.debug("Optional auth: invalid token")
            else:
                g.current_user = user
                g.current_business = user.business.to_summary_dict() if user.business else None

        return f(*args, **kwargs)

    return decorated_function


def client_ip() -> str:
    return request.remote_addr or "unknown"


def check_rate_limit(limiter_name: str) -> None:
    """Count this request against a named limiter; raise RateLimitExceeded on breach."""
    if not current_app.config.get("RATELIMIT_ENABLED", True):
        return

    limiter = current_app.extensions["rate_limiters"][limiter_name]
    ip_address = client_ip()
    result = limiter.hit(ip_address)
    # Most specific limiter wins: route limiters run after the general one
    g.rate_limit = result

    if not result.allowed:
        current_app.logger.warning("Rate limit '%s' exceeded for IP: %s", limiter_name, ip_address)
        raise RateLimitExceeded(limiter.message, retry_after=result.reset_in)


def rate_limit(limiter_name: str):
    """Apply a named per-IP limiter ("auth", "register", ...) to a route."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            check_rate_limit(limiter_name)
            return f(*args, **kwargs)

        return decorated_function
    return decorator

"""
BlogQL — Authentication Middleware
===================================

What:  Decodes the bearer token of every request and attaches an AuthContext
       to `request.state.auth`.
Why:   Resolvers need to know who is calling, but public operations
       (createUser, login) must still work without a token. So this
       middleware only annotates; it never rejects.
How:   Transition rule, run once per request:
           no Authorization header          → unauthenticated
           not "Bearer <token>"             → unauthenticated
           token fails verification         → unauthenticated
           token verifies                   → authenticated(user_id, email)

Which of the failure cases happened is logged at DEBUG only and never
reaches the client. Accepted tokens log their issue and expiry times at
DEBUG as well.
"""

import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blogql.auth import AuthContext, InvalidTokenError, decode_access_token

logger = logging.getLogger(__name__)


def extract_bearer_token(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_auth_context(header: Optional[str]) -> AuthContext:
    token = extract_bearer_token(header)
    if token is None:
        return AuthContext.anonymous()
    try:
        claims = decode_access_token(token)
    except InvalidTokenError as e:
        logger.debug("Rejected bearer token: %s", e)
        return AuthContext.anonymous()
    logger.debug(
        "Authenticated user %s (token issued %s, expires %s)",
        claims.user_id,
        claims.issued_at.isoformat(),
        claims.expires_at.isoformat(),
    )
    return AuthContext.for_subject(user_id=claims.user_id, email=claims.email)


class AuthMiddleware(BaseHTTPMiddleware):
    """Attaches `request.state.auth` and passes every request through."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.auth = resolve_auth_context(request.headers.get("Authorization"))
        return await call_next(request)


def get_auth_context(request: Request) -> AuthContext:
    """FastAPI dependency: the context attached by AuthMiddleware (anonymous if absent)."""
    return getattr(request.state, "auth", None) or AuthContext.anonymous()

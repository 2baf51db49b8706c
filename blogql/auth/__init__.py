"""
BlogQL — Authentication Primitives
===================================

What:  Password hashing (bcrypt) and access-token signing (JWT via python-jose).
Why:   Kept free of HTTP and database concerns so the middleware, the
       services, and the tests all share one implementation.
"""

from blogql.auth.context import AuthContext
from blogql.auth.passwords import (
    hash_password,
    hash_password_async,
    verify_password,
    verify_password_async,
)
from blogql.auth.tokens import (
    InvalidTokenError,
    TokenClaims,
    create_access_token,
    decode_access_token,
)

__all__ = [
    "AuthContext",
    "InvalidTokenError",
    "TokenClaims",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "hash_password_async",
    "verify_password",
    "verify_password_async",
]

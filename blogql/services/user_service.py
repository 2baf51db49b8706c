"""
BlogQL — User Service (registration and login)
===============================================

What:  Business logic behind the createUser mutation and the login query.
How:   Validation gate → repository lookups → bcrypt → repository writes /
       token issuing. No HTTP or GraphQL types in here.

Flow (register):
    validate email + password ──▶ email taken? ──▶ hash ──▶ persist ──▶ UserResponse
          │ 422                        │ 409

Flow (login):
    find by email ──▶ verify password ──▶ issue token ──▶ AuthData
          │ 401            │ 401
"""

import logging

from blogql.auth import create_access_token, hash_password_async, verify_password_async
from blogql.exceptions import ConflictError, UnauthorizedError
from blogql.repositories.base import UserRepository
from blogql.schemas.blog import AuthData, UserResponse
from blogql.validation import ensure_valid, validate_user_input

logger = logging.getLogger(__name__)


class UserService:
    """Stateless apart from the repository it is handed for the request."""

    def __init__(self, users: UserRepository):
        self.users = users

    async def register(self, email: str, name: str, password: str) -> UserResponse:
        """
        Create a user account.

        Raises:
            InvalidInputError: email malformed and/or password too short (422)
            ConflictError: a user with this email already exists (409)
        """
        ensure_valid(validate_user_input(email, password))

        existing = await self.users.find_by_email(email)
        if existing is not None:
            raise ConflictError(context={"email": email})

        password_hash = await hash_password_async(password)
        user = await self.users.create(email=email, name=name, password_hash=password_hash)
        logger.info("User registered: %s", user.id)
        return UserResponse.from_model(user)

    async def login(self, email: str, password: str) -> AuthData:
        """
        Exchange credentials for a one-hour access token.

        Raises:
            UnauthorizedError: unknown email or wrong password (401)
        """
        user = await self.users.find_by_email(email)
        if user is None:
            raise UnauthorizedError("User not found.")

        if not await verify_password_async(password, user.password):
            raise UnauthorizedError("Password is incorrect.", context={"user_id": str(user.id)})

        token = create_access_token(user_id=str(user.id), email=user.email)
        logger.info("User logged in: %s", user.id)
        return AuthData(token=token, user_id=str(user.id))

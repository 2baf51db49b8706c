"""
BlogQL — GraphQL Request Context
=================================

What:  Builds the context every resolver receives.
How:   Used as the GraphQLRouter's `context_getter`, which FastAPI resolves
       like any other dependency. The session comes from get_db_session, so
       the whole GraphQL request shares one transaction; the auth context
       comes from AuthMiddleware via request.state.

Context keys (merged by strawberry with `request` and `response`):
    db            AsyncSession for this request
    auth          AuthContext (authenticated or not, never missing)
    user_service  UserService bound to this session
    post_service  PostService bound to this session
"""

from typing import Any, Dict

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from blogql.auth import AuthContext
from blogql.database import get_db_session
from blogql.middleware.auth import get_auth_context
from blogql.repositories import SQLPostRepository, SQLUserRepository
from blogql.services.post_service import PostService
from blogql.services.user_service import UserService


async def get_context(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    auth: AuthContext = Depends(get_auth_context),
) -> Dict[str, Any]:
    users = SQLUserRepository(db)
    posts = SQLPostRepository(db)
    return {
        "db": db,
        "auth": auth,
        "user_service": UserService(users),
        "post_service": PostService(users, posts),
    }

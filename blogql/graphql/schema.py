"""
BlogQL — GraphQL Schema and Router
===================================

What:  The Query and Mutation resolvers, the executable schema, and the
       FastAPI router that serves it at /graphql.
Why:   Resolvers stay thin: they unpack arguments, call a service from the
       request context and convert the service's response schema into the
       GraphQL type. All rules (auth, ownership, validation) live in the
       services.
How:
    Query
        login(email, password)        → AuthData        public
        posts(page)                   → PostData        authenticated
        post(id)                      → Post            authenticated
    Mutation
        createUser(userInput)         → User            public
        createPost(postInput)         → Post            authenticated
        updatePost(id, postInput)     → Post            creator only
        deletePost(id)                → Boolean         creator only

Transaction handling:
    strawberry turns resolver exceptions into entries of the `errors` array,
    so they never reach get_db_session's rollback branch. TransactionExtension
    therefore ends the transaction itself while the operation is still
    executing: it commits when there were no errors and rolls back when there
    were. A client is only told an operation succeeded after its writes are
    committed; get_db_session runs after the response and has nothing left
    to persist.
"""

import logging
from typing import Any, Dict, List, Optional

import strawberry
from graphql import GraphQLError
from sqlalchemy.exc import SQLAlchemyError
from starlette.requests import Request
from strawberry.extensions import SchemaExtension
from strawberry.fastapi import GraphQLRouter
from strawberry.http import GraphQLHTTPResponse
from strawberry.types import ExecutionContext, ExecutionResult, Info

from blogql.config import settings
from blogql.exceptions import DatabaseError, InvalidInputError
from blogql.graphql.context import get_context
from blogql.graphql.errors import format_error, is_unexpected
from blogql.graphql.types import (
    AuthDataType,
    PostDataType,
    PostInputData,
    PostType,
    UserInputData,
    UserType,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Resolvers
# ══════════════════════════════════════════════════════════════════════════


@strawberry.type
class Query:
    @strawberry.field
    async def login(self, info: Info, email: str, password: str) -> AuthDataType:
        auth_data = await info.context["user_service"].login(email, password)
        return AuthDataType.from_schema(auth_data)

    @strawberry.field
    async def posts(self, info: Info, page: Optional[int] = None) -> PostDataType:
        page_data = await info.context["post_service"].list_posts(info.context["auth"], page)
        return PostDataType.from_schema(page_data)

    @strawberry.field
    async def post(self, info: Info, id: strawberry.ID) -> PostType:
        post = await info.context["post_service"].get_post(info.context["auth"], id)
        return PostType.from_schema(post)


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_user(self, info: Info, user_input: UserInputData) -> UserType:
        user = await info.context["user_service"].register(
            email=user_input.email,
            name=user_input.name,
            password=user_input.password,
        )
        return UserType.from_schema(user)

    @strawberry.mutation
    async def create_post(self, info: Info, post_input: PostInputData) -> PostType:
        post = await info.context["post_service"].create_post(
            info.context["auth"],
            title=post_input.title,
            content=post_input.content,
            image_url=post_input.image_url,
        )
        return PostType.from_schema(post)

    @strawberry.mutation
    async def update_post(
        self, info: Info, id: strawberry.ID, post_input: PostInputData
    ) -> PostType:
        post = await info.context["post_service"].update_post(
            info.context["auth"],
            id,
            title=post_input.title,
            content=post_input.content,
            image_url=post_input.image_url,
        )
        return PostType.from_schema(post)

    @strawberry.mutation
    async def delete_post(self, info: Info, id: strawberry.ID) -> bool:
        return await info.context["post_service"].delete_post(info.context["auth"], id)


# ══════════════════════════════════════════════════════════════════════════
# Schema
# ══════════════════════════════════════════════════════════════════════════


class TransactionExtension(SchemaExtension):
    """
    Ends the request's transaction before the response is built.

    No errors → commit. Any error → roll back, so a document with several
    mutations persists all of them or none. A commit that fails turns the
    result into a single 500 error instead of a reported success.
    """

    async def on_execute(self):
        yield
        result = self.execution_context.result
        db = self.execution_context.context.get("db")
        if result is None or db is None:
            return
        if result.errors:
            await db.rollback()
            logger.debug("Rolled back transaction after %d error(s)", len(result.errors))
            return
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Commit failed: %s", str(e))
            error = DatabaseError(context={"error_type": type(e).__name__})
            result.data = None
            result.errors = [GraphQLError(error.message, original_error=error)]


class BlogSchema(strawberry.Schema):
    """Logs application errors briefly and unexpected ones with traceback."""

    def process_errors(
        self,
        errors: List[GraphQLError],
        execution_context: Optional[ExecutionContext] = None,
    ) -> None:
        for error in errors:
            if is_unexpected(error):
                logger.error(
                    "Unexpected error resolving %s: %s",
                    error.path,
                    error.original_error,
                    exc_info=error.original_error,
                )
            elif isinstance(error.original_error, InvalidInputError):
                logger.info(
                    "Invalid input at %s: %s",
                    error.path,
                    "; ".join(item["message"] for item in error.original_error.errors),
                )
            else:
                logger.warning("GraphQL error at %s: %s", error.path, error.message)


schema = BlogSchema(
    query=Query,
    mutation=Mutation,
    extensions=[TransactionExtension],
)


# ══════════════════════════════════════════════════════════════════════════
# Router
# ══════════════════════════════════════════════════════════════════════════


class BlogGraphQLRouter(GraphQLRouter):
    """GraphQLRouter whose error entries follow `format_error`."""

    async def process_result(
        self, request: Request, result: ExecutionResult
    ) -> GraphQLHTTPResponse:
        data: Dict[str, Any] = {"data": result.data}
        if result.errors:
            data["errors"] = [format_error(error) for error in result.errors]
        if result.extensions:
            data["extensions"] = result.extensions
        return data


def create_graphql_router() -> BlogGraphQLRouter:
    return BlogGraphQLRouter(
        schema,
        context_getter=get_context,
        graphql_ide="graphiql" if settings.graphiql else None,
    )

"""
BlogQL — Post Service (Business Logic Orchestrator)
====================================================

What:  Create, list, fetch, update and delete posts on behalf of the
       authenticated subject.
Why:   Keeps the authorization rules in one place, independent of GraphQL:
       every operation requires an authenticated context, and only a post's
       creator may change or remove it.
How:   Composes the validation gate, the auth context, the repositories and
       the file service.

Check order (every operation is a single pass, no retries):
    authenticated? ─401─▶ post exists? ─404─▶ creator? ─403─▶ input valid? ─422─▶ write

Consistency:
    createPost and deletePost touch both the post and its creator's
    collection. With the SQL repositories both writes share the request's
    transaction, so a failure between them rolls back both.
"""

import logging
from typing import Optional
from uuid import UUID

from blogql.auth import AuthContext
from blogql.config import settings
from blogql.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from blogql.models import Post, User
from blogql.repositories.base import PostRepository, UserRepository
from blogql.schemas.blog import PostPage, PostResponse
from blogql.services.file_service import FileService, file_service
from blogql.validation import ensure_valid, validate_post_input

logger = logging.getLogger(__name__)

# Clients send this literal for "keep the current image" on update
UNCHANGED_IMAGE = "undefined"


def _require_auth(auth: AuthContext) -> str:
    if not auth.is_auth or not auth.user_id:
        raise UnauthorizedError("Not authenticated!")
    return auth.user_id


def _parse_post_id(post_id: str) -> UUID:
    try:
        return UUID(str(post_id))
    except ValueError:
        # Not a well-formed id, so no such post can exist
        raise NotFoundError(resource_id=str(post_id)) from None


class PostService:
    """
    Post operations for one request.

    Responsibilities:
        - create_post(): validate, resolve the acting user, persist, attach
        - list_posts(): fixed-size pages, newest first, with total count
        - get_post(): single post with creator
        - update_post(): creator-only field update
        - delete_post(): creator-only removal, including the image file
    """

    def __init__(
        self,
        users: UserRepository,
        posts: PostRepository,
        files: Optional[FileService] = None,
    ):
        self.users = users
        self.posts = posts
        self.files = files or file_service

    async def _acting_user(self, user_id: str) -> User:
        try:
            user = await self.users.find_by_id(UUID(user_id))
        except ValueError:
            user = None
        if user is None:
            raise UnauthorizedError("Invalid user.", context={"user_id": user_id})
        return user

    async def _owned_post(self, auth: AuthContext, post_id: str) -> Post:
        """Fetch a post and check the acting subject created it."""
        user_id = _require_auth(auth)
        post = await self.posts.find_by_id(_parse_post_id(post_id))
        if post is None:
            raise NotFoundError(resource_id=str(post_id))
        if str(post.creator_id) != user_id:
            logger.warning("User %s denied access to post %s", user_id, post.id)
            raise ForbiddenError(context={"post_id": str(post.id), "user_id": user_id})
        return post

    async def create_post(
        self,
        auth: AuthContext,
        title: str,
        content: str,
        image_url: Optional[str] = None,
    ) -> PostResponse:
        """
        Raises:
            UnauthorizedError: no authenticated subject, or subject unknown (401)
            InvalidInputError: title and/or content too short (422)
        """
        user_id = _require_auth(auth)
        ensure_valid(validate_post_input(title, content))

        user = await self._acting_user(user_id)
        post = await self.posts.create(
            title=title,
            content=content,
            image_url=image_url,
            creator=user,
        )
        await self.users.add_post(user, post)
        logger.info("Post %s created by %s", post.id, user.id)
        return PostResponse.from_model(post)

    async def list_posts(self, auth: AuthContext, page: Optional[int] = None) -> PostPage:
        _require_auth(auth)
        current_page = page if page and page > 0 else 1
        per_page = settings.posts_per_page

        posts, total = await self.posts.list_page(
            offset=(current_page - 1) * per_page,
            limit=per_page,
        )
        return PostPage(
            posts=[PostResponse.from_model(post) for post in posts],
            total_posts=total,
        )

    async def get_post(self, auth: AuthContext, post_id: str) -> PostResponse:
        _require_auth(auth)
        post = await self.posts.find_by_id(_parse_post_id(post_id))
        if post is None:
            raise NotFoundError(resource_id=str(post_id))
        return PostResponse.from_model(post)

    async def update_post(
        self,
        auth: AuthContext,
        post_id: str,
        title: str,
        content: str,
        image_url: Optional[str] = None,
    ) -> PostResponse:
        post = await self._owned_post(auth, post_id)
        ensure_valid(validate_post_input(title, content))

        post.title = title
        post.content = content
        if image_url is not None and image_url != UNCHANGED_IMAGE:
            post.image_url = image_url

        post = await self.posts.save(post)
        logger.info("Post %s updated", post.id)
        return PostResponse.from_model(post)

    async def delete_post(self, auth: AuthContext, post_id: str) -> bool:
        """
        Remove a post, its image file and the creator's reference to it.

        The image deletion is best-effort: a missing or undeletable file is
        logged and does not stop the post from being deleted.
        """
        post = await self._owned_post(auth, post_id)
        deleted_id = post.id

        if post.image_url:
            await self.files.clear_image(post.image_url)

        await self.posts.delete(post)

        user = await self.users.find_by_id(UUID(auth.user_id))
        if user is not None:
            await self.users.remove_post(user, deleted_id)
        else:
            logger.warning("Creator %s of deleted post %s not found", auth.user_id, deleted_id)

        logger.info("Post %s deleted", deleted_id)
        return True

"""
BlogQL — SQLAlchemy Repositories
=================================

What:  Async SQLAlchemy implementations of the persistence interface.
How:   Each repository wraps the request's AsyncSession. Writes are flushed
       immediately (ids and timestamps become readable) and committed once
       by the caller when the operation finishes.

Relational mapping of the user's post collection:
    The collection is the set of rows in `posts` whose creator_id points at
    the user. Appending a post therefore only has to keep the in-memory
    collection in sync; deleting the post row already removes the reference
    from storage.

Loading:
    A post is always returned with `creator` and the creator's `posts`
    collection populated. Responses list the creator's post ids, and under
    asyncio an attribute that is still unloaded cannot be fetched lazily.
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from blogql.exceptions import ConflictError, DatabaseError
from blogql.models import Post, User
from blogql.repositories.base import PostRepository, UserRepository

logger = logging.getLogger(__name__)

# Post -> creator -> creator's posts
_WITH_CREATOR = selectinload(Post.creator).selectinload(User.posts)


class SQLUserRepository(UserRepository):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == email).options(selectinload(User.posts))
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        return await self.db.get(User, user_id, options=[selectinload(User.posts)])

    async def create(self, email: str, name: str, password_hash: str) -> User:
        user = User(email=email, name=name, password=password_hash, posts=[])
        self.db.add(user)
        try:
            # Only reachable when a concurrent registration wins the race past
            # the service's email check. The failed flush leaves the session
            # inactive and the request's transaction is rolled back as a whole.
            await self.db.flush()
        except IntegrityError as e:
            logger.info("Duplicate registration rejected for %s", email)
            raise ConflictError(context={"email": email}) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__}) from e
        return user

    async def add_post(self, user: User, post: Post) -> None:
        # Post(creator=user) already appended through the back-reference
        if post not in user.posts:
            user.posts.append(post)
        await self.db.flush()

    async def remove_post(self, user: User, post_id: UUID) -> None:
        # The row is gone once the post is deleted; only the loaded
        # collection still holds it
        remaining = [post for post in user.posts if post.id != post_id]
        set_committed_value(user, "posts", remaining)


class SQLPostRepository(PostRepository):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        title: str,
        content: str,
        image_url: Optional[str],
        creator: User,
    ) -> Post:
        post = Post(
            title=title,
            content=content,
            image_url=image_url,
            creator=creator,
        )
        self.db.add(post)
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating post: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__}) from e
        return post

    async def find_by_id(self, post_id: UUID) -> Optional[Post]:
        result = await self.db.execute(
            select(Post).where(Post.id == post_id).options(_WITH_CREATOR)
        )
        return result.scalar_one_or_none()

    async def list_page(self, offset: int, limit: int) -> Tuple[List[Post], int]:
        query = (
            select(Post)
            .options(_WITH_CREATOR)
            .order_by(desc(Post.created_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        posts = list(result.scalars().all())

        count_result = await self.db.execute(select(func.count(Post.id)))
        total = count_result.scalar() or 0
        return posts, total

    async def save(self, post: Post) -> Post:
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating post %s: %s", post.id, str(e))
            raise DatabaseError(context={"post_id": str(post.id)}) from e
        return post

    async def delete(self, post: Post) -> None:
        await self.db.delete(post)
        await self.db.flush()

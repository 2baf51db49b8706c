"""
BlogQL — Abstract Persistence Interface
========================================

What:  Abstract base classes defining the storage contract for users and posts.
Why:   Services depend only on these contracts, not on SQLAlchemy. Any store
       that offers atomic single-record operations can implement them.
How:   Concrete implementations inherit from UserRepository / PostRepository.
Who:   UserService and PostService call these; SQL implementations live in
       blogql.repositories.sql.

Contract notes:
    - Every write is visible to later reads within the same request.
    - Multi-step sequences (create post, then attach to user) are only atomic
      if the implementation shares one transaction across them. The SQL
      implementation does; see blogql.database.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from uuid import UUID

from blogql.models import Post, User


class UserRepository(ABC):
    """Create and look up users, and maintain their post collections."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Exact (case-sensitive) email match, or None."""
        ...

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        """User with its posts collection loaded, or None."""
        ...

    @abstractmethod
    async def create(self, email: str, name: str, password_hash: str) -> User:
        """
        Persist a new user with an empty posts collection.

        Raises:
            ConflictError: the email is already taken (checked by the store,
                even if the caller already looked it up).
        """
        ...

    @abstractmethod
    async def add_post(self, user: User, post: Post) -> None:
        """Append ``post`` to the user's collection (idempotent)."""
        ...

    @abstractmethod
    async def remove_post(self, user: User, post_id: UUID) -> None:
        """Drop the reference to ``post_id`` from the user's collection."""
        ...


class PostRepository(ABC):
    """CRUD over posts."""

    @abstractmethod
    async def create(
        self,
        title: str,
        content: str,
        image_url: Optional[str],
        creator: User,
    ) -> Post:
        """Persist a post; id and timestamps are assigned here."""
        ...

    @abstractmethod
    async def find_by_id(self, post_id: UUID) -> Optional[Post]:
        """Post with its creator populated, or None."""
        ...

    @abstractmethod
    async def list_page(self, offset: int, limit: int) -> Tuple[List[Post], int]:
        """
        One page of posts, newest first, creators populated.

        Returns:
            (posts on this page, total number of posts across all pages)
        """
        ...

    @abstractmethod
    async def save(self, post: Post) -> Post:
        """Persist field changes; refreshes updated_at."""
        ...

    @abstractmethod
    async def delete(self, post: Post) -> None:
        ...

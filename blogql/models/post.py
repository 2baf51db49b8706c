"""
BlogQL — Post SQLAlchemy Model
===============================

What:  ORM model representing the `posts` table.
Who:   Used by the SQL repositories and by Alembic for schema management.

Table Design Rationale:
    - creator_id: NOT NULL foreign key; a post always has exactly one creator
    - image_url: public path of the stored image ("images/2024/01/15/<uuid>.png")
    - created_at / updated_at: UTC, maintained here rather than by resolvers

    Index on created_at DESC:
        Backs the listing query (newest first, fixed-size pages).
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogql.database import Base

if TYPE_CHECKING:
    from blogql.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A blog post owned by exactly one user.

    Lifecycle:
        1. Created by createPost (creator = authenticated subject)
        2. Mutated by updatePost (creator only)
        3. Deleted by deletePost (creator only); its image file goes with it
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    image_url: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
    )

    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    creator: Mapped["User"] = relationship(
        back_populates="posts",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, title='{self.title}', "
            f"creator_id={self.creator_id})>"
        )


Index("idx_posts_created_at", Post.created_at.desc())

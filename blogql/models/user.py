"""
BlogQL — User SQLAlchemy Model
===============================

What:  ORM model representing the `users` table.
Who:   Used by the SQL repositories and by Alembic for schema management.

Table Design Rationale:
    - UUID primary key: opaque, assigned at creation, never reused
    - email: unique index; stored exactly as submitted (case-sensitive)
    - password: bcrypt hash only; the plaintext never reaches this table
    - posts: ordered by creation so the collection reads append-only
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogql.database import Base

if TYPE_CHECKING:
    from blogql.models.post import Post


class User(Base):
    """
    A registered author.

    Lifecycle:
        Created by the createUser mutation; never deleted.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # bcrypt output is 60 chars; leave headroom for other schemes
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # lazy="selectin": async sessions cannot lazy-load on attribute access,
    # so the collection is always loaded together with the user
    posts: Mapped[List["Post"]] = relationship(
        back_populates="creator",
        order_by="Post.created_at",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"

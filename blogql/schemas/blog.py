"""
BlogQL — Pydantic Response Schemas
===================================

What:  Normalized shapes the services return and the API layers expose.
Why:   The services hand back plain data, never ORM objects: ids are strings,
       timestamps are ISO-8601 strings, and the password hash is absent.
How:   `from_model` constructors do the normalization in one place; the
       GraphQL types and the REST routes only copy fields.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from blogql.models import Post, User


def to_iso(value: datetime) -> str:
    """ISO-8601 in UTC. SQLite hands timestamps back naive; they are UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class UserResponse(BaseModel):
    """
    What:  Public view of a user.
    Why:   The password hash is deliberately not a field here, so it cannot
           leak through any response built from this schema.
    """
    id: str = Field(description="User identifier")
    email: str
    name: str
    posts: List[str] = Field(
        default_factory=list,
        description="Ids of the user's posts, oldest first",
    )

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            posts=[str(post.id) for post in user.posts],
        )


class PostResponse(BaseModel):
    id: str = Field(description="Post identifier")
    title: str
    content: str
    image_url: Optional[str] = None
    creator: UserResponse
    created_at: str = Field(description="Creation timestamp (UTC ISO 8601)")
    updated_at: str = Field(description="Last update timestamp (UTC ISO 8601)")

    @classmethod
    def from_model(cls, post: Post) -> "PostResponse":
        return cls(
            id=str(post.id),
            title=post.title,
            content=post.content,
            image_url=post.image_url,
            creator=UserResponse.from_model(post.creator),
            created_at=to_iso(post.created_at),
            updated_at=to_iso(post.updated_at),
        )


class PostPage(BaseModel):
    """
    What:  One page of posts plus the total across all pages.
    How:   Offset pagination with a fixed page size (settings.posts_per_page).
    """
    posts: List[PostResponse]
    total_posts: int


class AuthData(BaseModel):
    token: str
    user_id: str


# ══════════════════════════════════════════════════════════════════════════
# REST payloads (image upload, errors, health)
# ══════════════════════════════════════════════════════════════════════════


class ImageUploadResponse(BaseModel):
    message: str
    file_path: Optional[str] = Field(
        default=None,
        serialization_alias="filePath",
        description="Public path to store in a post's imageUrl",
    )


class ErrorResponse(BaseModel):
    """
    Error body shared by the REST routes and the GraphQL formatter.

    Example:
        {"message": "Invalid input", "status": 422,
         "data": [{"message": "Title is invalid."}]}
    """
    message: str
    status: int
    data: Optional[List[dict]] = None


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float

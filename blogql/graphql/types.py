"""
GraphQL object and input types.

Field names are converted to camelCase by strawberry (`image_url` becomes
`imageUrl`). Identifiers are exposed as `_id`.
"""

from typing import List, Optional

import strawberry

from blogql.schemas.blog import AuthData, PostPage, PostResponse, UserResponse


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID = strawberry.field(name="_id")
    name: str
    email: str
    posts: List[strawberry.ID]

    @classmethod
    def from_schema(cls, user: UserResponse) -> "UserType":
        return cls(
            id=strawberry.ID(user.id),
            name=user.name,
            email=user.email,
            posts=[strawberry.ID(post_id) for post_id in user.posts],
        )


@strawberry.type(name="Post")
class PostType:
    id: strawberry.ID = strawberry.field(name="_id")
    title: str
    content: str
    image_url: Optional[str]
    creator: UserType
    created_at: str
    updated_at: str

    @classmethod
    def from_schema(cls, post: PostResponse) -> "PostType":
        return cls(
            id=strawberry.ID(post.id),
            title=post.title,
            content=post.content,
            image_url=post.image_url,
            creator=UserType.from_schema(post.creator),
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


@strawberry.type(name="AuthData")
class AuthDataType:
    token: str
    user_id: str

    @classmethod
    def from_schema(cls, auth: AuthData) -> "AuthDataType":
        return cls(token=auth.token, user_id=auth.user_id)


@strawberry.type(name="PostData")
class PostDataType:
    posts: List[PostType]
    total_posts: int

    @classmethod
    def from_schema(cls, page: PostPage) -> "PostDataType":
        return cls(
            posts=[PostType.from_schema(post) for post in page.posts],
            total_posts=page.total_posts,
        )


@strawberry.input(name="UserInputData")
class UserInputData:
    email: str
    name: str
    password: str


@strawberry.input(name="PostInputData")
class PostInputData:
    title: str
    content: str
    # Omitted and "undefined" both mean "keep the current image" on update
    image_url: Optional[str] = None

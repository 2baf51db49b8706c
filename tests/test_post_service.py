"""
BlogQL — Post Service Unit Tests
=================================

What:  Post CRUD rules: authentication, ownership, validation, pagination,
       the "undefined" image placeholder and delete side effects.
How:   TestPostServiceRules mocks the repositories (no database);
       TestPostServiceStorage runs against the SQL repositories on SQLite;
       TestPostServiceAcrossSessions opens a new session per call, as
       separate requests do.

Check order verified here:
    401 (no auth) → 404 (no post) → 403 (not creator) → 422 (bad input)
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogql.auth import AuthContext
from blogql.exceptions import (
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from blogql.repositories import SQLPostRepository, SQLUserRepository
from blogql.repositories.base import PostRepository, UserRepository
from blogql.services.post_service import PostService


@pytest.fixture
def mock_files():
    files = MagicMock()
    files.clear_image = AsyncMock()
    return files


@pytest.fixture
def mock_users():
    return AsyncMock(spec=UserRepository)


@pytest.fixture
def mock_posts():
    return AsyncMock(spec=PostRepository)


class TestPostServiceRules:

    @pytest.fixture(autouse=True)
    def _service(self, mock_users, mock_posts, mock_files):
        self.users = mock_users
        self.posts = mock_posts
        self.files = mock_files
        self.service = PostService(mock_users, mock_posts, files=mock_files)

    # ── Authentication ────────────────────────────────────────────────────

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call",
        [
            lambda s, a: s.create_post(a, "Valid title", "Valid content"),
            lambda s, a: s.list_posts(a, 1),
            lambda s, a: s.get_post(a, str(uuid4())),
            lambda s, a: s.update_post(a, str(uuid4()), "Valid title", "Valid content"),
            lambda s, a: s.delete_post(a, str(uuid4())),
        ],
        ids=["create", "list", "get", "update", "delete"],
    )
    async def test_every_operation_requires_auth(self, call):
        with pytest.raises(UnauthorizedError, match="Not authenticated!") as exc_info:
            await call(self.service, AuthContext.anonymous())

        assert exc_info.value.code == 401
        assert self.posts.method_calls == []

    @pytest.mark.asyncio
    async def test_unauthenticated_takes_precedence_over_invalid_input(self):
        with pytest.raises(UnauthorizedError):
            await self.service.create_post(AuthContext.anonymous(), "", "")

    @pytest.mark.asyncio
    async def test_create_with_unknown_acting_user(self, make_user, auth_for):
        ghost = make_user()
        self.users.find_by_id.return_value = None

        with pytest.raises(UnauthorizedError, match="Invalid user."):
            await self.service.create_post(auth_for(ghost), "Valid title", "Valid content")

        self.posts.create.assert_not_awaited()

    # ── Validation ────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_create_reports_both_field_errors(self, make_user, auth_for):
        with pytest.raises(InvalidInputError) as exc_info:
            await self.service.create_post(auth_for(make_user()), "abc", "")

        assert exc_info.value.errors == [
            {"message": "Title is invalid."},
            {"message": "Content is invalid."},
        ]
        self.posts.create.assert_not_awaited()

    # ── Existence and ownership ───────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_get_missing_post(self, make_user, auth_for):
        self.posts.find_by_id.return_value = None

        with pytest.raises(NotFoundError, match="No post found!") as exc_info:
            await self.service.get_post(auth_for(make_user()), str(uuid4()))

        assert exc_info.value.code == 404

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, make_user, auth_for):
        with pytest.raises(NotFoundError):
            await self.service.get_post(auth_for(make_user()), "not-a-uuid")

        self.posts.find_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_post_of_another_user_is_allowed(self, make_user, make_post, auth_for):
        owner = make_user()
        post = make_post(owner)
        self.posts.find_by_id.return_value = post

        result = await self.service.get_post(auth_for(make_user("bob@example.com")), str(post.id))

        assert result.id == str(post.id)
        assert result.creator.id == str(owner.id)

    @pytest.mark.asyncio
    async def test_update_by_non_creator_forbidden(self, make_user, make_post, auth_for):
        post = make_post(make_user())
        self.posts.find_by_id.return_value = post
        intruder = make_user("bob@example.com")

        with pytest.raises(ForbiddenError, match="Not authorized!") as exc_info:
            await self.service.update_post(auth_for(intruder), str(post.id), "New title", "New content")

        assert exc_info.value.code == 403
        assert post.title == "First post"
        self.posts.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_forbidden_takes_precedence_over_invalid_input(self, make_user, make_post, auth_for):
        post = make_post(make_user())
        self.posts.find_by_id.return_value = post

        with pytest.raises(ForbiddenError):
            await self.service.update_post(auth_for(make_user("bob@example.com")), str(post.id), "", "")

    @pytest.mark.asyncio
    async def test_delete_by_non_creator_forbidden(self, make_user, make_post, auth_for):
        post = make_post(make_user(), image_url="images/2024/01/15/a.png")
        self.posts.find_by_id.return_value = post

        with pytest.raises(ForbiddenError):
            await self.service.delete_post(auth_for(make_user("bob@example.com")), str(post.id))

        self.posts.delete.assert_not_awaited()
        self.files.clear_image.assert_not_awaited()

    # ── Update semantics ──────────────────────────────────────────────────

    @pytest.mark.asyncio
    @pytest.mark.parametrize("image_url", [None, "undefined"])
    async def test_update_keeps_image_for_placeholder(self, image_url, make_user, make_post, auth_for):
        owner = make_user()
        post = make_post(owner, image_url="images/old.png")
        self.posts.find_by_id.return_value = post
        self.posts.save.side_effect = lambda p: p

        result = await self.service.update_post(
            auth_for(owner), str(post.id), "New title", "New content", image_url
        )

        assert result.image_url == "images/old.png"
        assert result.title == "New title"
        assert result.content == "New content"

    @pytest.mark.asyncio
    async def test_update_replaces_image(self, make_user, make_post, auth_for):
        owner = make_user()
        post = make_post(owner, image_url="images/old.png")
        self.posts.find_by_id.return_value = post
        self.posts.save.side_effect = lambda p: p

        result = await self.service.update_post(
            auth_for(owner), str(post.id), "New title", "New content", "images/new.png"
        )

        assert result.image_url == "images/new.png"

    # ── Delete side effects ───────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_delete_clears_image_and_collection(self, make_user, make_post, auth_for):
        owner = make_user()
        post = make_post(owner, image_url="images/2024/01/15/a.png")
        self.posts.find_by_id.return_value = post
        self.users.find_by_id.return_value = owner

        assert await self.service.delete_post(auth_for(owner), str(post.id)) is True

        self.files.clear_image.assert_awaited_once_with("images/2024/01/15/a.png")
        self.posts.delete.assert_awaited_once_with(post)
        self.users.remove_post.assert_awaited_once_with(owner, post.id)

    @pytest.mark.asyncio
    async def test_delete_without_image_skips_file_removal(self, make_user, make_post, auth_for):
        owner = make_user()
        post = make_post(owner)
        self.posts.find_by_id.return_value = post
        self.users.find_by_id.return_value = owner

        await self.service.delete_post(auth_for(owner), str(post.id))

        self.files.clear_image.assert_not_awaited()


class TestPostServiceStorage:
    """End-to-end through the SQL repositories."""

    @pytest.fixture(autouse=True)
    def _service(self, user_repo, post_repo, mock_files):
        self.users = user_repo
        self.service = PostService(user_repo, post_repo, files=mock_files)

    async def _register(self, email="alice@example.com"):
        return await self.users.create(email=email, name="Alice", password_hash="hash")

    @pytest.mark.asyncio
    async def test_create_appends_to_creator(self, auth_for):
        user = await self._register()

        post = await self.service.create_post(auth_for(user), "Hello world", "Some content", "images/x.png")

        assert post.creator.id == str(user.id)
        assert post.creator.posts == [post.id]
        assert post.image_url == "images/x.png"
        assert post.created_at and post.updated_at
        stored = await self.users.find_by_id(user.id)
        assert [str(p.id) for p in stored.posts] == [post.id]

    @pytest.mark.asyncio
    async def test_pagination_newest_first(self, auth_for):
        user = await self._register()
        auth = auth_for(user)
        titles = ["Post one", "Post two", "Post three"]
        for title in titles:
            await self.service.create_post(auth, title, "Some content")

        first = await self.service.list_posts(auth, 1)
        second = await self.service.list_posts(auth, 2)

        assert first.total_posts == 3
        assert second.total_posts == 3
        assert [p.title for p in first.posts] == ["Post three", "Post two"]
        assert [p.title for p in second.posts] == ["Post one"]
        assert all(p.creator.email == "alice@example.com" for p in first.posts)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page", [None, 0, -3])
    async def test_missing_or_invalid_page_is_first_page(self, page, auth_for):
        user = await self._register()
        auth = auth_for(user)
        for title in ["Post one", "Post two", "Post three"]:
            await self.service.create_post(auth, title, "Some content")

        result = await self.service.list_posts(auth, page)

        assert [p.title for p in result.posts] == ["Post three", "Post two"]

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, auth_for):
        user = await self._register()
        auth = auth_for(user)
        await self.service.create_post(auth, "Post one", "Some content")

        result = await self.service.list_posts(auth, 5)

        assert result.posts == []
        assert result.total_posts == 1

    @pytest.mark.asyncio
    async def test_delete_removes_post_and_reference(self, auth_for):
        user = await self._register()
        auth = auth_for(user)
        keep = await self.service.create_post(auth, "Keep this", "Some content")
        drop = await self.service.create_post(auth, "Drop this", "Some content")

        assert await self.service.delete_post(auth, drop.id) is True

        with pytest.raises(NotFoundError):
            await self.service.get_post(auth, drop.id)
        stored = await self.users.find_by_id(user.id)
        assert [str(p.id) for p in stored.posts] == [keep.id]
        page = await self.service.list_posts(auth, 1)
        assert page.total_posts == 1

    @pytest.mark.asyncio
    async def test_deleted_acting_user_cannot_create(self, auth_for, make_user):
        ghost = make_user()

        with pytest.raises(UnauthorizedError, match="Invalid user."):
            await self.service.create_post(auth_for(ghost), "Hello world", "Some content")


class TestPostServiceAcrossSessions:
    """Every call gets a new session, the way separate requests do."""

    @pytest.fixture(autouse=True)
    def _factory(self, db_engine, mock_files):
        self.factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
        self.files = mock_files

    @asynccontextmanager
    async def _request(self):
        async with self.factory() as session:
            yield PostService(
                SQLUserRepository(session), SQLPostRepository(session), files=self.files
            )
            await session.commit()

    async def _seed(self, auth_for):
        async with self.factory() as session:
            user = await SQLUserRepository(session).create(
                email="alice@example.com", name="Alice", password_hash="hash"
            )
            await session.commit()
        auth = auth_for(user)
        async with self._request() as service:
            post = await service.create_post(auth, "Hello world", "Some content", "images/a.png")
        return auth, post

    @pytest.mark.asyncio
    async def test_get_post(self, auth_for):
        auth, created = await self._seed(auth_for)

        async with self._request() as service:
            post = await service.get_post(auth, created.id)

        assert post.title == "Hello world"
        assert post.creator.email == "alice@example.com"
        assert post.creator.posts == [created.id]

    @pytest.mark.asyncio
    async def test_list_posts(self, auth_for):
        auth, created = await self._seed(auth_for)

        async with self._request() as service:
            page = await service.list_posts(auth, 1)

        assert page.total_posts == 1
        assert [p.id for p in page.posts] == [created.id]
        assert page.posts[0].creator.posts == [created.id]

    @pytest.mark.asyncio
    async def test_update_post(self, auth_for):
        auth, created = await self._seed(auth_for)

        async with self._request() as service:
            updated = await service.update_post(auth, created.id, "Renamed post", "New content")
        async with self._request() as service:
            fetched = await service.get_post(auth, created.id)

        assert updated.title == "Renamed post"
        assert updated.image_url == "images/a.png"
        assert fetched.title == "Renamed post"

    @pytest.mark.asyncio
    async def test_delete_post(self, auth_for):
        auth, created = await self._seed(auth_for)

        async with self._request() as service:
            assert await service.delete_post(auth, created.id) is True

        self.files.clear_image.assert_awaited_once_with("images/a.png")
        async with self._request() as service:
            with pytest.raises(NotFoundError):
                await service.get_post(auth, created.id)
            page = await service.list_posts(auth, 1)
        assert page.total_posts == 0

"""
BlogQL — Auth Middleware Tests
===============================

What:  Header parsing and the two-state context the middleware attaches.
Why:   The middleware must never reject: every failure mode ends in the
       unauthenticated context and the request continues.
"""

import logging
from datetime import timedelta

import pytest

from blogql.auth import AuthContext, create_access_token, decode_access_token
from blogql.middleware.auth import extract_bearer_token, resolve_auth_context


class TestExtractBearerToken:

    def test_no_header(self):
        assert extract_bearer_token(None) is None
        assert extract_bearer_token("") is None

    def test_bearer_scheme(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_scheme_is_case_insensitive(self):
        assert extract_bearer_token("bearer abc") == "abc"

    def test_wrong_scheme(self):
        assert extract_bearer_token("Basic dXNlcjpwYXNz") is None

    def test_scheme_without_token(self):
        assert extract_bearer_token("Bearer") is None
        assert extract_bearer_token("Bearer   ") is None


class TestResolveAuthContext:

    def test_missing_header_is_anonymous(self):
        assert resolve_auth_context(None) == AuthContext.anonymous()

    def test_malformed_header_is_anonymous(self):
        assert resolve_auth_context("Token abc") == AuthContext.anonymous()

    def test_invalid_token_is_anonymous(self):
        context = resolve_auth_context("Bearer not-a-jwt")
        assert context.is_auth is False
        assert context.user_id is None

    def test_expired_token_is_anonymous(self):
        token = create_access_token(
            user_id="user-1", email="alice@example.com", expires_delta=timedelta(seconds=-1)
        )
        assert resolve_auth_context(f"Bearer {token}").is_auth is False

    def test_valid_token_is_authenticated(self):
        token = create_access_token(user_id="user-1", email="alice@example.com")
        context = resolve_auth_context(f"Bearer {token}")
        assert context.is_auth is True
        assert context.user_id == "user-1"
        assert context.email == "alice@example.com"

    def test_accepted_token_logs_expiry_at_debug(self, caplog):
        token = create_access_token(
            user_id="user-1", email="alice@example.com", expires_delta=timedelta(minutes=5)
        )

        with caplog.at_level(logging.DEBUG, logger="blogql.middleware.auth"):
            resolve_auth_context(f"Bearer {token}")

        record = next(r for r in caplog.records if "Authenticated user user-1" in r.getMessage())
        assert record.levelno == logging.DEBUG
        expires_at = decode_access_token(token).expires_at
        assert f"expires {expires_at.isoformat()}" in record.getMessage()

    def test_rejected_token_logs_no_expiry(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="blogql.middleware.auth"):
            resolve_auth_context("Bearer not-a-jwt")

        assert not any("expires" in r.getMessage() for r in caplog.records)


class TestMiddlewareNeverRejects:
    """Requests with bad credentials still reach the route."""

    @pytest.mark.asyncio
    async def test_health_with_garbage_token(self, test_client):
        response = await test_client.get(
            "/health", headers={"Authorization": "Bearer garbage"}
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_public_graphql_operation_with_expired_token(self, test_client):
        token = create_access_token(
            user_id="user-1", email="alice@example.com", expires_delta=timedelta(seconds=-1)
        )
        response = await test_client.post(
            "/graphql",
            json={
                "query": 'mutation { createUser(userInput: {email: "alice@example.com", '
                         'name: "Alice", password: "secret123"}) { _id email } }'
            },
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 200
        body = response.json()
        assert "errors" not in body
        assert body["data"]["createUser"]["email"] == "alice@example.com"

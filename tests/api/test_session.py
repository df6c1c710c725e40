"""Tests for the auth session token slot."""

from fastapi import Response

from portal.api.session import AuthSession


class TestAuthSession:
    """Tests for AuthSession."""

    def test_empty_by_default(self) -> None:
        session = AuthSession()
        assert session.is_authenticated is False
        assert session.authorization_header() == {}

    def test_set_token(self) -> None:
        session = AuthSession()
        session.set_token("abc")
        assert session.is_authenticated is True
        assert session.authorization_header() == {"Authorization": "Bearer abc"}

    def test_empty_token_clears(self) -> None:
        """An empty string leaves the slot empty."""
        session = AuthSession(token="abc")
        session.set_token("")
        assert session.token is None

    def test_clear(self) -> None:
        session = AuthSession(token="abc")
        session.clear()
        assert session.is_authenticated is False


class TestStore:
    """Persisting the slot on a response."""

    def test_store_sets_httponly_cookie(self) -> None:
        response = Response()
        AuthSession(token="abc").store(response, "auth_token")

        cookie = response.headers["set-cookie"]
        assert cookie.startswith("auth_token=abc")
        assert "HttpOnly" in cookie
        assert "Path=/" in cookie

    def test_store_empty_deletes_cookie(self) -> None:
        response = Response()
        AuthSession().store(response, "auth_token")

        cookie = response.headers["set-cookie"]
        assert cookie.startswith('auth_token=""')
        assert "Max-Age=0" in cookie

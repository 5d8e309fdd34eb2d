"""Tests for AuthMiddleware and request helpers."""

import pytest
from starlette.requests import Request

from auth.security_middleware import AuthMiddleware, get_client_ip, get_session_token


def make_request(headers=None, client=("10.0.0.5", 5000)):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/shifts",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestGetClientIp:

    def test_first_forwarded_entry(self):
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        assert get_client_ip(request) == "203.0.113.7"

    def test_real_ip(self):
        assert get_client_ip(make_request({"X-Real-IP": "203.0.113.9"})) == "203.0.113.9"

    def test_peer_address(self):
        assert get_client_ip(make_request()) == "10.0.0.5"

    def test_unknown(self):
        assert get_client_ip(make_request(client=None)) == "unknown"


class TestGetSessionToken:

    def test_cookie(self):
        request = make_request({"Cookie": "session=abc"})
        assert get_session_token(request) == "abc"

    def test_custom_cookie_name(self):
        request = make_request({"Cookie": "sid=abc"})
        assert get_session_token(request, "sid") == "abc"

    def test_bearer(self):
        assert get_session_token(make_request({"Authorization": "Bearer xyz"})) == "xyz"

    def test_cookie_wins_over_bearer(self):
        request = make_request({"Cookie": "session=abc", "Authorization": "Bearer xyz"})
        assert get_session_token(request) == "abc"

    @pytest.mark.parametrize("header", ["Basic xyz", "Bearer ", ""])
    def test_no_token(self, header):
        assert get_session_token(make_request({"Authorization": header})) is None


class TestPublicPaths:

    @pytest.fixture
    def middleware(self):
        return AuthMiddleware(app=None, session_manager=None)

    @pytest.mark.parametrize("path", [
        "/api/auth/discord",
        "/api/auth/callback",
        "/api/auth/logout",
        "/api/timezones",
        "/health",
        "/login.html",
    ])
    def test_public(self, middleware, path):
        assert middleware._is_public_path(path) is True

    @pytest.mark.parametrize("path", ["/api/auth/me", "/api/shifts", "/api/calendar", "/api/users/me"])
    def test_protected(self, middleware, path):
        assert middleware._is_public_path(path) is False


class TestAuthMiddleware:
    """Session enforcement through the assembled app."""

    def test_missing_session(self, client):
        response = client.get("/api/shifts")
        assert response.status_code == 401
        assert response.json()["error"] == {
            "code": "NOT_AUTHENTICATED",
            "message": "Authentication required",
        }

    def test_unknown_session(self, client):
        response = client.get("/api/shifts", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "SESSION_EXPIRED"

    def test_valid_session(self, auth_client):
        assert auth_client.get("/api/shifts").status_code == 200

    def test_session_cookie_accepted(self, client, session_token):
        response = client.get("/api/shifts", headers={"Cookie": f"session={session_token}"})
        assert response.status_code == 200

    def test_error_carries_request_id(self, client):
        response = client.get("/api/shifts")
        assert response.json()["meta"]["request_id"] == response.headers["X-Request-ID"]

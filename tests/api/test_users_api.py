"""Tests for /api/users/me and /api/timezones."""

import pytest


class TestGetMe:

    def test_returns_profile(self, auth_client, postgres_mock, make_user_row):
        postgres_mock.execute_single.return_value = make_user_row(timezone="Asia/Kolkata")
        response = auth_client.get("/api/users/me")
        assert response.status_code == 200
        assert response.json()["data"]["timezone"] == "Asia/Kolkata"

    def test_missing_user(self, auth_client):
        response = auth_client.get("/api/users/me")
        assert response.status_code == 404


class TestUpdateMe:

    def test_updates_timezone(self, auth_client, postgres_mock, make_user_row):
        postgres_mock.execute_returning.return_value = [make_user_row(timezone="Asia/Tokyo")]

        response = auth_client.put("/api/users/me", json={"timezone": "Asia/Tokyo"})

        assert response.status_code == 200
        assert response.json()["data"]["timezone"] == "Asia/Tokyo"
        assert postgres_mock.execute_returning.call_args.args[1] == ("Asia/Tokyo", 1)

    @pytest.mark.parametrize("body,message", [
        ({}, "timezone is required"),
        ({"timezone": ""}, "timezone is required"),
        ({"timezone": 5}, "timezone is required"),
        ({"timezone": "Atlantis/Capital"}, "Invalid timezone"),
    ])
    def test_rejects(self, auth_client, postgres_mock, body, message):
        response = auth_client.put("/api/users/me", json=body)
        assert response.status_code == 400
        assert response.json()["error"]["message"] == message
        postgres_mock.execute_returning.assert_not_called()


class TestTimezones:

    def test_public_list(self, client):
        response = client.get("/api/timezones")
        assert response.status_code == 200
        zones = response.json()["data"]
        assert zones[0] == "UTC"
        assert "America/New_York" in zones

"""Tests for /api/shifts through the assembled app."""

from datetime import datetime, timezone

import pytest

NEW_SHIFT = {
    "start_time": "2024-01-15T12:00",
    "end_time": "2024-01-15T14:00",
    "timezone": "America/New_York",
    "description": "Opening",
}


class TestCreateShift:
    """POST /api/shifts converts local input to UTC once."""

    def test_stores_utc_and_returns_201(self, auth_client, postgres_mock, make_shift_row):
        postgres_mock.execute_returning.return_value = [make_shift_row(description="Opening")]

        response = auth_client.post("/api/shifts", json=NEW_SHIFT)

        assert response.status_code == 201
        params = postgres_mock.execute_returning.call_args.args[1]
        assert params == (1, "2024-01-15T17:00:00Z", "2024-01-15T19:00:00Z", "Opening")

    def test_response_formatted_in_request_zone(self, auth_client, postgres_mock, make_shift_row):
        postgres_mock.execute_returning.return_value = [make_shift_row()]

        data = auth_client.post("/api/shifts", json=NEW_SHIFT).json()["data"]

        assert data["start_time"] == "2024-01-15 12:00"
        assert data["end_time"] == "2024-01-15 14:00"
        assert data["start_time_utc"] == "2024-01-15T17:00:00Z"
        assert data["end_time_utc"] == "2024-01-15T19:00:00Z"
        assert data["user_id"] == 1

    def test_owner_is_session_user(self, client, fake_valkey, app_config, postgres_mock, make_shift_row):
        from auth.session import SessionManager

        token = SessionManager(fake_valkey, app_config).create_session(2).token
        postgres_mock.execute_returning.return_value = [make_shift_row(user_id=2)]

        client.post("/api/shifts", json=NEW_SHIFT, headers={"Authorization": f"Bearer {token}"})

        assert postgres_mock.execute_returning.call_args.args[1][0] == 2

    @pytest.mark.parametrize("overrides,message", [
        ({"start_time": None}, "start_time and end_time are required"),
        ({"end_time": ""}, "start_time and end_time are required"),
        ({"start_time": "2024-01-15 12:00"}, "Invalid datetime format. Use YYYY-MM-DDTHH:mm"),
        ({"end_time": "2024-01-15T14:00:00Z"}, "Invalid datetime format. Use YYYY-MM-DDTHH:mm"),
        ({"timezone": "Mars/Olympus"}, "Invalid timezone"),
        ({"description": "x" * 5001}, "Description too long (max 5000 characters)"),
        ({"end_time": "2024-01-15T12:00"}, "end_time must be after start_time"),
        ({"end_time": "2024-01-15T11:00"}, "end_time must be after start_time"),
    ])
    def test_rejects_invalid_payload(self, auth_client, postgres_mock, overrides, message):
        response = auth_client.post("/api/shifts", json={**NEW_SHIFT, **overrides})

        assert response.status_code == 400
        assert response.json()["error"] == {"code": "INVALID_REQUEST", "message": message}
        postgres_mock.execute_returning.assert_not_called()

    def test_timezone_defaults_to_utc(self, auth_client, postgres_mock, make_shift_row):
        postgres_mock.execute_returning.return_value = [make_shift_row()]
        body = {"start_time": "2024-01-15T17:00", "end_time": "2024-01-15T19:00"}

        auth_client.post("/api/shifts", json=body)

        params = postgres_mock.execute_returning.call_args.args[1]
        assert params[1:3] == ("2024-01-15T17:00:00Z", "2024-01-15T19:00:00Z")

    def test_requires_session(self, client):
        assert client.post("/api/shifts", json=NEW_SHIFT).status_code == 401


class TestListShifts:

    def test_lists_in_viewer_zone(self, auth_client, postgres_mock, make_shift_row):
        postgres_mock.execute.return_value = [make_shift_row()]

        response = auth_client.get("/api/shifts", params={"timezone": "Asia/Tokyo"})

        assert response.status_code == 200
        [shift] = response.json()["data"]
        assert shift["start_time"] == "2024-01-16 02:00"
        assert shift["start_time_utc"] == "2024-01-15T17:00:00Z"

    def test_bounds_passed_as_instants(self, auth_client, postgres_mock):
        auth_client.get("/api/shifts", params={
            "start": "2024-01-01T00:00:00Z",
            "end": "2024-01-31T23:59:59Z",
        })
        params = postgres_mock.execute.call_args.args[1]
        assert params == (
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 1, 31, 23, 59, 59, tzinfo=timezone.utc),
        )

    def test_reversed_range(self, auth_client):
        response = auth_client.get("/api/shifts", params={
            "start": "2024-02-01T00:00:00Z",
            "end": "2024-01-01T00:00:00Z",
        })
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid date range"

    def test_invalid_display_zone(self, auth_client):
        response = auth_client.get("/api/shifts", params={"timezone": "Nowhere"})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid timezone"


class TestGetShift:

    def test_found(self, auth_client, postgres_mock, make_shift_row):
        postgres_mock.execute_single.return_value = make_shift_row(shift_id=5)
        response = auth_client.get("/api/shifts/5")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == 5

    def test_not_found(self, auth_client):
        response = auth_client.get("/api/shifts/5")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.parametrize("raw", ["abc", "0", "-1", "1.5"])
    def test_invalid_id(self, auth_client, raw):
        response = auth_client.get(f"/api/shifts/{raw}")
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid shift ID"


class TestUpdateShift:

    def test_updates_own_shift(self, auth_client, postgres_mock, make_shift_row):
        postgres_mock.execute_returning.return_value = [make_shift_row(shift_id=5)]

        response = auth_client.put("/api/shifts/5", json=NEW_SHIFT)

        assert response.status_code == 200
        sql, params = postgres_mock.execute_returning.call_args.args
        assert "WHERE id = %s AND user_id = %s" in sql
        assert params == ("2024-01-15T17:00:00Z", "2024-01-15T19:00:00Z", "Opening", 5, 1)

    def test_other_users_shift_is_not_found(self, auth_client):
        response = auth_client.put("/api/shifts/5", json=NEW_SHIFT)
        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Shift 5 not found"

    def test_validates_payload(self, auth_client):
        response = auth_client.put("/api/shifts/5", json={**NEW_SHIFT, "timezone": "bogus"})
        assert response.status_code == 400


class TestDeleteShift:

    def test_deletes(self, auth_client, postgres_mock):
        postgres_mock.execute_returning.return_value = [{"id": 5}]

        response = auth_client.delete("/api/shifts/5")

        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": True}
        assert postgres_mock.execute_returning.call_args.args[1] == (5, 1)

    def test_not_found(self, auth_client):
        assert auth_client.delete("/api/shifts/5").status_code == 404

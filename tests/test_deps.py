"""
Tests for facility_bookings/deps.py: get_current_user and get_page.
These tests use the real dep functions (no overrides) to get coverage.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from .factories import SUBJECT_ID

LIST_PATH = "facility_bookings.authorized.list_bookings"


class TestGetCurrentUser:
    def test_valid_header_authenticates(self, anon_app):
        with patch(LIST_PATH, new=AsyncMock(return_value=[])) as mock:
            with TestClient(anon_app) as c:
                resp = c.get("/bookings", headers={"X-User-Id": str(SUBJECT_ID)})
        assert resp.status_code == 200
        claims, _ = mock.call_args.args
        assert claims.subject_id == SUBJECT_ID

    def test_invalid_user_id_returns_401(self, anon_app):
        with TestClient(anon_app) as c:
            resp = c.get("/bookings", headers={"X-User-Id": "not-a-uuid"})
        assert resp.status_code == 401

    def test_missing_header_returns_422(self, anon_app):
        with TestClient(anon_app) as c:
            resp = c.get("/bookings")
        assert resp.status_code == 422


class TestGetPage:
    def test_defaults(self, client):
        with patch("facility_bookings.authorized.list_clubs", new=AsyncMock(return_value=[])) as m:
            client.get("/clubs")
        assert m.call_args.args[1:] == (100, 0)

    def test_limit_above_maximum_returns_422(self, client):
        resp = client.get("/clubs", params={"limit": 501})
        assert resp.status_code == 422

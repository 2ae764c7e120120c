"""Tests for Action values, their descriptions and the error taxonomy."""

from uuid import uuid4

import pytest

from facility_bookings.actions import ACTION_DESCRIPTIONS, Action
from facility_bookings.errors import (
    ConflictInvariant,
    Forbidden,
    InvalidTransition,
    NotFound,
    StoreError,
    ValidationFailed,
)


class TestActionValues:
    def test_booking_actions(self):
        assert Action.BOOKING_CREATE == "booking:create"
        assert Action.BOOKING_UPDATE == "booking:update"
        assert Action.BOOKING_DELETE == "booking:delete"

    def test_all_actions_are_strings(self):
        for action in Action:
            assert isinstance(action, str)

    def test_every_action_has_a_description(self):
        for action in Action:
            assert ACTION_DESCRIPTIONS[action]


class TestErrors:
    @pytest.mark.parametrize(
        "error_cls, status_code, code",
        [
            (NotFound, 404, "not_found"),
            (InvalidTransition, 400, "invalid_transition"),
            (ValidationFailed, 422, "validation_error"),
            (ConflictInvariant, 409, "conflict_invariant"),
            (StoreError, 500, "store_error"),
        ],
    )
    def test_status_and_code(self, error_cls, status_code, code):
        resource_id = uuid4()
        error = error_cls("boom", resource_id=resource_id)
        assert error.status_code == status_code
        assert error.detail == {
            "code": code,
            "message": "boom",
            "resource_id": str(resource_id),
            "actor_id": None,
        }
        assert str(error) == f"{code}: boom"

    def test_forbidden_message_names_actor_and_action(self):
        actor = uuid4()
        error = Forbidden(Action.TEAM_DELETE, actor, description=ACTION_DESCRIPTIONS[Action.TEAM_DELETE])
        assert error.status_code == 403
        assert error.detail["message"] == f"User {actor} is not authorized to delete this team"
        assert error.detail["action"] == "team:delete"

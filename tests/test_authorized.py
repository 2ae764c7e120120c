"""
Authorized layer: rejections carry the requesting subject, and store failures
on plain reads come out as StoreError.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from tortoise.exceptions import OperationalError

from facility_bookings import authorized
from facility_bookings.actions import Action
from facility_bookings.crud import booking_crud
from facility_bookings.errors import InvalidTransition, NotFound, StoreError
from facility_bookings.policy import authorize
from facility_bookings.schemas import BookingData, TeamCreate

from .factories import (
    BOOKING_ID,
    SUBJECT_ID,
    booking_payload,
    game_event,
    make_admin,
    make_claims,
    make_club,
    make_coach,
    make_person,
    make_team,
    training_event,
)


def _data(**kwargs) -> BookingData:
    return BookingData.model_validate(booking_payload(**kwargs))


class TestRejectionsNameTheActor:
    async def test_invalid_transition(self, db):
        admin = await make_admin()
        team = await make_team(await make_club())
        created = await authorized.create_booking(
            make_claims(admin.id), _data(event=game_event(team.id))
        )

        with pytest.raises(InvalidTransition) as exc:
            await authorized.update_booking(
                make_claims(admin.id), created.booking.id, _data(event=training_event(team.id))
            )

        assert exc.value.detail["actor_id"] == str(admin.id)
        assert exc.value.detail["resource_id"] == str(created.booking.id)

    async def test_not_found_from_the_crud_layer(self, db):
        admin = await make_admin()
        missing = uuid4()
        with pytest.raises(NotFound) as exc:
            await authorized.delete_booking(make_claims(admin.id), missing)
        assert exc.value.actor_id == admin.id
        assert exc.value.detail["actor_id"] == str(admin.id)
        assert exc.value.detail["resource_id"] == str(missing)

    async def test_not_found_from_the_gate(self, db):
        person = await make_person()
        with pytest.raises(NotFound) as exc:
            await authorized.delete_booking(make_claims(person.id), uuid4())
        assert exc.value.detail["actor_id"] == str(person.id)


class TestStoreFailuresOnReads:
    async def test_read_failure_becomes_store_error(self):
        failure = OperationalError("no such table: booking")
        with patch.object(booking_crud, "find_booking", new=AsyncMock(side_effect=failure)):
            with pytest.raises(StoreError) as exc:
                await authorized.find_booking(make_claims(), BOOKING_ID)

        assert exc.value.__cause__ is failure
        assert exc.value.detail["code"] == "store_error"
        assert exc.value.detail["actor_id"] == str(SUBJECT_ID)

    def test_read_failure_is_rendered_as_structured_500(self, client):
        failure = OperationalError("database is locked")
        with patch.object(booking_crud, "list_bookings", new=AsyncMock(side_effect=failure)):
            resp = client.get("/bookings")

        assert resp.status_code == 500
        detail = resp.json()["detail"]
        assert detail["code"] == "store_error"
        assert detail["actor_id"] == str(SUBJECT_ID)


class TestMissingTargetsBeforeRules:
    async def test_booking_for_unknown_team_is_not_found(self, db):
        club = await make_club()
        team = await make_team(club)
        coach = await make_person("Coach", "A")
        await make_coach(coach, team)

        data = _data(event=game_event(team.id, uuid4()))
        with pytest.raises(NotFound):
            await authorize(coach.id, Action.BOOKING_CREATE, data)

    async def test_team_for_unknown_club_is_not_found(self, db):
        person = await make_person()
        data = TeamCreate(name="U17", sport="football", club_id="IT00000000000")
        with pytest.raises(NotFound) as exc:
            await authorized.create_team(make_claims(person.id), data)
        assert exc.value.detail["actor_id"] == str(person.id)

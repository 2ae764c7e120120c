"""
Booking aggregate against a real (in-memory) database: create, find, list,
update transitions and ordered cascade deletion.
"""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from tortoise.exceptions import IntegrityError, OperationalError

from facility_bookings.crud import booking_crud, cascade, recording_session_crud, roster_crud
from facility_bookings.crud.booking import EventTransition, resolve_event_transition
from facility_bookings.errors import InvalidTransition, NotFound, StoreError
from facility_bookings.models import (
    Booking,
    CameraSession,
    EventKind,
    Formation,
    FormationPlayer,
    FormationPlayerTag,
    Game,
    RecordingSession,
    Training,
    TrainingPlayer,
    TrainingPlayerTag,
)
from facility_bookings.schemas import (
    BookingData,
    BookingFilters,
    FormationPlayerTagsData,
    RecordingSessionData,
    TrainingPlayerTagsData,
)

from .factories import (
    LATER,
    NOW,
    booking_payload,
    game_event,
    make_camera,
    make_club,
    make_person,
    make_rfid_tags,
    make_team,
    recording_session_payload,
    training_event,
)


def _data(**kwargs) -> BookingData:
    return BookingData.model_validate(booking_payload(**kwargs))


@pytest.fixture()
async def teams(db):
    club = await make_club()
    return await make_team(club, "Home"), await make_team(club, "Away")


@pytest.fixture()
async def author(db):
    return await make_person("Author", "One")


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------


class TestResolveEventTransition:
    @pytest.mark.parametrize(
        "existing, requested, expected",
        [
            (None, None, EventTransition.KEEP_NONE),
            (None, EventKind.GAME, EventTransition.CREATE),
            (None, EventKind.TRAINING, EventTransition.CREATE),
            (EventKind.GAME, EventKind.GAME, EventTransition.UPDATE_IN_PLACE),
            (EventKind.TRAINING, EventKind.TRAINING, EventTransition.UPDATE_IN_PLACE),
        ],
    )
    def test_allowed(self, existing, requested, expected):
        assert resolve_event_transition(existing, requested) is expected

    @pytest.mark.parametrize(
        "existing, requested",
        [
            (EventKind.GAME, EventKind.TRAINING),
            (EventKind.TRAINING, EventKind.GAME),
            (EventKind.GAME, None),
            (EventKind.TRAINING, None),
        ],
    )
    def test_rejected(self, existing, requested):
        booking_id = uuid4()
        with pytest.raises(InvalidTransition) as exc:
            resolve_event_transition(existing, requested, booking_id)
        assert exc.value.status_code == 400
        assert exc.value.detail["resource_id"] == str(booking_id)


# ---------------------------------------------------------------------------
# Create / find / list
# ---------------------------------------------------------------------------


class TestCreateBooking:
    async def test_game_creates_booking_formations_and_game(self, teams, author):
        home, away = teams
        result = await booking_crud.create_booking(
            author.id, _data(event=game_event(home.id, away.id))
        )

        assert result.booking.author_id == author.id
        assert result.event.kind == "game"
        game = await Game.get(id=result.event.id)
        assert game.booking_id == result.booking.id
        home_formation = await Formation.get(id=game.home_formation_id)
        visiting_formation = await Formation.get(id=game.visiting_formation_id)
        assert home_formation.team_id == home.id
        assert visiting_formation.team_id == away.id

    async def test_game_without_visiting_team(self, teams, author):
        home, _ = teams
        result = await booking_crud.create_booking(author.id, _data(event=game_event(home.id)))
        assert result.event.visiting_formation_id is None
        assert await Formation.all().count() == 1

    async def test_training(self, teams, author):
        home, _ = teams
        result = await booking_crud.create_booking(
            author.id, _data(event=training_event(home.id))
        )
        assert result.event.kind == "training"
        assert result.event.team_id == home.id

    async def test_without_event(self, author):
        result = await booking_crud.create_booking(author.id, _data())
        assert result.event is None
        assert await Booking.all().count() == 1

    async def test_unknown_team_writes_nothing(self, teams, author):
        home, _ = teams
        with pytest.raises(NotFound):
            await booking_crud.create_booking(
                author.id, _data(event=game_event(home.id, uuid4()))
            )
        assert await Booking.all().count() == 0
        assert await Formation.all().count() == 0


class TestFindAndList:
    async def test_find_returns_booking_with_event(self, teams, author):
        home, _ = teams
        created = await booking_crud.create_booking(
            author.id, _data(event=training_event(home.id))
        )
        found = await booking_crud.find_booking(created.booking.id)
        assert found.booking.id == created.booking.id
        assert found.event.id == created.event.id

    async def test_find_missing_raises_not_found(self, db):
        missing = uuid4()
        with pytest.raises(NotFound) as exc:
            await booking_crud.find_booking(missing)
        assert exc.value.detail["resource_id"] == str(missing)

    async def test_list_merges_events_of_each_kind(self, teams, author):
        home, away = teams
        game = await booking_crud.create_booking(
            author.id, _data(event=game_event(home.id, away.id))
        )
        training = await booking_crud.create_booking(
            author.id,
            _data(
                event=training_event(away.id),
                start_datetime=(NOW + timedelta(days=1)).isoformat(),
                end_datetime=(LATER + timedelta(days=1)).isoformat(),
            ),
        )
        bare = await booking_crud.create_booking(
            author.id,
            _data(
                start_datetime=(NOW + timedelta(days=2)).isoformat(),
                end_datetime=(LATER + timedelta(days=2)).isoformat(),
            ),
        )

        listed = await booking_crud.list_bookings(BookingFilters())
        by_id = {b.booking.id: b for b in listed}
        assert by_id[game.booking.id].event.kind == "game"
        assert by_id[training.booking.id].event.kind == "training"
        assert by_id[bare.booking.id].event is None

    async def test_list_filters_and_paginates(self, author):
        other = await make_person("Other", "Author")
        for day in range(3):
            await booking_crud.create_booking(
                author.id,
                _data(
                    start_datetime=(NOW + timedelta(days=day)).isoformat(),
                    end_datetime=(LATER + timedelta(days=day)).isoformat(),
                ),
            )
        await booking_crud.create_booking(other.id, _data(sport="tennis"))

        mine = await booking_crud.list_bookings(BookingFilters(author_id=author.id))
        assert len(mine) == 3
        tennis = await booking_crud.list_bookings(BookingFilters(sport="tennis"))
        assert [b.booking.author_id for b in tennis] == [other.id]
        page = await booking_crud.list_bookings(
            BookingFilters(author_id=author.id, limit=2, offset=2)
        )
        assert len(page) == 1


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


class TestUpdateBooking:
    async def test_none_to_game_creates_the_event(self, teams, author):
        home, away = teams
        created = await booking_crud.create_booking(author.id, _data())

        updated = await booking_crud.update_booking(
            created.booking.id, _data(event=game_event(home.id, away.id), notes="friendly")
        )

        assert updated.booking.notes == "friendly"
        assert updated.event.kind == "game"
        assert await Game.filter(booking_id=created.booking.id).exists()

    async def test_game_to_game_only_moves_start_and_end(self, teams, author):
        home, away = teams
        created = await booking_crud.create_booking(
            author.id, _data(event=game_event(home.id, away.id))
        )
        third = await make_team(await home.club, "Third")
        new_end = LATER + timedelta(minutes=30)

        updated = await booking_crud.update_booking(
            created.booking.id,
            _data(
                event=game_event(third.id, end_datetime=new_end.isoformat()),
                end_datetime=new_end.isoformat(),
            ),
        )

        assert updated.event.id == created.event.id
        assert updated.event.home_formation_id == created.event.home_formation_id
        assert updated.event.visiting_formation_id == created.event.visiting_formation_id
        assert updated.event.end_datetime == new_end

    async def test_switch_kind_is_rejected_without_writes(self, teams, author):
        home, away = teams
        created = await booking_crud.create_booking(
            author.id, _data(event=game_event(home.id, away.id), notes="before")
        )

        with pytest.raises(InvalidTransition):
            await booking_crud.update_booking(
                created.booking.id, _data(event=training_event(home.id), notes="after")
            )

        booking = await Booking.get(id=created.booking.id)
        assert booking.notes == "before"
        assert await Game.filter(booking_id=booking.id).exists()
        assert not await Training.filter(booking_id=booking.id).exists()

    async def test_removing_event_is_rejected(self, teams, author):
        home, _ = teams
        created = await booking_crud.create_booking(
            author.id, _data(event=training_event(home.id))
        )
        with pytest.raises(InvalidTransition):
            await booking_crud.update_booking(created.booking.id, _data())
        assert await Training.filter(booking_id=created.booking.id).exists()

    async def test_delete_game_then_create_training(self, teams, author):
        home, away = teams
        created = await booking_crud.create_booking(
            author.id, _data(event=game_event(home.id, away.id))
        )

        await booking_crud.delete_game(created.event.id)
        updated = await booking_crud.update_booking(
            created.booking.id, _data(event=training_event(away.id))
        )

        assert updated.event.kind == "training"
        assert await Formation.all().count() == 0

    async def test_missing_booking(self, db):
        with pytest.raises(NotFound):
            await booking_crud.update_booking(uuid4(), _data())


# ---------------------------------------------------------------------------
# Delete / cascade
# ---------------------------------------------------------------------------


class TestDeleteBooking:
    async def test_returns_pre_delete_snapshot(self, teams, author):
        home, away = teams
        created = await booking_crud.create_booking(
            author.id, _data(event=game_event(home.id, away.id))
        )

        deleted = await booking_crud.delete_booking(created.booking.id)

        assert deleted.booking.id == created.booking.id
        assert deleted.booking.sport == created.booking.sport
        assert deleted.event.id == created.event.id
        assert deleted.event.visiting_formation_id == created.event.visiting_formation_id
        with pytest.raises(NotFound):
            await booking_crud.find_booking(created.booking.id)

    async def test_game_cascade_leaves_no_rows(self, teams, author):
        home, away = teams
        created = await booking_crud.create_booking(
            author.id, _data(event=game_event(home.id, away.id))
        )
        player = await make_person("Player", "One")
        await make_rfid_tags(101, 102)
        await roster_crud.add_formation_players(
            created.event.home_formation_id,
            [FormationPlayerTagsData(player_id=player.id, rfid_tag_ids=[101, 102])],
        )
        camera = await make_camera()
        await recording_session_crud.create_recording_session(
            author.id,
            RecordingSessionData.model_validate(
                recording_session_payload(created.booking.id, [camera.id])
            ),
        )

        await booking_crud.delete_booking(created.booking.id)

        for model in (
            Booking,
            Game,
            Formation,
            FormationPlayer,
            FormationPlayerTag,
            RecordingSession,
            CameraSession,
        ):
            assert await model.all().count() == 0, model.__name__

    async def test_training_cascade_leaves_no_rows(self, teams, author):
        home, _ = teams
        created = await booking_crud.create_booking(
            author.id, _data(event=training_event(home.id))
        )
        player = await make_person("Player", "One")
        await make_rfid_tags(7)
        await roster_crud.add_training_players(
            created.event.id, [TrainingPlayerTagsData(player_id=player.id, rfid_tag_ids=[7])]
        )

        await booking_crud.delete_booking(created.booking.id)

        for model in (Booking, Training, TrainingPlayer, TrainingPlayerTag):
            assert await model.all().count() == 0, model.__name__

    async def test_delete_training_keeps_booking(self, teams, author):
        home, _ = teams
        created = await booking_crud.create_booking(
            author.id, _data(event=training_event(home.id))
        )

        snapshot = await booking_crud.delete_training(created.event.id)

        assert snapshot.id == created.event.id
        found = await booking_crud.find_booking(created.booking.id)
        assert found.event is None

    async def test_missing_booking(self, db):
        with pytest.raises(NotFound):
            await booking_crud.delete_booking(uuid4())


# ---------------------------------------------------------------------------
# Store failures inside the transaction
# ---------------------------------------------------------------------------


class _LockedBookingTable:
    """Stands in for Booking in the cascade: the final delete fails."""

    @staticmethod
    def filter(**kwargs):
        raise OperationalError("database is locked")


class TestRollback:
    async def test_failed_game_insert_leaves_no_booking(self, teams, author, monkeypatch):
        home, away = teams
        failure = IntegrityError("UNIQUE constraint failed: game.booking_id")
        monkeypatch.setattr(Game, "create", AsyncMock(side_effect=failure))

        with pytest.raises(StoreError) as exc:
            await booking_crud.create_booking(
                author.id, _data(event=game_event(home.id, away.id))
            )

        assert exc.value.detail["code"] == "store_error"
        assert await Booking.all().count() == 0
        assert await Formation.all().count() == 0

    async def test_failed_cascade_keeps_the_whole_aggregate(self, teams, author, monkeypatch):
        home, away = teams
        created = await booking_crud.create_booking(
            author.id, _data(event=game_event(home.id, away.id))
        )
        camera = await make_camera()
        await recording_session_crud.create_recording_session(
            author.id,
            RecordingSessionData.model_validate(
                recording_session_payload(created.booking.id, [camera.id])
            ),
        )
        monkeypatch.setattr(cascade, "Booking", _LockedBookingTable)

        with pytest.raises(StoreError):
            await booking_crud.delete_booking(created.booking.id)

        monkeypatch.undo()
        assert await Booking.filter(id=created.booking.id).exists()
        assert await Game.filter(id=created.event.id).exists()
        assert await Formation.all().count() == 2
        assert await RecordingSession.all().count() == 1
        assert await CameraSession.all().count() == 1

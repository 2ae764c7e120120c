"""
Authorized operations: the gate first, then the crud layer.

Reads of bookings, clubs, teams, persons and cameras are open to any
authenticated subject and go straight to the crud layer.
"""

from __future__ import annotations

import functools
from uuid import UUID

from loguru import logger
from tortoise.exceptions import BaseORMException

from facility_bookings.actions import Action
from facility_bookings.crud import (
    booking_crud,
    camera_crud,
    club_crud,
    person_crud,
    recording_session_crud,
    roster_crud,
    team_crud,
)
from facility_bookings.crud.lookup import check_is_formation_of_game
from facility_bookings.deps import Claims
from facility_bookings.errors import DomainError, StoreError
from facility_bookings.policy import Membership, ensure_authorized
from facility_bookings.schemas import (
    BookingData,
    BookingFilters,
    BookingWithEvent,
    CameraResponse,
    ClubCreate,
    ClubResponse,
    ClubUpdate,
    FormationPlayerTagsData,
    FormationPlayerWithTags,
    GameResponse,
    JoinInfo,
    LeaveInfo,
    NewProfile,
    PersonUpdate,
    PersonWithProfiles,
    RecordingSessionData,
    RecordingSessionWithCameras,
    TeamCreate,
    TeamMembership,
    TeamResponse,
    TeamStaff,
    TeamUpdate,
    TrainingPlayerTagsData,
    TrainingPlayerWithTags,
    TrainingResponse,
)


def attributed(fn):
    """
    Attach the requesting subject to every rejection raised by `fn`.

    Store failures that escaped `atomic()` (plain reads) become StoreError here.
    """
    operation = fn.__name__.replace("_", " ")

    @functools.wraps(fn)
    async def wrapper(claims: Claims, *args, **kwargs):
        try:
            return await fn(claims, *args, **kwargs)
        except DomainError as exc:
            exc.attribute_to(claims.subject_id)
            raise
        except BaseORMException as exc:
            logger.error(
                "Store failure while trying to {} for {}: {}", operation, claims.subject_id, exc
            )
            raise StoreError(
                f"Error while trying to {operation} - {exc}", actor_id=claims.subject_id
            ) from exc

    return wrapper


# ---------------------------------------------------------------------------
# Bookings and events
# ---------------------------------------------------------------------------


@attributed
async def create_booking(claims: Claims, data: BookingData) -> BookingWithEvent:
    await ensure_authorized(claims, Action.BOOKING_CREATE, data)
    return await booking_crud.create_booking(claims.subject_id, data)


@attributed
async def update_booking(claims: Claims, booking_id: UUID, data: BookingData) -> BookingWithEvent:
    await ensure_authorized(claims, Action.BOOKING_UPDATE, booking_id)
    return await booking_crud.update_booking(booking_id, data)


@attributed
async def delete_booking(claims: Claims, booking_id: UUID) -> BookingWithEvent:
    await ensure_authorized(claims, Action.BOOKING_DELETE, booking_id)
    return await booking_crud.delete_booking(booking_id)


@attributed
async def delete_game(claims: Claims, game_id: UUID) -> GameResponse:
    await ensure_authorized(claims, Action.GAME_DELETE, game_id)
    return await booking_crud.delete_game(game_id)


@attributed
async def delete_training(claims: Claims, training_id: UUID) -> TrainingResponse:
    await ensure_authorized(claims, Action.TRAINING_DELETE, training_id)
    return await booking_crud.delete_training(training_id)


# ---------------------------------------------------------------------------
# Rosters
# ---------------------------------------------------------------------------


@attributed
async def find_formation_players(
    claims: Claims, game_id: UUID, formation_id: UUID
) -> list[FormationPlayerWithTags]:
    await check_is_formation_of_game(formation_id, game_id)
    await ensure_authorized(claims, Action.FORMATION_ROSTER_READ, formation_id)
    return await roster_crud.formation_roster(formation_id)


@attributed
async def add_formation_players(
    claims: Claims,
    game_id: UUID,
    formation_id: UUID,
    entries: list[FormationPlayerTagsData],
) -> list[FormationPlayerWithTags]:
    await check_is_formation_of_game(formation_id, game_id)
    await ensure_authorized(claims, Action.FORMATION_ROSTER_EDIT, formation_id)
    return await roster_crud.add_formation_players(formation_id, entries)


@attributed
async def remove_formation_players(
    claims: Claims, game_id: UUID, formation_id: UUID, player_ids: list[UUID]
) -> list[FormationPlayerWithTags]:
    await check_is_formation_of_game(formation_id, game_id)
    await ensure_authorized(claims, Action.FORMATION_ROSTER_EDIT, formation_id)
    return await roster_crud.remove_formation_players(formation_id, player_ids)


@attributed
async def find_training_players(claims: Claims, training_id: UUID) -> list[TrainingPlayerWithTags]:
    await ensure_authorized(claims, Action.TRAINING_ROSTER_READ, training_id)
    return await roster_crud.training_roster(training_id)


@attributed
async def add_training_players(
    claims: Claims, training_id: UUID, entries: list[TrainingPlayerTagsData]
) -> list[TrainingPlayerWithTags]:
    await ensure_authorized(claims, Action.TRAINING_ROSTER_EDIT, training_id)
    return await roster_crud.add_training_players(training_id, entries)


@attributed
async def remove_training_players(
    claims: Claims, training_id: UUID, player_ids: list[UUID]
) -> list[TrainingPlayerWithTags]:
    await ensure_authorized(claims, Action.TRAINING_ROSTER_EDIT, training_id)
    return await roster_crud.remove_training_players(training_id, player_ids)


# ---------------------------------------------------------------------------
# Recording sessions
# ---------------------------------------------------------------------------


@attributed
async def create_recording_session(
    claims: Claims, data: RecordingSessionData
) -> RecordingSessionWithCameras:
    await ensure_authorized(claims, Action.RECORDING_SESSION_CREATE, data.booking_id)
    return await recording_session_crud.create_recording_session(claims.subject_id, data)


@attributed
async def find_recording_session(claims: Claims, session_id: UUID) -> RecordingSessionWithCameras:
    await ensure_authorized(claims, Action.RECORDING_SESSION_READ, session_id)
    return await recording_session_crud.find_recording_session(session_id)


@attributed
async def list_recording_sessions(
    claims: Claims, booking_id: UUID, limit: int = 100, offset: int = 0
) -> list[RecordingSessionWithCameras]:
    await ensure_authorized(claims, Action.RECORDING_SESSION_LIST, booking_id)
    return await recording_session_crud.list_by_booking(booking_id, limit, offset)


@attributed
async def update_recording_session(
    claims: Claims, session_id: UUID, data: RecordingSessionData
) -> RecordingSessionWithCameras:
    await ensure_authorized(claims, Action.RECORDING_SESSION_UPDATE, session_id)
    # moving a session needs the same right on the destination booking
    await ensure_authorized(claims, Action.RECORDING_SESSION_CREATE, data.booking_id)
    return await recording_session_crud.update_recording_session(session_id, data)


@attributed
async def delete_recording_session(
    claims: Claims, session_id: UUID
) -> RecordingSessionWithCameras:
    await ensure_authorized(claims, Action.RECORDING_SESSION_DELETE, session_id)
    return await recording_session_crud.delete_recording_session(session_id)


# ---------------------------------------------------------------------------
# Clubs and teams
# ---------------------------------------------------------------------------


@attributed
async def create_club(claims: Claims, data: ClubCreate) -> ClubResponse:
    # any user may found a club and becomes its responsible
    return await club_crud.create_club(claims.subject_id, data)


@attributed
async def update_club(claims: Claims, club_id: str, data: ClubUpdate) -> ClubResponse:
    await ensure_authorized(claims, Action.CLUB_UPDATE, club_id)
    return await club_crud.update_club(club_id, data)


@attributed
async def delete_club(claims: Claims, club_id: str) -> ClubResponse:
    await ensure_authorized(claims, Action.CLUB_DELETE, club_id)
    return await club_crud.delete_club(club_id)


@attributed
async def add_club_responsible(claims: Claims, club_id: str, user_id: UUID) -> list[UUID]:
    await ensure_authorized(claims, Action.CLUB_MANAGE_RESPONSIBLES, club_id)
    return await club_crud.add_club_responsible(club_id, user_id)


@attributed
async def remove_club_responsible(claims: Claims, club_id: str, user_id: UUID) -> list[UUID]:
    await ensure_authorized(claims, Action.CLUB_MANAGE_RESPONSIBLES, club_id)
    return await club_crud.remove_club_responsible(club_id, user_id)


@attributed
async def create_team(claims: Claims, data: TeamCreate) -> TeamResponse:
    await ensure_authorized(claims, Action.TEAM_CREATE, data.club_id)
    return await team_crud.create_team(data)


@attributed
async def update_team(claims: Claims, team_id: UUID, data: TeamUpdate) -> TeamResponse:
    await ensure_authorized(claims, Action.TEAM_UPDATE, team_id)
    return await team_crud.update_team(team_id, data)


@attributed
async def delete_team(claims: Claims, team_id: UUID) -> TeamResponse:
    await ensure_authorized(claims, Action.TEAM_DELETE, team_id)
    return await team_crud.delete_team(team_id)


# ---------------------------------------------------------------------------
# Persons
# ---------------------------------------------------------------------------


@attributed
async def update_person(claims: Claims, person_id: UUID, data: PersonUpdate) -> PersonWithProfiles:
    await ensure_authorized(claims, Action.PERSON_UPDATE, person_id)
    return await person_crud.update_person(person_id, data)


@attributed
async def add_profile(claims: Claims, person_id: UUID, data: NewProfile) -> PersonWithProfiles:
    await ensure_authorized(claims, Action.PERSON_ADD_PROFILE, person_id)
    return await person_crud.add_profile(person_id, data)


@attributed
async def join_team(
    claims: Claims, person_id: UUID, team_id: UUID, info: JoinInfo
) -> TeamMembership:
    await ensure_authorized(
        claims, Action.TEAM_JOIN, Membership(person_id, team_id), resource_id=team_id
    )
    return await person_crud.join_team(person_id, team_id, info)


@attributed
async def leave_team(
    claims: Claims, person_id: UUID, team_id: UUID, info: LeaveInfo
) -> TeamMembership:
    await ensure_authorized(
        claims, Action.TEAM_LEAVE, Membership(person_id, team_id), resource_id=team_id
    )
    return await person_crud.leave_team(person_id, team_id, info)


# ---------------------------------------------------------------------------
# Open reads
# ---------------------------------------------------------------------------


@attributed
async def find_booking(claims: Claims, booking_id: UUID) -> BookingWithEvent:
    return await booking_crud.find_booking(booking_id)


@attributed
async def list_bookings(claims: Claims, filters: BookingFilters) -> list[BookingWithEvent]:
    return await booking_crud.list_bookings(filters)


@attributed
async def find_club(claims: Claims, club_id: str) -> ClubResponse:
    return await club_crud.find_club(club_id)


@attributed
async def list_clubs(claims: Claims, limit: int = 100, offset: int = 0) -> list[ClubResponse]:
    return await club_crud.list_clubs(limit, offset)


@attributed
async def list_club_responsibles(claims: Claims, club_id: str) -> list[UUID]:
    return await club_crud.list_responsibles(club_id)


@attributed
async def find_team(claims: Claims, team_id: UUID) -> TeamResponse:
    return await team_crud.find_team(team_id)


@attributed
async def list_teams(
    claims: Claims,
    club_id: str | None = None,
    sport: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[TeamResponse]:
    return await team_crud.list_teams(club_id, sport, limit, offset)


@attributed
async def find_person(claims: Claims, person_id: UUID) -> PersonWithProfiles:
    return await person_crud.find_person(person_id)


@attributed
async def list_team_staff(claims: Claims, team_id: UUID) -> TeamStaff:
    return await person_crud.list_staff_by_team(team_id)


@attributed
async def list_club_staff(claims: Claims, club_id: str) -> list[TeamStaff]:
    return await person_crud.list_staff_by_club(club_id)


@attributed
async def list_cameras(claims: Claims) -> list[CameraResponse]:
    return await camera_crud.list_cameras()


@attributed
async def find_camera(claims: Claims, camera_id: UUID) -> CameraResponse:
    return await camera_crud.find_camera(camera_id)

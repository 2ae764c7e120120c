"""Find-by-id helpers shared by the crud modules and the authorization gate."""

from __future__ import annotations

from typing import Any, TypeVar
from uuid import UUID

from tortoise.expressions import Q
from tortoise.models import Model

from facility_bookings.errors import NotFound, StoreError
from facility_bookings.models import (
    Booking,
    Camera,
    Formation,
    Game,
    Person,
    RecordingSession,
    SportsClub,
    Team,
    Training,
)

M = TypeVar("M", bound=Model)


async def _get_or_404(model: type[M], label: str, resource_id: Any, lock: bool = False) -> M:
    qs = model.filter(pk=resource_id)
    if lock:
        qs = qs.select_for_update()
    inst = await qs.first()
    if inst is None:
        raise NotFound(f"{label} {resource_id} not found", resource_id=resource_id)
    return inst


async def find_booking_row(booking_id: UUID, lock: bool = False) -> Booking:
    return await _get_or_404(Booking, "Booking", booking_id, lock)


async def find_game(game_id: UUID) -> Game:
    return await _get_or_404(Game, "Game", game_id)


async def find_training(training_id: UUID) -> Training:
    return await _get_or_404(Training, "Training", training_id)


async def find_formation(formation_id: UUID) -> Formation:
    return await _get_or_404(Formation, "Formation", formation_id)


async def find_team(team_id: UUID) -> Team:
    return await _get_or_404(Team, "Team", team_id)


async def find_club(club_id: str, lock: bool = False) -> SportsClub:
    return await _get_or_404(SportsClub, "Sports club", club_id, lock)


async def find_person(person_id: UUID) -> Person:
    return await _get_or_404(Person, "Person", person_id)


async def find_recording_session_row(session_id: UUID) -> RecordingSession:
    return await _get_or_404(RecordingSession, "Recording session", session_id)


async def find_camera(camera_id: UUID) -> Camera:
    return await _get_or_404(Camera, "Camera", camera_id)


async def find_event(booking_id: UUID) -> Game | Training | None:
    """The event attached to a booking, if any. Never both a game and a training."""
    game = await Game.get_or_none(booking_id=booking_id)
    training = await Training.get_or_none(booking_id=booking_id)
    if game is not None and training is not None:
        raise StoreError(
            f"Booking {booking_id} has both a game and a training", resource_id=booking_id
        )
    return game or training


async def get_game_by_formation(formation_id: UUID) -> Game | None:
    return await Game.filter(
        Q(home_formation_id=formation_id) | Q(visiting_formation_id=formation_id)
    ).first()


async def check_is_formation_of_game(formation_id: UUID, game_id: UUID) -> Formation:
    """A formation addressed through the wrong game is reported as not found."""
    formation = await find_formation(formation_id)
    game = await get_game_by_formation(formation_id)
    if game is None or game.id != game_id:
        raise NotFound(
            f"Formation {formation_id} is not found for game {game_id}",
            resource_id=formation_id,
        )
    return formation


async def game_team_ids(game: Game) -> list[UUID]:
    formation_ids = [game.home_formation_id]
    if game.visiting_formation_id is not None:
        formation_ids.append(game.visiting_formation_id)
    teams = dict(
        await Formation.filter(id__in=formation_ids).values_list("id", "team_id")
    )
    # home team first
    return [teams[fid] for fid in formation_ids if fid in teams]


async def event_team_ids(booking_id: UUID) -> list[UUID]:
    """Teams involved in the event of a booking (empty when it has none)."""
    event = await find_event(booking_id)
    if isinstance(event, Game):
        return await game_team_ids(event)
    if isinstance(event, Training):
        return [event.team_id]
    return []


async def ensure_teams_exist(team_ids: list[UUID]) -> None:
    found = set(await Team.filter(id__in=team_ids).values_list("id", flat=True))
    for team_id in team_ids:
        if team_id not in found:
            raise NotFound(f"Team {team_id} not found", resource_id=team_id)


async def ensure_persons_exist(person_ids: list[UUID]) -> None:
    found = set(await Person.filter(id__in=person_ids).values_list("id", flat=True))
    for person_id in person_ids:
        if person_id not in found:
            raise NotFound(f"Person {person_id} not found", resource_id=person_id)

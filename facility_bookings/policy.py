"""
Authorization gate.

`authorize()` answers whether a subject may perform an action on a target and
why. Rules are evaluated in a fixed order: administrator, then direct
ownership (author or same person), then roles on the involved teams. Only
active role edges count.

`ensure_authorized()` turns a denial into Forbidden. The reason is logged and
never sent to the client.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, NamedTuple
from uuid import UUID

from loguru import logger

from facility_bookings.actions import ACTION_DESCRIPTIONS, Action
from facility_bookings.crud import lookup
from facility_bookings.deps import Claims
from facility_bookings.errors import Forbidden
from facility_bookings.roles import (
    is_administrator,
    is_club_responsible,
    is_coach_or_responsible,
    is_member_of_team,
    is_person_with_user,
    is_player_of_team,
    is_responsible_of_team,
    is_same_person,
)
from facility_bookings.schemas import BookingData


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str

    @classmethod
    def allow(cls, reason: str) -> Decision:
        return cls(True, reason)

    @classmethod
    def deny(cls, reason: str) -> Decision:
        return cls(False, reason)


class Membership(NamedTuple):
    """Target of team join/leave."""

    person_id: UUID
    team_id: UUID


Rule = Callable[[UUID, Any], Awaitable[Decision]]


# ---------------------------------------------------------------------------
# Rules (administrator is already handled by authorize)
# ---------------------------------------------------------------------------


async def _any_coach_or_responsible(subject_id: UUID, team_ids: list[UUID]) -> Decision | None:
    for team_id in team_ids:
        if await is_coach_or_responsible(subject_id, team_id):
            return Decision.allow(f"coach or responsible of team {team_id}")
    return None


async def _create_booking(subject_id: UUID, data: BookingData) -> Decision:
    if data.event is None:
        return Decision.deny("only administrators create bookings without an event")
    await lookup.ensure_teams_exist(data.event.team_ids())
    allowed = await _any_coach_or_responsible(subject_id, data.event.team_ids())
    return allowed or Decision.deny("not coach or responsible of any team of the event")


async def _edit_booking(subject_id: UUID, booking_id: UUID) -> Decision:
    booking = await lookup.find_booking_row(booking_id)
    if is_same_person(subject_id, booking.author_id):
        return Decision.allow("author of the booking")
    allowed = await _any_coach_or_responsible(
        subject_id, await lookup.event_team_ids(booking_id)
    )
    return allowed or Decision.deny("not author, coach or responsible of the involved teams")


async def _read_booking_recordings(
    subject_id: UUID, booking_id: UUID, session_author_id: UUID | None = None
) -> Decision:
    booking = await lookup.find_booking_row(booking_id)
    if is_same_person(subject_id, booking.author_id):
        return Decision.allow("author of the booking")
    if session_author_id is not None and is_same_person(subject_id, session_author_id):
        return Decision.allow("author of the recording session")
    for team_id in await lookup.event_team_ids(booking_id):
        if await is_member_of_team(subject_id, team_id):
            return Decision.allow(f"member of team {team_id}")
    return Decision.deny("not author or member of the involved teams")


async def _delete_game(subject_id: UUID, game_id: UUID) -> Decision:
    game = await lookup.find_game(game_id)
    return await _edit_booking(subject_id, game.booking_id)


async def _delete_training(subject_id: UUID, training_id: UUID) -> Decision:
    training = await lookup.find_training(training_id)
    return await _edit_booking(subject_id, training.booking_id)


async def _edit_team_roster(subject_id: UUID, team_id: UUID) -> Decision:
    if await is_coach_or_responsible(subject_id, team_id):
        return Decision.allow(f"coach or responsible of team {team_id}")
    return Decision.deny(f"not coach or responsible of team {team_id}")


async def _read_team_roster(subject_id: UUID, team_id: UUID) -> Decision:
    if await is_player_of_team(subject_id, team_id):
        return Decision.allow(f"player of team {team_id}")
    return await _edit_team_roster(subject_id, team_id)


async def _edit_formation(subject_id: UUID, formation_id: UUID) -> Decision:
    formation = await lookup.find_formation(formation_id)
    return await _edit_team_roster(subject_id, formation.team_id)


async def _read_formation(subject_id: UUID, formation_id: UUID) -> Decision:
    formation = await lookup.find_formation(formation_id)
    return await _read_team_roster(subject_id, formation.team_id)


async def _edit_training_roster(subject_id: UUID, training_id: UUID) -> Decision:
    training = await lookup.find_training(training_id)
    return await _edit_team_roster(subject_id, training.team_id)


async def _read_training_roster(subject_id: UUID, training_id: UUID) -> Decision:
    training = await lookup.find_training(training_id)
    return await _read_team_roster(subject_id, training.team_id)


async def _read_recording_session(subject_id: UUID, session_id: UUID) -> Decision:
    session = await lookup.find_recording_session_row(session_id)
    return await _read_booking_recordings(subject_id, session.booking_id, session.author_id)


async def _edit_recording_session(subject_id: UUID, session_id: UUID) -> Decision:
    session = await lookup.find_recording_session_row(session_id)
    return await _edit_booking(subject_id, session.booking_id)


async def _manage_club(subject_id: UUID, club_id: str) -> Decision:
    await lookup.find_club(club_id)
    if await is_club_responsible(subject_id, club_id):
        return Decision.allow(f"responsible of sports club {club_id}")
    return Decision.deny(f"not responsible of sports club {club_id}")


async def _update_team(subject_id: UUID, team_id: UUID) -> Decision:
    await lookup.find_team(team_id)
    return await _edit_team_roster(subject_id, team_id)


async def _delete_team(subject_id: UUID, team_id: UUID) -> Decision:
    await lookup.find_team(team_id)
    if await is_responsible_of_team(subject_id, team_id):
        return Decision.allow(f"responsible of the club of team {team_id}")
    return Decision.deny(f"not responsible of the club of team {team_id}")


async def _edit_person(subject_id: UUID, person_id: UUID) -> Decision:
    await lookup.find_person(person_id)
    if not await is_person_with_user(person_id):
        return Decision.allow("person has no user")
    if is_same_person(subject_id, person_id):
        return Decision.allow("same person")
    return Decision.deny("person has a user and is someone else")


async def _join_team(subject_id: UUID, target: Membership) -> Decision:
    await lookup.find_team(target.team_id)
    return await _edit_team_roster(subject_id, target.team_id)


async def _leave_team(subject_id: UUID, target: Membership) -> Decision:
    if is_same_person(subject_id, target.person_id) and await is_person_with_user(
        target.person_id
    ):
        return Decision.allow("same person")
    return await _join_team(subject_id, target)


_RULES: dict[Action, Rule] = {
    Action.BOOKING_CREATE: _create_booking,
    Action.BOOKING_UPDATE: _edit_booking,
    Action.BOOKING_DELETE: _edit_booking,
    Action.GAME_DELETE: _delete_game,
    Action.TRAINING_DELETE: _delete_training,
    Action.FORMATION_ROSTER_READ: _read_formation,
    Action.FORMATION_ROSTER_EDIT: _edit_formation,
    Action.TRAINING_ROSTER_READ: _read_training_roster,
    Action.TRAINING_ROSTER_EDIT: _edit_training_roster,
    Action.RECORDING_SESSION_CREATE: _edit_booking,
    Action.RECORDING_SESSION_READ: _read_recording_session,
    Action.RECORDING_SESSION_LIST: _read_booking_recordings,
    Action.RECORDING_SESSION_UPDATE: _edit_recording_session,
    Action.RECORDING_SESSION_DELETE: _edit_recording_session,
    Action.CLUB_UPDATE: _manage_club,
    Action.CLUB_DELETE: _manage_club,
    Action.CLUB_MANAGE_RESPONSIBLES: _manage_club,
    Action.TEAM_CREATE: _manage_club,
    Action.TEAM_UPDATE: _update_team,
    Action.TEAM_DELETE: _delete_team,
    Action.PERSON_UPDATE: _edit_person,
    Action.PERSON_ADD_PROFILE: _edit_person,
    Action.TEAM_JOIN: _join_team,
    Action.TEAM_LEAVE: _leave_team,
}


# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------


async def authorize(subject_id: UUID, action: Action, target: Any) -> Decision:
    """
    Decide whether `subject_id` may perform `action` on `target`.

    The target is the id of the resource the action names (a booking id for
    booking and recording-session create/list actions, a club vat number for
    club and team create actions), the payload for BOOKING_CREATE, or a
    Membership for TEAM_JOIN / TEAM_LEAVE. Missing targets raise NotFound.
    """
    if await is_administrator(subject_id):
        return Decision.allow("administrator")
    return await _RULES[action](subject_id, target)


async def ensure_authorized(
    claims: Claims, action: Action, target: Any, resource_id: Any = None
) -> None:
    if resource_id is None and isinstance(target, (UUID, str)):
        resource_id = target

    decision = await authorize(claims.subject_id, action, target)
    if not decision.allowed:
        logger.info(
            "Denied {} to {} on {}: {}", action, claims.subject_id, resource_id, decision.reason
        )
        raise Forbidden(
            action, claims.subject_id, resource_id, description=ACTION_DESCRIPTIONS[action]
        )
    logger.debug(
        "Allowed {} to {} on {}: {}", action, claims.subject_id, resource_id, decision.reason
    )


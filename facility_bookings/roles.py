"""
Role graph reader: existence checks over the role edges of a person.

All checks are read-only. `active_only=True` restricts to edges whose
`until_date` is not set, `False` matches any historical edge.
"""

from __future__ import annotations

from uuid import UUID

from loguru import logger

from facility_bookings.models import Administrator, CoachTeam, PlayerTeam, User, UserClub


async def is_administrator(person_id: UUID) -> bool:
    logger.trace("Checking if person {} is an administrator", person_id)
    return await Administrator.filter(person_id=person_id).exists()


async def is_person_with_user(person_id: UUID) -> bool:
    logger.trace("Checking if person {} is associated to a user", person_id)
    return await User.filter(person_id=person_id).exists()


async def is_coach_of_team(
    person_id: UUID, team_id: UUID | None = None, active_only: bool = True
) -> bool:
    """Without `team_id`, matches a coach of any team."""
    logger.trace(
        "Checking if person {} is coach of team {} (active_only={})",
        person_id,
        team_id,
        active_only,
    )
    qs = CoachTeam.active() if active_only else CoachTeam.all()
    qs = qs.filter(coach_id=person_id)
    if team_id is not None:
        qs = qs.filter(team_id=team_id)
    return await qs.exists()


async def is_player_of_team(
    person_id: UUID, team_id: UUID | None = None, active_only: bool = True
) -> bool:
    """Without `team_id`, matches a player of any team."""
    logger.trace(
        "Checking if person {} is player of team {} (active_only={})",
        person_id,
        team_id,
        active_only,
    )
    qs = PlayerTeam.active() if active_only else PlayerTeam.all()
    qs = qs.filter(player_id=person_id)
    if team_id is not None:
        qs = qs.filter(team_id=team_id)
    return await qs.exists()


async def is_responsible_of_team(
    user_id: UUID, team_id: UUID, active_only: bool = True
) -> bool:
    """Responsible of the club the team belongs to (Team -> SportsClub -> UserClub)."""
    logger.trace(
        "Checking if user {} is responsible of the club of team {} (active_only={})",
        user_id,
        team_id,
        active_only,
    )
    qs = UserClub.active() if active_only else UserClub.all()
    return await qs.filter(user_id=user_id, club__teams__id=team_id).exists()


async def is_club_responsible(
    user_id: UUID, club_id: str | None = None, active_only: bool = True
) -> bool:
    """Without `club_id`, matches a responsible of any club."""
    logger.trace(
        "Checking if user {} is responsible of club {} (active_only={})",
        user_id,
        club_id,
        active_only,
    )
    qs = UserClub.active() if active_only else UserClub.all()
    qs = qs.filter(user_id=user_id)
    if club_id is not None:
        qs = qs.filter(club_id=club_id)
    return await qs.exists()


def is_same_person(a: UUID, b: UUID) -> bool:
    return a == b


async def is_coach_or_responsible(person_id: UUID, team_id: UUID) -> bool:
    return await is_coach_of_team(person_id, team_id) or await is_responsible_of_team(
        person_id, team_id
    )


async def is_member_of_team(person_id: UUID, team_id: UUID) -> bool:
    """Player, coach or club responsible of the team, right now."""
    return await is_player_of_team(person_id, team_id) or await is_coach_or_responsible(
        person_id, team_id
    )

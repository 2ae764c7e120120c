from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from loguru import logger

from facility_bookings.crud.base import atomic
from facility_bookings.crud.lookup import find_club, find_person, find_team
from facility_bookings.errors import ConflictInvariant, NotFound, ValidationFailed
from facility_bookings.models import (
    Administrator,
    Coach,
    CoachTeam,
    Fan,
    Person,
    Player,
    PlayerTeam,
    Team,
    TemporalRelation,
    User,
)
from facility_bookings.schemas import (
    JoinInfo,
    LeaveInfo,
    NewProfile,
    PersonResponse,
    PersonUpdate,
    PersonWithProfiles,
    TeamMembership,
    TeamRole,
    TeamStaff,
)

_EDGE_MODELS: dict[TeamRole, type[TemporalRelation]] = {
    TeamRole.PLAYER: PlayerTeam,
    TeamRole.COACH: CoachTeam,
}
_EDGE_PERSON_FIELD = {TeamRole.PLAYER: "player_id", TeamRole.COACH: "coach_id"}


def _as_utc(value: datetime) -> datetime:
    # naive values coming back from the store are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _membership(edge: PlayerTeam | CoachTeam, role: TeamRole, person_id: UUID) -> TeamMembership:
    return TeamMembership(
        person_id=person_id,
        team_id=edge.team_id,
        role=role,
        since_date=edge.since_date,
        until_date=edge.until_date,
        state=edge.state,
    )


class PersonCRUD:
    async def find_person(self, person_id: UUID) -> PersonWithProfiles:
        person = await find_person(person_id)
        coach = await Coach.get_or_none(person_id=person_id)
        return PersonWithProfiles(
            id=person.id,
            name=person.name,
            surname=person.surname,
            has_user=await User.filter(person_id=person_id).exists(),
            administrator=await Administrator.filter(person_id=person_id).exists(),
            coach_role=coach.role if coach else None,
            fan=await Fan.filter(person_id=person_id).exists(),
            player=await Player.filter(person_id=person_id).exists(),
        )

    async def list_staff(self, team_ids: list[UUID]) -> list[TeamStaff]:
        """Active players and coaches per team, in the order of `team_ids`."""
        if not team_ids:
            return []
        players = await PlayerTeam.active().filter(team_id__in=team_ids).values_list(
            "team_id", "player_id"
        )
        coaches = await CoachTeam.active().filter(team_id__in=team_ids).values_list(
            "team_id", "coach_id"
        )
        people = {
            p.id: PersonResponse.model_validate(p)
            for p in await Person.filter(
                id__in=list({pid for _, pid in players} | {cid for _, cid in coaches})
            )
        }
        staff = {tid: TeamStaff(team_id=tid, players=[], coaches=[]) for tid in team_ids}
        for team_id, person_id in players:
            staff[team_id].players.append(people[person_id])
        for team_id, person_id in coaches:
            staff[team_id].coaches.append(people[person_id])
        return list(staff.values())

    async def list_staff_by_team(self, team_id: UUID) -> TeamStaff:
        await find_team(team_id)
        return (await self.list_staff([team_id]))[0]

    async def list_staff_by_club(self, club_id: str) -> list[TeamStaff]:
        await find_club(club_id)
        team_ids = await Team.filter(club_id=club_id).order_by("name").values_list(
            "id", flat=True
        )
        return await self.list_staff(list(team_ids))

    async def update_person(self, person_id: UUID, data: PersonUpdate) -> PersonWithProfiles:
        async with atomic("update the person", person_id):
            person = await find_person(person_id)
            person.update_from_dict(data.model_dump())
            await person.save()
        return await self.find_person(person_id)

    async def add_profile(self, person_id: UUID, data: NewProfile) -> PersonWithProfiles:
        """Create the requested profiles. Profiles the person already has are left as they are."""
        await find_person(person_id)
        async with atomic("add a profile to the person", person_id):
            for wanted, model in (
                (data.administrator, Administrator),
                (data.fan, Fan),
                (data.player, Player),
            ):
                if wanted and not await model.filter(person_id=person_id).exists():
                    await model.create(person_id=person_id)
            if data.coach is not None and not await Coach.filter(person_id=person_id).exists():
                await Coach.create(person_id=person_id, role=data.coach.role)

        logger.debug("Profiles added to person {}: {}", person_id, data.model_dump())
        return await self.find_person(person_id)

    async def join_team(self, person_id: UUID, team_id: UUID, info: JoinInfo) -> TeamMembership:
        await find_person(person_id)
        await find_team(team_id)
        model = _EDGE_MODELS[info.role]
        person_field = _EDGE_PERSON_FIELD[info.role]

        async with atomic("add the person to the team", team_id):
            if await model.active().filter(team_id=team_id, **{person_field: person_id}).exists():
                raise ConflictInvariant(
                    f"Person {person_id} is already {info.role} of team {team_id}",
                    resource_id=team_id,
                )
            edge = await model.create(
                team_id=team_id,
                since_date=info.since_date,
                until_date=info.until_date,
                **{person_field: person_id},
            )

        logger.info("Person {} joined team {} as {}", person_id, team_id, info.role)
        return _membership(edge, info.role, person_id)

    async def leave_team(self, person_id: UUID, team_id: UUID, info: LeaveInfo) -> TeamMembership:
        """Stamp `until_date` on the active edge. The edge itself is kept."""
        model = _EDGE_MODELS[info.role]
        person_field = _EDGE_PERSON_FIELD[info.role]

        async with atomic("remove the person from the team", team_id):
            edge = await model.active().filter(team_id=team_id, **{person_field: person_id}).first()
            if edge is None:
                raise NotFound(
                    f"Person {person_id} is not an active {info.role} of team {team_id}",
                    resource_id=team_id,
                )
            until_date = info.until_date or datetime.now(timezone.utc)
            if _as_utc(until_date) <= _as_utc(edge.since_date):
                raise ValidationFailed(
                    f"Person {person_id} cannot leave team {team_id} before joining it",
                    resource_id=team_id,
                    since_date=edge.since_date.isoformat(),
                )
            await edge.close(until_date)

        logger.info("Person {} left team {} as {}", person_id, team_id, info.role)
        return _membership(edge, info.role, person_id)

from __future__ import annotations

from uuid import UUID

from loguru import logger

from facility_bookings.crud.base import atomic
from facility_bookings.crud.lookup import find_club, find_team
from facility_bookings.errors import ConflictInvariant
from facility_bookings.models import CoachTeam, Formation, PlayerTeam, Team, Training
from facility_bookings.schemas import TeamCreate, TeamResponse, TeamUpdate


class TeamCRUD:
    async def create_team(self, data: TeamCreate) -> TeamResponse:
        await find_club(data.club_id)
        team = await Team.create(**data.model_dump())
        logger.info("Team {} created in sports club {}", team.id, data.club_id)
        return TeamResponse.model_validate(team, from_attributes=True)

    async def find_team(self, team_id: UUID) -> TeamResponse:
        return TeamResponse.model_validate(await find_team(team_id), from_attributes=True)

    async def list_teams(
        self,
        club_id: str | None = None,
        sport: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[TeamResponse]:
        qs = Team.all()
        if club_id is not None:
            qs = qs.filter(club_id=club_id)
        if sport is not None:
            qs = qs.filter(sport=sport)
        teams = await qs.order_by("name", "id").offset(offset).limit(limit)
        return [TeamResponse.model_validate(t, from_attributes=True) for t in teams]

    async def update_team(self, team_id: UUID, data: TeamUpdate) -> TeamResponse:
        async with atomic("update the team", team_id):
            team = await find_team(team_id)
            team.update_from_dict(data.model_dump())
            await team.save()
        return TeamResponse.model_validate(team, from_attributes=True)

    async def delete_team(self, team_id: UUID) -> TeamResponse:
        """Teams that already played or trained are kept for history."""
        async with atomic("delete the team", team_id):
            team = await find_team(team_id)
            if (
                await Formation.filter(team_id=team_id).exists()
                or await Training.filter(team_id=team_id).exists()
            ):
                raise ConflictInvariant(
                    f"Team {team_id} is referenced by games or trainings", resource_id=team_id
                )
            snapshot = TeamResponse.model_validate(team, from_attributes=True)
            await PlayerTeam.filter(team_id=team_id).delete()
            await CoachTeam.filter(team_id=team_id).delete()
            await Team.filter(id=team_id).delete()

        logger.info("Team {} deleted", team_id)
        return snapshot

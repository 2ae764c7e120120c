from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from loguru import logger

from facility_bookings.crud.base import atomic
from facility_bookings.crud.lookup import find_club
from facility_bookings.errors import ConflictInvariant, NotFound
from facility_bookings.models import SportsClub, Team, User, UserClub
from facility_bookings.schemas import ClubCreate, ClubResponse, ClubUpdate


async def _ensure_user(person_id: UUID) -> None:
    if not await User.filter(person_id=person_id).exists():
        raise NotFound(f"User for person {person_id} not found", resource_id=person_id)


class ClubCRUD:
    async def create_club(self, creator_id: UUID, data: ClubCreate) -> ClubResponse:
        """The creator becomes the first responsible of the club."""
        await _ensure_user(creator_id)
        if await SportsClub.filter(vat_number=data.vat_number).exists():
            raise ConflictInvariant(
                f"Sports club {data.vat_number} already exists", resource_id=data.vat_number
            )

        async with atomic("create a sports club", data.vat_number):
            club = await SportsClub.create(**data.model_dump())
            await UserClub.create(
                user_id=creator_id, club_id=club.vat_number, since_date=datetime.now(timezone.utc)
            )

        logger.info("Sports club {} created by {}", club.vat_number, creator_id)
        return ClubResponse.model_validate(club, from_attributes=True)

    async def find_club(self, club_id: str) -> ClubResponse:
        return ClubResponse.model_validate(await find_club(club_id), from_attributes=True)

    async def list_clubs(self, limit: int = 100, offset: int = 0) -> list[ClubResponse]:
        clubs = await SportsClub.all().order_by("name", "vat_number").offset(offset).limit(limit)
        return [ClubResponse.model_validate(c, from_attributes=True) for c in clubs]

    async def update_club(self, club_id: str, data: ClubUpdate) -> ClubResponse:
        async with atomic("update the sports club", club_id):
            club = await find_club(club_id, lock=True)
            club.update_from_dict(data.model_dump())
            await club.save()
        return ClubResponse.model_validate(club, from_attributes=True)

    async def delete_club(self, club_id: str) -> ClubResponse:
        async with atomic("delete the sports club", club_id):
            club = await find_club(club_id, lock=True)
            if await Team.filter(club_id=club_id).exists():
                raise ConflictInvariant(
                    f"Sports club {club_id} still has teams", resource_id=club_id
                )
            snapshot = ClubResponse.model_validate(club, from_attributes=True)
            await UserClub.filter(club_id=club_id).delete()
            await SportsClub.filter(vat_number=club_id).delete()

        logger.info("Sports club {} deleted", club_id)
        return snapshot

    async def list_responsibles(self, club_id: str) -> list[UUID]:
        await find_club(club_id)
        return await UserClub.active().filter(club_id=club_id).values_list("user_id", flat=True)

    async def add_club_responsible(self, club_id: str, user_id: UUID) -> list[UUID]:
        await _ensure_user(user_id)
        async with atomic("add a club responsible", club_id):
            await find_club(club_id, lock=True)
            if not await UserClub.active().filter(club_id=club_id, user_id=user_id).exists():
                await UserClub.create(
                    user_id=user_id, club_id=club_id, since_date=datetime.now(timezone.utc)
                )
        return await self.list_responsibles(club_id)

    async def remove_club_responsible(self, club_id: str, user_id: UUID) -> list[UUID]:
        """Close the responsibility edge. A club always keeps one active responsible."""
        async with atomic("remove a club responsible", club_id):
            await find_club(club_id, lock=True)
            edge = await UserClub.active().filter(club_id=club_id, user_id=user_id).first()
            if edge is None:
                raise NotFound(
                    f"User {user_id} is not a responsible of sports club {club_id}",
                    resource_id=club_id,
                )
            if await UserClub.active().filter(club_id=club_id).count() <= 1:
                raise ConflictInvariant(
                    f"Sports club {club_id} must keep at least one responsible",
                    resource_id=club_id,
                )
            await edge.close()

        logger.info("User {} is no longer responsible of sports club {}", user_id, club_id)
        return await self.list_responsibles(club_id)

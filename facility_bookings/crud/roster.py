from __future__ import annotations

from collections import defaultdict
from uuid import UUID

from loguru import logger

from facility_bookings.crud.base import atomic
from facility_bookings.crud.lookup import ensure_persons_exist, find_formation, find_training
from facility_bookings.errors import NotFound
from facility_bookings.models import (
    FormationPlayer,
    FormationPlayerTag,
    RfidTag,
    TrainingPlayer,
    TrainingPlayerTag,
)
from facility_bookings.schemas import (
    FormationPlayerTagsData,
    FormationPlayerWithTags,
    TrainingPlayerTagsData,
    TrainingPlayerWithTags,
)


def group_tags_by_player(pairs: list[tuple[UUID, int]]) -> dict[UUID, list[int]]:
    grouped: dict[UUID, list[int]] = defaultdict(list)
    for player_id, tag_id in pairs:
        grouped[player_id].append(tag_id)
    return {player_id: sorted(tags) for player_id, tags in grouped.items()}


def _new_tag_pairs(
    entries: list[FormationPlayerTagsData] | list[TrainingPlayerTagsData],
    existing: set[tuple[UUID, int]],
) -> list[tuple[UUID, int]]:
    """(player, tag) pairs of the payload that are not stored yet, first occurrence kept."""
    seen = set(existing)
    pairs = []
    for entry in entries:
        for tag_id in entry.rfid_tag_ids:
            pair = (entry.player_id, tag_id)
            if pair not in seen:
                seen.add(pair)
                pairs.append(pair)
    return pairs


async def _ensure_refs_exist(
    entries: list[FormationPlayerTagsData] | list[TrainingPlayerTagsData],
) -> None:
    await ensure_persons_exist(list({e.player_id for e in entries}))
    tag_ids = {tag_id for e in entries for tag_id in e.rfid_tag_ids}
    if not tag_ids:
        return
    found = set(await RfidTag.filter(id__in=list(tag_ids)).values_list("id", flat=True))
    missing = sorted(tag_ids - found)
    if missing:
        raise NotFound(f"RFID tag {missing[0]} not found", resource_id=missing[0])


class RosterCRUD:
    # -----------------------------------------------------------------------
    # Formations
    # -----------------------------------------------------------------------

    async def formation_roster(self, formation_id: UUID) -> list[FormationPlayerWithTags]:
        await find_formation(formation_id)
        players = await FormationPlayer.filter(formation_id=formation_id).order_by(
            "created_at", "id"
        )
        tags = group_tags_by_player(
            await FormationPlayerTag.filter(formation_id=formation_id).values_list(
                "player_id", "rfid_tag_id"
            )
        )
        return [
            FormationPlayerWithTags(
                id=p.id,
                formation_id=p.formation_id,
                player_id=p.player_id,
                starting=p.starting,
                entry_minute=p.entry_minute,
                exit_minute=p.exit_minute,
                rfid_tag_ids=tags.get(p.player_id, []),
            )
            for p in players
        ]

    async def add_formation_players(
        self, formation_id: UUID, entries: list[FormationPlayerTagsData]
    ) -> list[FormationPlayerWithTags]:
        """Add player entries and their RFID tags. Tags already stored for a player are skipped."""
        await find_formation(formation_id)
        await _ensure_refs_exist(entries)

        async with atomic("add players to the formation", formation_id):
            existing = set(
                await FormationPlayerTag.filter(
                    formation_id=formation_id,
                    player_id__in=[e.player_id for e in entries],
                ).values_list("player_id", "rfid_tag_id")
            )
            await FormationPlayer.bulk_create(
                [
                    FormationPlayer(
                        formation_id=formation_id,
                        player_id=e.player_id,
                        starting=e.starting,
                        entry_minute=e.entry_minute,
                        exit_minute=e.exit_minute,
                    )
                    for e in entries
                ]
            )
            pairs = _new_tag_pairs(entries, existing)
            if pairs:
                await FormationPlayerTag.bulk_create(
                    [
                        FormationPlayerTag(
                            formation_id=formation_id, player_id=player_id, rfid_tag_id=tag_id
                        )
                        for player_id, tag_id in pairs
                    ]
                )

        logger.debug(
            "Added {} players and {} tags to formation {}", len(entries), len(pairs), formation_id
        )
        return await self.formation_roster(formation_id)

    async def remove_formation_players(
        self, formation_id: UUID, player_ids: list[UUID]
    ) -> list[FormationPlayerWithTags]:
        await find_formation(formation_id)
        async with atomic("remove players from the formation", formation_id):
            await FormationPlayerTag.filter(
                formation_id=formation_id, player_id__in=player_ids
            ).delete()
            await FormationPlayer.filter(
                formation_id=formation_id, player_id__in=player_ids
            ).delete()
        return await self.formation_roster(formation_id)

    # -----------------------------------------------------------------------
    # Trainings
    # -----------------------------------------------------------------------

    async def training_roster(self, training_id: UUID) -> list[TrainingPlayerWithTags]:
        await find_training(training_id)
        players = await TrainingPlayer.filter(training_id=training_id).order_by(
            "created_at", "id"
        )
        tags = group_tags_by_player(
            await TrainingPlayerTag.filter(training_id=training_id).values_list(
                "player_id", "rfid_tag_id"
            )
        )
        return [
            TrainingPlayerWithTags(
                id=p.id,
                training_id=p.training_id,
                player_id=p.player_id,
                rfid_tag_ids=tags.get(p.player_id, []),
            )
            for p in players
        ]

    async def add_training_players(
        self, training_id: UUID, entries: list[TrainingPlayerTagsData]
    ) -> list[TrainingPlayerWithTags]:
        await find_training(training_id)
        await _ensure_refs_exist(entries)

        async with atomic("add players to the training", training_id):
            player_ids = [e.player_id for e in entries]
            existing = set(
                await TrainingPlayerTag.filter(
                    training_id=training_id, player_id__in=player_ids
                ).values_list("player_id", "rfid_tag_id")
            )
            # a player attends a training once
            present = set(
                await TrainingPlayer.filter(
                    training_id=training_id, player_id__in=player_ids
                ).values_list("player_id", flat=True)
            )
            new_players = []
            for player_id in player_ids:
                if player_id not in present:
                    present.add(player_id)
                    new_players.append(player_id)
            if new_players:
                await TrainingPlayer.bulk_create(
                    [TrainingPlayer(training_id=training_id, player_id=pid) for pid in new_players]
                )
            pairs = _new_tag_pairs(entries, existing)
            if pairs:
                await TrainingPlayerTag.bulk_create(
                    [
                        TrainingPlayerTag(
                            training_id=training_id, player_id=player_id, rfid_tag_id=tag_id
                        )
                        for player_id, tag_id in pairs
                    ]
                )

        logger.debug(
            "Added {} players and {} tags to training {}", len(new_players), len(pairs), training_id
        )
        return await self.training_roster(training_id)

    async def remove_training_players(
        self, training_id: UUID, player_ids: list[UUID]
    ) -> list[TrainingPlayerWithTags]:
        await find_training(training_id)
        async with atomic("remove players from the training", training_id):
            await TrainingPlayerTag.filter(
                training_id=training_id, player_id__in=player_ids
            ).delete()
            await TrainingPlayer.filter(training_id=training_id, player_id__in=player_ids).delete()
        return await self.training_roster(training_id)

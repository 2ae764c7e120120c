from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from loguru import logger
from tortoise.exceptions import IntegrityError, OperationalError
from tortoise.transactions import in_transaction

from facility_bookings.errors import StoreError


@asynccontextmanager
async def atomic(operation: str, resource_id: Any = None) -> AsyncIterator[None]:
    """
    Run the enclosed block in one database transaction.

    Any exception rolls the whole block back. Store failures are re-raised as
    StoreError; domain errors pass through untouched.
    """
    try:
        async with in_transaction():
            yield
    except (IntegrityError, OperationalError) as exc:
        logger.error("Store failure while trying to {} ({}): {}", operation, resource_id, exc)
        raise StoreError(
            f"Error while trying to {operation} - {exc}", resource_id=resource_id
        ) from exc

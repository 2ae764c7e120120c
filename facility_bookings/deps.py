from dataclasses import dataclass
from uuid import UUID

from fastapi import Header, HTTPException, Query, status


@dataclass
class Claims:
    """Authenticated subject. `subject_id` is the id of the caller's Person."""

    subject_id: UUID


def get_current_user(x_user_id: str = Header(...)) -> Claims:
    """
    Reads the identity header injected by the gateway after token validation.
    The token has already been verified upstream; only the id is trusted here.
    """
    try:
        subject_id = UUID(x_user_id)
    except (ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user identity from gateway",
        ) from None

    return Claims(subject_id=subject_id)


@dataclass
class Page:
    limit: int
    offset: int


def get_page(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> Page:
    return Page(limit=limit, offset=offset)

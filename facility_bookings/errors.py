"""
Error taxonomy of the booking core.

Every error is an HTTPException so FastAPI renders it as-is; `detail` is a dict
with a machine-checkable `code` plus the ids needed to audit the failure.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status


class DomainError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "error"

    def __init__(
        self,
        message: str,
        resource_id: Any = None,
        actor_id: Any = None,
        **extra: Any,
    ) -> None:
        self.message = message
        self.resource_id = resource_id
        self.actor_id = actor_id
        detail = {
            "code": self.code,
            "message": message,
            "resource_id": str(resource_id) if resource_id is not None else None,
            "actor_id": str(actor_id) if actor_id is not None else None,
            **extra,
        }
        super().__init__(status_code=self.status_code, detail=detail)

    def attribute_to(self, actor_id: Any) -> None:
        """Record who made the rejected request, unless already known."""
        if self.actor_id is None:
            self.actor_id = actor_id
            self.detail["actor_id"] = str(actor_id)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"

    def __init__(
        self,
        action: str,
        actor_id: Any,
        resource_id: Any = None,
        description: str | None = None,
    ) -> None:
        self.action = action
        super().__init__(
            f"User {actor_id} is not authorized to {description or action}",
            resource_id=resource_id,
            actor_id=actor_id,
            action=str(action),
        )


class InvalidTransition(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_transition"


class ValidationFailed(DomainError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"


class ConflictInvariant(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict_invariant"


class StoreError(DomainError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "store_error"

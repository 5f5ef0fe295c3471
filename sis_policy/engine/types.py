"""
Decision engine value types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from ..policies.table import Role


@dataclass(frozen=True)
class Actor:
    """
    The requesting user.

    Attributes:
        user_id: Opaque user identifier
        role: Parsed role, or None when the request named an unknown role
        raw_role: Role string exactly as received
    """

    user_id: str
    role: Role | None
    raw_role: str | None = None

    @classmethod
    def from_request(cls, user_id: str, user_role: str | None) -> "Actor":
        return cls(user_id=user_id, role=Role.parse(user_role), raw_role=user_role)


@dataclass(frozen=True)
class Decision:
    """
    Outcome of one access check.

    ``success`` is False only for internal failures; ``allowed`` is
    meaningful only when ``success`` is True.
    """

    success: bool
    allowed: bool | None = None
    reason: str | None = None
    filtered_ids: list[str] | None = None
    error: str | None = None
    details: str | None = None

    @classmethod
    def allow(cls, reason: str) -> "Decision":
        return cls(success=True, allowed=True, reason=reason)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(success=True, allowed=False, reason=reason)

    @classmethod
    def filtered(
        cls, ids: Sequence[str], reason: str, allowed: bool | None = None
    ) -> "Decision":
        return cls(success=True, allowed=allowed, reason=reason, filtered_ids=list(ids))

    @classmethod
    def failure(cls, error: str, details: str | None = None) -> "Decision":
        return cls(success=False, error=error, details=details)

    def to_dict(self) -> dict[str, Any]:
        """Render the response envelope, omitting unset fields."""
        body: dict[str, Any] = {"success": self.success}
        if self.allowed is not None:
            body["allowed"] = self.allowed
        if self.filtered_ids is not None:
            body["filteredIds"] = list(self.filtered_ids)
        if self.reason is not None:
            body["reason"] = self.reason
        if self.error is not None:
            body["error"] = self.error
        if self.details is not None:
            body["details"] = self.details
        return body

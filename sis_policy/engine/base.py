"""
Shared machinery for the per-resource decision engines.

This module is part of SIS_POLICY.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from functools import wraps
from typing import Any, TypeVar

from ..config import PolicyConfig
from ..policies.table import Policy, ResourceType
from ..repositories.base import RelationshipLookup
from .types import Actor, Decision

logger = logging.getLogger(__name__)

T = TypeVar("T")

Check = tuple[bool, str]


def decision_boundary(error_message: str):
    """
    Decorator for engine actions.

    Lookup failures and programming faults raised inside the action are
    logged with the actor and resource identifiers and turned into a
    ``success=False`` decision. They are never reported as a denial.

    Engine actions take ``(policy, actor)`` positionally and every resource
    identifier as a keyword argument.

    Args:
        error_message: ``error`` field of the failure decision
    """

    def decorator(
        func: Callable[..., Awaitable[Decision]],
    ) -> Callable[..., Awaitable[Decision]]:
        @wraps(func)
        async def wrapper(self, policy: Policy, actor: Actor, **kwargs: Any) -> Decision:
            try:
                decision = await func(self, policy, actor, **kwargs)
            except Exception as e:
                identifiers = {k: v for k, v in kwargs.items() if v}
                logger.error(
                    f"{error_message}: action={func.__name__} user_id={actor.user_id} "
                    f"role={actor.raw_role} resource={self.resource_type.value} "
                    f"ids={identifiers}: {e}",
                    exc_info=True,
                )
                return Decision.failure(error_message, details=str(e))

            if decision.allowed is False:
                logger.debug(
                    f"{self.resource_type.value}.{func.__name__} denied for "
                    f"user_id={actor.user_id}: {decision.reason}"
                )
            return decision

        return wrapper

    return decorator


def all_of(checks: Sequence[Check], success_reason: str) -> Decision:
    """
    Combine checks with logical AND.

    The first failing check, in the order given, supplies the denial reason.
    """
    for passed, reason in checks:
        if not passed:
            return Decision.deny(reason)
    return Decision.allow(success_reason)


async def resolved(value: T) -> T:
    """Wrap a known value so it can be gathered alongside real lookups."""
    return value


class BasePolicyEngine:
    """
    Base class for the per-resource decision engines.

    Subclasses set ``resource_type`` and implement one coroutine per action.
    """

    resource_type: ResourceType

    def __init__(self, lookup: RelationshipLookup, config: PolicyConfig | None = None):
        """
        Args:
            lookup: Relationship lookup the engine queries
            config: Policy configuration (concurrency settings)
        """
        self.lookup = lookup
        self.config = config or PolicyConfig()

    async def gather(self, *checks: Awaitable[bool]) -> list[bool]:
        """
        Await independent checks, concurrently when configured.

        Results keep the order the checks were given in.
        """
        if self.config.concurrent_lookups:
            return list(await asyncio.gather(*checks))
        return [await check for check in checks]

    async def filter_ids(
        self, ids: Sequence[str], predicate: Callable[[str], Awaitable[bool]]
    ) -> list[str]:
        """
        Keep the IDs for which ``predicate`` holds, preserving input order.

        Per-item lookups run concurrently, bounded by
        ``config.max_concurrent_lookups``. A failing lookup fails the whole
        filter.
        """
        if not self.config.concurrent_lookups:
            return [item for item in ids if await predicate(item)]

        semaphore = asyncio.Semaphore(self.config.max_concurrent_lookups)

        async def check(item: str) -> bool:
            async with semaphore:
                return await predicate(item)

        results = await asyncio.gather(*(check(item) for item in ids))
        return [item for item, keep in zip(ids, results) if keep]

    @staticmethod
    def full_access(policy: Policy, verb: str) -> Decision:
        """Decision for an unconditional "all" capability."""
        return Decision.allow(f"{policy.role.value.capitalize()} has full {verb} access")

"""
Pytest configuration and shared fixtures for SIS_POLICY tests.

This module provides:
- A fixed clock and the sample dataset
- In-memory lookup and engine fixtures
- Mock MongoDB database fixtures
- Helpers for building actors and policies
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from motor.motor_asyncio import AsyncIOMotorCollection

from sis_policy.config import PolicyConfig
from sis_policy.engine import AccessDecisionEngine, Actor
from sis_policy.policies import ResourceType, resolve_policy
from sis_policy.repositories import InMemoryLookup, default_dataset

# Monday morning, the day the sample attendance records were taken
SCHOOL_MORNING = datetime(2024, 1, 15, 9, 30)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no external services")


# ============================================================================
# DATASET AND LOOKUP FIXTURES
# ============================================================================


@pytest.fixture
def now() -> datetime:
    """Current time seen by the lookup."""
    return SCHOOL_MORNING


@pytest.fixture
def dataset():
    """Fresh copy of the sample dataset."""
    return default_dataset()


@pytest.fixture
def policy_config() -> PolicyConfig:
    """Default windows with concurrent lookups enabled."""
    return PolicyConfig(concurrent_lookups=True)


@pytest.fixture
def lookup(dataset, now, policy_config) -> InMemoryLookup:
    """In-memory lookup over the sample dataset with a fixed clock."""
    return InMemoryLookup(dataset, clock=lambda: now, config=policy_config)


@pytest.fixture
def engine(lookup, policy_config) -> AccessDecisionEngine:
    """Decision engine over the in-memory lookup."""
    return AccessDecisionEngine(lookup, policy_config)


@pytest.fixture
def as_user():
    """
    Build the (policy, actor) pair for a request.

    Usage:
        policy, actor = as_user(ResourceType.GRADE, "teacher1", "teacher")
    """

    def build(resource_type: ResourceType, user_id: str, role: str):
        return resolve_policy(resource_type, role), Actor.from_request(user_id, role)

    return build


# ============================================================================
# MOCK MONGODB FIXTURES
# ============================================================================


@pytest.fixture
def mock_mongo_database() -> MagicMock:
    """
    Create a mock motor database.

    Collections are created on first access and cached, so tests can
    configure ``db["grades"].find_one`` before the code under test runs.
    """
    collections = {}

    def get_collection(name: str):
        if name not in collections:
            collection = MagicMock(spec=AsyncIOMotorCollection)
            collection.name = name
            collection.find_one = AsyncMock(return_value=None)
            collection.count_documents = AsyncMock(return_value=0)
            collection.distinct = AsyncMock(return_value=[])
            collections[name] = collection
        return collections[name]

    db = MagicMock()
    db.__getitem__.side_effect = get_collection
    return db


# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Reset environment variables before each test."""
    env_vars_to_clear = [
        "SIS_MONGO_URI",
        "SIS_DB_NAME",
        "SIS_MARKING_WINDOW_START",
        "SIS_MARKING_WINDOW_END",
        "SIS_ATTENDANCE_EDIT_HOURS",
        "SIS_ATTENDANCE_DELETE_DAYS",
        "SIS_CONCURRENT_LOOKUPS",
        "SIS_MAX_CONCURRENT_LOOKUPS",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    yield

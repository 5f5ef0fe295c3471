"""
SIS Policy Relationship Lookups

Provides the abstract lookup the decision engine queries, plus in-memory
and MongoDB implementations.

Usage:
    from sis_policy.repositories import InMemoryLookup, default_dataset

    lookup = InMemoryLookup(default_dataset())
    await lookup.can_teacher_view_student("teacher1", "student1")
"""

from .base import (
    ENTITY_TYPES,
    Assignment,
    AttendanceRecord,
    Entity,
    Grade,
    Relation,
    RelationshipLookup,
    StateGate,
    Student,
)
from .fixtures import default_dataset
from .memory import Dataset, InMemoryLookup
from .mongo import MongoRelationshipLookup

__all__ = [
    "Entity",
    "Assignment",
    "AttendanceRecord",
    "Grade",
    "Student",
    "ENTITY_TYPES",
    "Relation",
    "StateGate",
    "RelationshipLookup",
    "Dataset",
    "InMemoryLookup",
    "MongoRelationshipLookup",
    "default_dataset",
]

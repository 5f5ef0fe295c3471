"""
In-memory Relationship Lookup

A deterministic lookup over plain Python collections. Used for local
evaluation from the CLI and as the fake backend in tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from ..config import PolicyConfig
from ..policies.table import ResourceType
from .base import (
    ENTITY_TYPES,
    Entity,
    Grade,
    Relation,
    RelationshipLookup,
    snake_case_keys,
)

logger = logging.getLogger(__name__)


@dataclass
class Dataset:
    """
    Records and relationships held by an ``InMemoryLookup``.

    Record maps are keyed by ID. Relationship maps go from a subject ID to
    the set of related object IDs.
    """

    assignments: dict[str, dict[str, Any]] = field(default_factory=dict)
    attendance: dict[str, dict[str, Any]] = field(default_factory=dict)
    grades: dict[str, dict[str, Any]] = field(default_factory=dict)
    students: dict[str, dict[str, Any]] = field(default_factory=dict)
    teacher_classes: dict[str, set[str]] = field(default_factory=dict)
    teacher_students: dict[str, set[str]] = field(default_factory=dict)
    parent_children: dict[str, set[str]] = field(default_factory=dict)
    # class_id -> ISO dates already bulk-marked
    bulk_marks: dict[str, set[str]] = field(default_factory=dict)

    def records(self, resource_type: ResourceType) -> dict[str, dict[str, Any]]:
        return {
            ResourceType.ASSIGNMENT: self.assignments,
            ResourceType.ATTENDANCE: self.attendance,
            ResourceType.GRADE: self.grades,
            ResourceType.STUDENT: self.students,
        }[resource_type]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Dataset":
        """
        Build a dataset from JSON-style data.

        Record sections are mappings of ID to record; relationship sections
        are mappings of subject ID to a list of object IDs. Section names and
        record fields may be camelCase; they are stored as snake_case.
        """
        data = snake_case_keys(data)

        def records(key: str) -> dict[str, dict[str, Any]]:
            return {k: snake_case_keys(v) for k, v in (data.get(key) or {}).items()}

        def relations(key: str) -> dict[str, set[str]]:
            return {k: set(v) for k, v in (data.get(key) or {}).items()}

        return cls(
            assignments=records("assignments"),
            attendance=records("attendance"),
            grades=records("grades"),
            students=records("students"),
            teacher_classes=relations("teacher_classes"),
            teacher_students=relations("teacher_students"),
            parent_children=relations("parent_children"),
            bulk_marks=relations("bulk_marks"),
        )


class InMemoryLookup(RelationshipLookup):
    """
    Relationship lookup over a ``Dataset``.

    Every query reads the dataset directly, so changes made to the dataset
    between calls are visible to the next decision.

    Example:
        lookup = InMemoryLookup(default_dataset(), clock=lambda: fixed_now)
        await lookup.can_teacher_access_class("teacher1", "class1")  # True
    """

    def __init__(
        self,
        dataset: Dataset | None = None,
        clock: Callable[[], datetime] | None = None,
        config: PolicyConfig | None = None,
    ):
        super().__init__(clock=clock, config=config)
        self.dataset = dataset or Dataset()

    async def get_resource(self, resource_type: ResourceType, resource_id: str) -> Entity | None:
        if not resource_id:
            return None
        resource_type = ResourceType(resource_type)
        doc = self.dataset.records(resource_type).get(resource_id)
        if doc is None:
            logger.debug(f"No {resource_type.value} record with id={resource_id}")
            return None
        return ENTITY_TYPES[resource_type].from_dict({"_id": resource_id, **doc})

    async def check_relationship(self, relation: Relation, subject_id: str, object_id: str) -> bool:
        if not subject_id or not object_id:
            return False
        ds = self.dataset
        if relation is Relation.TEACHER_CLASS:
            return object_id in ds.teacher_classes.get(subject_id, ())
        if relation is Relation.TEACHER_STUDENT:
            return object_id in ds.teacher_students.get(subject_id, ())
        if relation is Relation.PARENT_CHILD:
            return object_id in ds.parent_children.get(subject_id, ())
        if relation is Relation.BULK_MARKED:
            return object_id in ds.bulk_marks.get(subject_id, ())
        if relation is Relation.TEACHER_ASSIGNMENT:
            return await self.is_created_by_teacher(ResourceType.ASSIGNMENT, object_id, subject_id)
        if relation is Relation.GRADE_EXISTS:
            grades = (Grade.from_dict(doc) for doc in ds.grades.values())
            return any(
                g.assignment_id == subject_id and g.student_id == object_id for g in grades
            )
        raise ValueError(f"Unknown relation: {relation!r}")

    async def get_assigned_students(self, teacher_id: str) -> list[str]:
        return sorted(self.dataset.teacher_students.get(teacher_id, ()))

"""
Relationship Lookup Interface

Defines the entities the policy engine reads and the abstract lookup it
queries for ownership, membership and lifecycle facts. The engine works with
any implementation (MongoDB, in-memory, etc.).
"""

from __future__ import annotations

import dataclasses
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable

from ..config import PolicyConfig
from ..policies import state_gates
from ..policies.table import ResourceType

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def snake_case_keys(record: dict[str, Any]) -> dict[str, Any]:
    """Return ``record`` with camelCase keys renamed to snake_case (``_id`` kept)."""
    return {k if k == "_id" else _snake(k): v for k, v in record.items()}


@dataclass
class Entity:
    """
    Base class for academic records.

    All entities have an ID and timestamps. ``from_dict`` accepts stored
    documents with either snake_case or camelCase keys.
    """

    id: str | None = None
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert entity to dictionary for storage."""
        data = {}
        for key, value in self.__dict__.items():
            if value is None:
                continue
            data["_id" if key == "id" else key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Entity | None":
        """Create entity from dictionary (e.g., from database)."""
        if data is None:
            return None

        data = snake_case_keys(data)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))

        field_names = {f.name for f in dataclasses.fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in field_names}

        return cls(**filtered_data)


@dataclass
class Assignment(Entity):
    teacher_id: str | None = None
    student_id: str | None = None
    class_id: str | None = None
    status: str | None = None
    title: str | None = None


@dataclass
class AttendanceRecord(Entity):
    teacher_id: str | None = None
    student_id: str | None = None
    class_id: str | None = None
    date: str | date | None = None
    status: str | None = None


@dataclass
class Grade(Entity):
    teacher_id: str | None = None
    student_id: str | None = None
    assignment_id: str | None = None
    score: float | None = None
    status: str | None = None
    reported: bool = False


@dataclass
class Student(Entity):
    name: str | None = None
    class_id: str | None = None


ENTITY_TYPES: dict[ResourceType, type[Entity]] = {
    ResourceType.ASSIGNMENT: Assignment,
    ResourceType.ATTENDANCE: AttendanceRecord,
    ResourceType.GRADE: Grade,
    ResourceType.STUDENT: Student,
}


class Relation(str, Enum):
    """
    Relationships the lookup can answer as (subject, object) membership.

    TEACHER_CLASS: (teacher_id, class_id)
    TEACHER_STUDENT: (teacher_id, student_id)
    TEACHER_ASSIGNMENT: (teacher_id, assignment_id)
    PARENT_CHILD: (parent_id, student_id)
    GRADE_EXISTS: (assignment_id, student_id)
    BULK_MARKED: (class_id, ISO date)
    """

    TEACHER_CLASS = "teacher_class"
    TEACHER_STUDENT = "teacher_student"
    TEACHER_ASSIGNMENT = "teacher_assignment"
    PARENT_CHILD = "parent_child"
    GRADE_EXISTS = "grade_exists"
    BULK_MARKED = "bulk_marked"


class StateGate(str, Enum):
    """Resource lifecycle predicates."""

    ASSIGNMENT_EDITABLE = "assignment_editable"
    ASSIGNMENT_DELETABLE = "assignment_deletable"
    ASSIGNMENT_SUBMITTED = "assignment_submitted"
    ATTENDANCE_EDITABLE = "attendance_editable"
    ATTENDANCE_DELETABLE = "attendance_deletable"
    ATTENDANCE_MARKABLE = "attendance_markable"
    ATTENDANCE_BULK_MARKABLE = "attendance_bulk_markable"
    GRADE_EDITABLE = "grade_editable"
    GRADE_DELETABLE = "grade_deletable"
    GRADE_CREATABLE = "grade_creatable"


class RelationshipLookup(ABC):
    """
    Abstract lookup the decision engine queries.

    Implementations provide three primitives: ``get_resource``,
    ``check_relationship`` and ``get_assigned_students``. Lifecycle checks
    (``check_state_gate``) are derived from those primitives, the configured
    time windows and the injected clock.

    Example:
        class SQLLookup(RelationshipLookup):
            async def get_resource(self, resource_type, resource_id):
                ...
    """

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        config: PolicyConfig | None = None,
    ):
        """
        Args:
            clock: Callable returning the current time (defaults to datetime.now)
            config: Policy configuration providing the time windows
        """
        self._clock = clock or datetime.now
        self._config = config or PolicyConfig()

    def now(self) -> datetime:
        """Current time according to the injected clock."""
        return self._clock()

    @abstractmethod
    async def get_resource(self, resource_type: ResourceType, resource_id: str) -> Entity | None:
        """
        Fetch a record by ID.

        Returns:
            The entity, or None when no such record exists
        """

    @abstractmethod
    async def check_relationship(self, relation: Relation, subject_id: str, object_id: str) -> bool:
        """Answer whether ``subject_id`` and ``object_id`` are related."""

    @abstractmethod
    async def get_assigned_students(self, teacher_id: str) -> list[str]:
        """List the student IDs assigned to a teacher."""

    async def check_state_gate(
        self,
        gate: StateGate,
        resource_id: str | None = None,
        *,
        class_id: str | None = None,
        student_id: str | None = None,
        assignment_id: str | None = None,
        at: datetime | date | None = None,
    ) -> bool:
        """
        Evaluate a lifecycle predicate.

        Args:
            gate: Predicate to evaluate
            resource_id: Record the predicate applies to (record-level gates)
            class_id: Class for marking gates
            student_id: Student for grade creation
            assignment_id: Assignment for grade creation
            at: Date to mark attendance for (defaults to now)

        Returns:
            True when the predicate holds. Record-level gates are False for
            missing records.
        """
        cfg = self._config
        now = self.now()

        if gate is StateGate.ATTENDANCE_MARKABLE:
            return state_gates.attendance_markable(
                at or now, now, cfg.marking_window_start, cfg.marking_window_end
            )

        if gate is StateGate.ATTENDANCE_BULK_MARKABLE:
            target = at or now
            target_day = target.date() if isinstance(target, datetime) else target
            already_marked = await self.check_relationship(
                Relation.BULK_MARKED, class_id, target_day.isoformat()
            )
            return state_gates.attendance_bulk_markable(
                target, now, already_marked, cfg.marking_window_start, cfg.marking_window_end
            )

        if gate is StateGate.GRADE_CREATABLE:
            exists = await self.check_relationship(Relation.GRADE_EXISTS, assignment_id, student_id)
            return state_gates.grade_creatable(exists)

        if gate in (
            StateGate.ASSIGNMENT_EDITABLE,
            StateGate.ASSIGNMENT_DELETABLE,
            StateGate.ASSIGNMENT_SUBMITTED,
        ):
            assignment = await self.get_resource(ResourceType.ASSIGNMENT, resource_id)
            if assignment is None:
                return False
            if gate is StateGate.ASSIGNMENT_SUBMITTED:
                return state_gates.assignment_submitted(assignment.status)
            if gate is StateGate.ASSIGNMENT_DELETABLE:
                return state_gates.assignment_deletable(assignment.status)
            return state_gates.assignment_editable(assignment.status)

        if gate in (StateGate.ATTENDANCE_EDITABLE, StateGate.ATTENDANCE_DELETABLE):
            record = await self.get_resource(ResourceType.ATTENDANCE, resource_id)
            if record is None:
                return False
            if gate is StateGate.ATTENDANCE_DELETABLE:
                return state_gates.attendance_deletable(
                    record.date, record.status, now, cfg.attendance_delete_days
                )
            return state_gates.attendance_editable(record.date, now, cfg.attendance_edit_hours)

        if gate in (StateGate.GRADE_EDITABLE, StateGate.GRADE_DELETABLE):
            grade = await self.get_resource(ResourceType.GRADE, resource_id)
            if grade is None:
                return False
            if gate is StateGate.GRADE_DELETABLE:
                return state_gates.grade_deletable(grade.status, grade.reported)
            return state_gates.grade_editable(grade.status)

        raise ValueError(f"Unknown state gate: {gate!r}")

    # ------------------------------------------------------------------
    # Convenience queries
    # ------------------------------------------------------------------

    async def is_created_by_teacher(
        self, resource_type: ResourceType, resource_id: str, teacher_id: str
    ) -> bool:
        resource = await self.get_resource(resource_type, resource_id)
        return resource is not None and getattr(resource, "teacher_id", None) == teacher_id

    async def can_teacher_access_class(self, teacher_id: str, class_id: str) -> bool:
        return await self.check_relationship(Relation.TEACHER_CLASS, teacher_id, class_id)

    async def can_teacher_view_student(self, teacher_id: str, student_id: str) -> bool:
        return await self.check_relationship(Relation.TEACHER_STUDENT, teacher_id, student_id)

    async def can_teacher_access_assignment(self, teacher_id: str, assignment_id: str) -> bool:
        return await self.check_relationship(Relation.TEACHER_ASSIGNMENT, teacher_id, assignment_id)

    async def is_student_parent_child(self, parent_id: str, student_id: str) -> bool:
        return await self.check_relationship(Relation.PARENT_CHILD, parent_id, student_id)

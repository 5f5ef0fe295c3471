"""
MongoDB Relationship Lookup

Implements the RelationshipLookup interface over a motor database.

Collections:
    assignments, attendance, grades, students: records keyed by ``_id``
    teacher_classes: {teacher_id, class_id}
    teacher_students: {teacher_id, student_id}
    parent_children: {parent_id, student_id}
    attendance_bulk_marks: {class_id, date}  (date as ISO string)

Record collections may hold snake_case or camelCase fields (``teacher_id``
or ``teacherId``); queries against them match either spelling. The
relationship collections are written by this service and are snake_case.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from bson import ObjectId
from pymongo.errors import PyMongoError

from ..config import PolicyConfig
from ..constants import (
    ASSIGNMENTS_COLLECTION,
    ATTENDANCE_COLLECTION,
    BULK_MARKS_COLLECTION,
    GRADES_COLLECTION,
    PARENT_CHILDREN_COLLECTION,
    STUDENTS_COLLECTION,
    TEACHER_CLASSES_COLLECTION,
    TEACHER_STUDENTS_COLLECTION,
)
from ..exceptions import RelationshipLookupError
from ..policies.table import ResourceType
from .base import ENTITY_TYPES, Entity, Relation, RelationshipLookup

logger = logging.getLogger(__name__)

_RECORD_COLLECTIONS: dict[ResourceType, str] = {
    ResourceType.ASSIGNMENT: ASSIGNMENTS_COLLECTION,
    ResourceType.ATTENDANCE: ATTENDANCE_COLLECTION,
    ResourceType.GRADE: GRADES_COLLECTION,
    ResourceType.STUDENT: STUDENTS_COLLECTION,
}


def _id_filter(resource_id: str) -> dict[str, Any]:
    """Match string IDs and ObjectId-shaped IDs alike."""
    if ObjectId.is_valid(resource_id):
        return {"_id": {"$in": [resource_id, ObjectId(resource_id)]}}
    return {"_id": resource_id}


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _record_fields(**fields: str) -> dict[str, Any]:
    """Match record fields stored under either their snake_case or camelCase names."""
    return {
        "$or": [
            fields,
            {_camel(name): value for name, value in fields.items()},
        ]
    }


class MongoRelationshipLookup(RelationshipLookup):
    """
    MongoDB implementation of the RelationshipLookup interface.

    Example:
        client = get_shared_mongo_client(config.mongo_uri)
        lookup = MongoRelationshipLookup(client[config.db_name], config=config)
    """

    def __init__(
        self,
        db: Any,  # AsyncIOMotorDatabase
        clock: Callable[[], datetime] | None = None,
        config: PolicyConfig | None = None,
    ):
        """
        Initialize the MongoDB lookup.

        Args:
            db: Motor database holding the records and relationship collections
            clock: Callable returning the current time
            config: Policy configuration providing the time windows
        """
        super().__init__(clock=clock, config=config)
        self._db = db

    async def get_resource(self, resource_type: ResourceType, resource_id: str) -> Entity | None:
        if not resource_id:
            return None
        resource_type = ResourceType(resource_type)
        collection = self._db[_RECORD_COLLECTIONS[resource_type]]
        try:
            doc = await collection.find_one(_id_filter(resource_id))
        except PyMongoError as e:
            raise RelationshipLookupError(
                f"Failed to load {resource_type.value} record: {e}",
                operation="get_resource",
                context={"resource_id": resource_id},
            ) from e
        return ENTITY_TYPES[resource_type].from_dict(doc)

    def _relation_query(self, relation: Relation, subject_id: str, object_id: str):
        if relation is Relation.TEACHER_CLASS:
            return TEACHER_CLASSES_COLLECTION, {"teacher_id": subject_id, "class_id": object_id}
        if relation is Relation.TEACHER_STUDENT:
            return TEACHER_STUDENTS_COLLECTION, {"teacher_id": subject_id, "student_id": object_id}
        if relation is Relation.PARENT_CHILD:
            return PARENT_CHILDREN_COLLECTION, {"parent_id": subject_id, "student_id": object_id}
        if relation is Relation.BULK_MARKED:
            return BULK_MARKS_COLLECTION, {"class_id": subject_id, "date": object_id}
        if relation is Relation.TEACHER_ASSIGNMENT:
            return ASSIGNMENTS_COLLECTION, {
                **_id_filter(object_id),
                **_record_fields(teacher_id=subject_id),
            }
        if relation is Relation.GRADE_EXISTS:
            return GRADES_COLLECTION, _record_fields(
                assignment_id=subject_id, student_id=object_id
            )
        raise ValueError(f"Unknown relation: {relation!r}")

    async def check_relationship(self, relation: Relation, subject_id: str, object_id: str) -> bool:
        if not subject_id or not object_id:
            return False
        collection_name, query = self._relation_query(relation, subject_id, object_id)
        try:
            count = await self._db[collection_name].count_documents(query, limit=1)
        except PyMongoError as e:
            raise RelationshipLookupError(
                f"Failed to check {relation.value} relationship: {e}",
                operation="check_relationship",
                context={"subject_id": subject_id, "object_id": object_id},
            ) from e
        return count > 0

    async def get_assigned_students(self, teacher_id: str) -> list[str]:
        try:
            student_ids = await self._db[TEACHER_STUDENTS_COLLECTION].distinct(
                "student_id", {"teacher_id": teacher_id}
            )
        except PyMongoError as e:
            raise RelationshipLookupError(
                f"Failed to list assigned students: {e}",
                operation="get_assigned_students",
                context={"teacher_id": teacher_id},
            ) from e
        return sorted(str(s) for s in student_ids)

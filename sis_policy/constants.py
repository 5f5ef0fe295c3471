"""
Constants for SIS_POLICY.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# STATE-GATE CONSTANTS
# ============================================================================

ASSIGNMENT_EDITABLE_STATUSES: Final[frozenset[str]] = frozenset({"assigned", "in_progress"})
"""Assignment statuses that still allow edits and deletion."""

ASSIGNMENT_SUBMITTED_STATUSES: Final[frozenset[str]] = frozenset({"submitted", "graded"})
"""Assignment statuses that are ready for grading."""

GRADE_EDITABLE_STATUSES: Final[frozenset[str]] = frozenset({"draft", "pending"})
"""Grade statuses that still allow edits."""

GRADE_DELETABLE_STATUS: Final[str] = "draft"
"""The only grade status that allows deletion (and only when unreported)."""

ATTENDANCE_FINALIZED_STATUS: Final[str] = "finalized"
"""Attendance status that locks a record against deletion."""

# ============================================================================
# TIME WINDOW DEFAULTS
# ============================================================================

DEFAULT_MARKING_WINDOW_START: Final[int] = 7
"""First hour of the day (inclusive) in which attendance can be marked."""

DEFAULT_MARKING_WINDOW_END: Final[int] = 18
"""Hour of the day (exclusive) after which attendance can no longer be marked."""

DEFAULT_ATTENDANCE_EDIT_HOURS: Final[int] = 24
"""Hours after the attendance date during which a record stays editable."""

DEFAULT_ATTENDANCE_DELETE_DAYS: Final[int] = 7
"""Days after the attendance date during which a record stays deletable."""

# ============================================================================
# LOOKUP CONSTANTS
# ============================================================================

DEFAULT_MAX_CONCURRENT_LOOKUPS: Final[int] = 10
"""Maximum number of per-item lookups in flight while filtering."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

DEFAULT_MAX_POOL_SIZE: Final[int] = 10
"""Default maximum MongoDB connection pool size."""

DEFAULT_MIN_POOL_SIZE: Final[int] = 1
"""Default minimum MongoDB connection pool size."""

# ============================================================================
# COLLECTION NAMES
# ============================================================================

ASSIGNMENTS_COLLECTION: Final[str] = "assignments"
ATTENDANCE_COLLECTION: Final[str] = "attendance"
GRADES_COLLECTION: Final[str] = "grades"
STUDENTS_COLLECTION: Final[str] = "students"
TEACHER_CLASSES_COLLECTION: Final[str] = "teacher_classes"
TEACHER_STUDENTS_COLLECTION: Final[str] = "teacher_students"
PARENT_CHILDREN_COLLECTION: Final[str] = "parent_children"
BULK_MARKS_COLLECTION: Final[str] = "attendance_bulk_marks"

"""
Policy request dispatching.

Turns raw request bodies into engine calls and engine decisions into
status-coded response bodies.
"""

from .dispatcher import ROUTES, PolicyDispatcher, PolicyResponse
from .requests import (
    ACTIONS,
    REQUEST_MODELS,
    AssignmentAction,
    AssignmentRequest,
    AttendanceAction,
    AttendanceRequest,
    GradeAction,
    GradeRequest,
    PolicyRequest,
    StudentAction,
    StudentRequest,
)

__all__ = [
    "PolicyDispatcher",
    "PolicyResponse",
    "ROUTES",
    "ACTIONS",
    "REQUEST_MODELS",
    "PolicyRequest",
    "AssignmentRequest",
    "AttendanceRequest",
    "GradeRequest",
    "StudentRequest",
    "AssignmentAction",
    "AttendanceAction",
    "GradeAction",
    "StudentAction",
]

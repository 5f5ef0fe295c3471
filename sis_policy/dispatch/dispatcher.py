"""
Request Dispatcher

Parses a raw policy request, validates it, resolves the caller's policy and
routes the action to the matching engine method. The result is always an
HTTP-style status code plus a JSON-serializable body.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ..engine.base import BasePolicyEngine
from ..engine.types import Actor, Decision
from ..exceptions import ConfigurationError, RequestValidationError
from ..observability import (
    clear_correlation_id,
    clear_request_context,
    get_logger,
    log_decision,
    set_correlation_id,
    set_request_context,
)
from ..policies.table import ResourceType, resolve_policy
from .requests import (
    ACTIONS,
    REQUEST_MODELS,
    AssignmentAction,
    AttendanceAction,
    GradeAction,
    PolicyRequest,
    StudentAction,
)

logger = get_logger(__name__)

# action -> (engine method, request attributes passed as keyword arguments)
Route = tuple[str, tuple[str, ...]]

ROUTES: dict[ResourceType, dict[Any, Route]] = {
    ResourceType.ASSIGNMENT: {
        AssignmentAction.CAN_VIEW: ("can_view", ("assignment_id",)),
        AssignmentAction.CAN_EDIT: ("can_edit", ("assignment_id",)),
        AssignmentAction.CAN_GRADE: ("can_grade", ("assignment_id", "student_id")),
        AssignmentAction.CAN_CREATE: ("can_create", ()),
        AssignmentAction.CAN_DELETE: ("can_delete", ("assignment_id",)),
        AssignmentAction.FILTER: ("filter", ("assignment_ids",)),
        AssignmentAction.BY_STUDENT: ("by_student", ("student_id",)),
    },
    ResourceType.ATTENDANCE: {
        AttendanceAction.CAN_VIEW: ("can_view", ("attendance_id", "student_id", "class_id")),
        AttendanceAction.CAN_MARK: ("can_mark", ("student_id", "class_id")),
        AttendanceAction.CAN_EDIT: ("can_edit", ("attendance_id", "student_id", "class_id")),
        AttendanceAction.CAN_DELETE: ("can_delete", ("attendance_id",)),
        AttendanceAction.FILTER: ("filter", ("attendance_ids",)),
        AttendanceAction.STUDENT_ATTENDANCE: ("student_attendance", ("student_id",)),
        AttendanceAction.CLASS_ATTENDANCE: ("class_attendance", ("class_id",)),
        AttendanceAction.CAN_BULK_MARK: ("can_bulk_mark", ("class_id",)),
        AttendanceAction.CAN_EXPORT: ("can_export", ("class_id", "student_id")),
    },
    ResourceType.GRADE: {
        GradeAction.CAN_VIEW: ("can_view", ("grade_id", "student_id")),
        GradeAction.CAN_EDIT: ("can_edit", ("grade_id", "student_id", "assignment_id")),
        GradeAction.CAN_CREATE: ("can_create", ("student_id", "assignment_id")),
        GradeAction.CAN_DELETE: ("can_delete", ("grade_id",)),
        GradeAction.FILTER: ("filter", ("grade_ids",)),
        GradeAction.STUDENT_GRADES: ("student_grades", ("student_id",)),
        GradeAction.CLASS_GRADES: ("class_grades", ("class_id",)),
        GradeAction.CAN_EXPORT: ("can_export", ("class_id", "student_id")),
    },
    ResourceType.STUDENT: {
        StudentAction.CAN_VIEW: ("can_view", ("student_id", "student_ids")),
        StudentAction.CAN_EDIT: ("can_edit", ("student_id",)),
        StudentAction.CAN_DELETE: ("can_delete", ("student_id",)),
        StudentAction.CAN_CREATE: ("can_create", ()),
        StudentAction.FILTER: ("filter", ("student_ids",)),
    },
}

MISSING_FIELDS_ERROR = "Missing required fields: action, userId, and userRole are required"


@dataclass(frozen=True)
class PolicyResponse:
    """Status code and JSON body returned for one policy request."""

    status_code: int
    body: dict[str, Any]


class PolicyDispatcher:
    """
    Routes policy requests for one resource type to its engine.

    Example:
        engine = AccessDecisionEngine(lookup)
        dispatcher = PolicyDispatcher(ResourceType.GRADE, engine.grades)
        response = await dispatcher.handle(b'{"action": "canViewGrade", ...}')
    """

    def __init__(self, resource_type: ResourceType | str, engine: BasePolicyEngine):
        """
        Args:
            resource_type: Resource type this dispatcher serves
            engine: Engine deciding access for that resource type

        Raises:
            ConfigurationError: If an action has no engine method behind it
        """
        self.resource_type = ResourceType(resource_type)
        self.engine = engine
        self.actions = ACTIONS[self.resource_type]
        self.request_model = REQUEST_MODELS[self.resource_type]
        self.routes = ROUTES[self.resource_type]
        self._check_routes()

    @property
    def valid_actions(self) -> list[str]:
        return [a.value for a in self.actions]

    def _check_routes(self) -> None:
        for action in self.actions:
            route = self.routes.get(action)
            if route is None:
                raise ConfigurationError(
                    f"No handler registered for action '{action.value}'",
                    config_key="routes",
                    context={"resource_type": self.resource_type.value},
                )
            method_name, _ = route
            if not callable(getattr(self.engine, method_name, None)):
                raise ConfigurationError(
                    f"{type(self.engine).__name__} has no method '{method_name}' "
                    f"for action '{action.value}'",
                    config_key="routes",
                    context={"resource_type": self.resource_type.value},
                )

    def _parse(self, payload: bytes | str | dict[str, Any]) -> dict[str, Any]:
        if isinstance(payload, dict):
            return payload
        try:
            if isinstance(payload, bytes):
                payload = payload.decode("utf-8")
            data = json.loads(payload)
        except (ValueError, TypeError) as e:
            raise RequestValidationError("Invalid JSON in request body", details=str(e)) from e
        if not isinstance(data, dict):
            raise RequestValidationError(
                "Invalid JSON in request body", details="Request body must be a JSON object"
            )
        return data

    def _validate(self, data: dict[str, Any]) -> tuple[Any, PolicyRequest]:
        if not data.get("action") or not data.get("userId") or not data.get("userRole"):
            raise RequestValidationError(MISSING_FIELDS_ERROR)

        try:
            action = self.actions(data["action"])
        except ValueError as e:
            raise RequestValidationError(
                "Invalid action specified", valid_actions=self.valid_actions
            ) from e

        try:
            request = self.request_model.model_validate(data)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise RequestValidationError("Invalid request fields", details=details) from e

        return action, request

    async def dispatch(self, action: Any, request: PolicyRequest) -> Decision:
        """Resolve the caller's policy and run the engine method for ``action``."""
        method_name, fields = self.routes[action]
        policy = resolve_policy(self.resource_type, request.user_role)
        actor = Actor.from_request(request.user_id, request.user_role)
        kwargs = {name: getattr(request, name) for name in fields}
        return await getattr(self.engine, method_name)(policy, actor, **kwargs)

    async def handle(self, payload: bytes | str | dict[str, Any]) -> PolicyResponse:
        """
        Handle one raw policy request.

        Returns:
            200 with the decision envelope, 400 for malformed requests, or
            500 for unexpected failures outside the engine
        """
        set_correlation_id()
        start = time.perf_counter()
        try:
            try:
                action, request = self._validate(self._parse(payload))
            except RequestValidationError as e:
                logger.warning(f"Rejected {self.resource_type.value} policy request: {e}")
                return PolicyResponse(e.status_code, e.to_dict())

            set_request_context(
                resource_type=self.resource_type.value,
                action=action.value,
                user_id=request.user_id,
                user_role=request.user_role,
                **request.secondary_context(),
            )
            decision = await self.dispatch(action, request)
            log_decision(
                logger,
                f"{self.resource_type.value}.{action.value}",
                success=decision.success,
                duration_ms=(time.perf_counter() - start) * 1000,
                allowed=decision.allowed,
            )
            return PolicyResponse(200, decision.to_dict())
        except Exception as e:
            logger.error(
                f"Unhandled error in {self.resource_type.value} policy request: {e}",
                exc_info=True,
            )
            return PolicyResponse(
                500,
                {
                    "success": False,
                    "error": f"Internal server error processing {self.resource_type.value} "
                    "access policy",
                    "details": str(e),
                },
            )
        finally:
            clear_request_context()
            clear_correlation_id()

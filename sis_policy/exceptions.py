"""
Custom exceptions for SIS_POLICY.

Policy denials are never exceptions; they are ordinary ``Decision`` values.
These exceptions cover malformed requests, misconfiguration and failures of
the relationship lookup backend.
"""

from typing import Any, Dict, List, Optional


class SISPolicyError(RuntimeError):
    """
    Base exception for SIS policy errors.

    ``context`` holds identifiers useful for diagnosis (action, resource_id,
    user_id, ...) and is appended to ``str(error)``.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} (context: {details})"


class ConfigurationError(SISPolicyError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


class RequestValidationError(SISPolicyError):
    """
    Raised when an inbound policy request is malformed.

    The dispatcher turns this into a 400 response. It never reaches the
    decision engine.

    Attributes:
        message: Error message
        details: Optional detail string (parser or validation message)
        valid_actions: Actions the endpoint accepts, for unknown-action errors
        status_code: HTTP status code for the response
    """

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        valid_actions: Optional[List[str]] = None,
        status_code: int = 400,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context=context)
        self.details = details
        self.valid_actions = valid_actions
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Render the error as a response envelope."""
        body: Dict[str, Any] = {"success": False, "error": self.message}
        if self.details:
            body["details"] = self.details
        if self.valid_actions is not None:
            body["validActions"] = list(self.valid_actions)
        return body


class RelationshipLookupError(SISPolicyError):
    """
    Raised when the relationship lookup backend fails.

    Attributes:
        message: Error message
        operation: Lookup operation that failed (e.g. "get_resource")
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if operation:
            context["operation"] = operation
        super().__init__(message, context=context)
        self.operation = operation

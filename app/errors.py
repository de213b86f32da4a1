# app/errors.py
"""Typed failures raised by the registries.

Every error carries a stable ``code`` and the HTTP status the API maps it to.
The handlers in ``app.error_handlers`` turn them into a JSON envelope through
``to_response()``; nothing else needs to know about status codes.
"""

from typing import Any, Dict, Optional


class TaskManagerError(Exception):
    """Base class for all domain failures."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_response(self) -> Dict[str, Any]:
        body = {
            "success": False,
            "error": self.code,
            "message": self.message,
        }
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(TaskManagerError):
    status_code = 400
    code = "validation_error"


class NoFieldsProvided(ValidationError):
    code = "no_fields_provided"

    def __init__(self, message: str = "No fields to update"):
        super().__init__(message)


class InvalidRole(ValidationError):
    code = "invalid_role"

    def __init__(self, message: str = "Invalid team role", field: Optional[str] = "role"):
        super().__init__(message, field=field)


class NotFound(TaskManagerError):
    status_code = 404
    code = "not_found"


class Forbidden(TaskManagerError):
    status_code = 403
    code = "forbidden"


class Conflict(TaskManagerError):
    status_code = 409
    code = "conflict"


class AlreadyMember(Conflict):
    code = "already_member"

    def __init__(self, message: str = "User is already a team member"):
        super().__init__(message)


class InvalidAssignee(TaskManagerError):
    status_code = 400
    code = "invalid_assignee"

    def __init__(self, message: str = "Assigned user is not a member of this team"):
        super().__init__(message, field="assigned_to")


class CannotRemoveTopRole(TaskManagerError):
    status_code = 400
    code = "cannot_remove_owner"

    def __init__(self, message: str = "Cannot remove the team owner"):
        super().__init__(message)


class AuthenticationError(TaskManagerError):
    status_code = 401
    code = "authentication_failed"

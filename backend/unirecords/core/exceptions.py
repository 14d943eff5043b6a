"""
Custom Exceptions for UniRecords
================================

Services raise these instead of generic Exception; the handlers registered
in ``unirecords.main`` map each family to an HTTP status:

    ValidationError               -> 400
    InvalidStatusTransitionError  -> 400
    AuthenticationError           -> 401
    AuthorizationError            -> 403
    ResourceNotFoundError         -> 404
    NotificationError             -> 500
    StorageError                  -> 502

Usage:
    from unirecords.core.exceptions import ResourceNotFoundError

    if not exam:
        raise ResourceNotFoundError("Exam", exam_id)
"""

from typing import Optional, Any, Dict, Iterable


class RecordsError(Exception):
    """Base exception for all UniRecords errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(RecordsError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(RecordsError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message, code="NOT_AUTHORIZED")


class TokenExpiredError(AuthenticationError):
    """JWT token has expired"""

    def __init__(self):
        super().__init__("Token has expired. Please log in again")
        self.code = "TOKEN_EXPIRED"


class InvalidTokenError(AuthenticationError):
    """JWT token is invalid"""

    def __init__(self):
        super().__init__("Invalid token. Please log in again")
        self.code = "INVALID_TOKEN"


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(RecordsError):
    """A record looked up by id (or another key) does not exist"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(RecordsError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class DuplicateRecordError(ValidationError):
    """A unique attribute is already taken"""

    def __init__(self, resource_type: str, field: str, value: str):
        super().__init__(f"{resource_type} with {field} '{value}' already exists", field=field)
        self.code = "DUPLICATE_RECORD"


class InvalidFileError(ValidationError):
    """Uploaded file breaks a per-route constraint (type, size or count)"""

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message)
        self.code = "INVALID_FILE"
        if filename:
            self.details["filename"] = filename


class InvalidStatusTransitionError(RecordsError):
    """Requested status is not an allowed successor of the current one"""

    status_code = 400

    def __init__(self, entity: str, current: str, target: str, allowed: Iterable[str] = ()):
        allowed = sorted(allowed)
        super().__init__(
            f"Cannot change {entity} status from '{current}' to '{target}'",
            code="INVALID_STATUS_TRANSITION",
            details={
                "entity": entity,
                "current": current,
                "target": target,
                "allowed": allowed,
            }
        )
        self.entity = entity
        self.current = current
        self.target = target


# ============================================
# Collaborator Errors
# ============================================

class StorageError(RecordsError):
    """Object storage operation failed"""

    status_code = 502

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message, code="STORAGE_ERROR")
        if key:
            self.details["key"] = key


class NotificationError(RecordsError):
    """An email that the operation depends on could not be sent"""

    status_code = 500

    def __init__(self, message: str = "Error sending email. Please try again later"):
        super().__init__(message, code="NOTIFICATION_FAILED")


def error_response(error: RecordsError) -> Dict[str, Any]:
    """Convert exception to the API error envelope"""
    body: Dict[str, Any] = {
        "status": "error",
        "message": error.message,
        "code": error.code,
    }
    if error.details:
        body["details"] = error.details
    return body

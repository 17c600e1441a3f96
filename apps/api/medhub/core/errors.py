"""Service error taxonomy shared by guards, the state machine, and services.

Every failure carries a stable machine-readable ``code``. Callers (HTTP layer,
CLI, tests) branch on the code, never on the message text. Messages are kept in
both supported locales; ``message`` renders them as ``"<vi> (<en>)"``.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes surfaced to callers."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    NO_ACTIVE_ORGANIZATION = "NO_ACTIVE_ORGANIZATION"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    VALIDATION = "VALIDATION"


HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.UNAUTHENTICATED: 401,
    ErrorCode.NO_ACTIVE_ORGANIZATION: 403,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_TRANSITION: 409,
    ErrorCode.VALIDATION: 422,
}


class ServiceError(Exception):
    """Base exception for all recoverable service errors."""

    code: ErrorCode = ErrorCode.VALIDATION
    default_vi: str = "Yêu cầu không hợp lệ"
    default_en: str = "Invalid request"

    def __init__(
        self,
        message_vi: str | None = None,
        message_en: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message_vi = message_vi or self.default_vi
        self.message_en = message_en or self.default_en
        self.details = details or {}
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return f"{self.message_vi} ({self.message_en})"

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE[self.code]

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "message_vi": self.message_vi,
            "message_en": self.message_en,
            "details": self.details,
        }


class UnauthenticatedError(ServiceError):
    """No resolvable caller identity."""

    code = ErrorCode.UNAUTHENTICATED
    default_vi = "Chưa xác thực"
    default_en = "Not authenticated"


class NoActiveOrganizationError(ServiceError):
    """Caller is authenticated but has no organization to scope the request to."""

    code = ErrorCode.NO_ACTIVE_ORGANIZATION
    default_vi = "Không có tổ chức nào đang hoạt động"
    default_en = "No active organization"


class ForbiddenError(ServiceError):
    """Caller lacks role or ownership for the action."""

    code = ErrorCode.FORBIDDEN
    default_vi = "Không có quyền thực hiện thao tác này"
    default_en = "You do not have permission to perform this action"

    REASON_SELF_ACTION = "self_action"
    REASON_INSUFFICIENT_ROLE = "insufficient_role"
    REASON_CROSS_TENANT = "cross_tenant"
    REASON_NOT_MEMBER = "not_member"
    REASON_PLATFORM_ROLE = "platform_role_required"
    REASON_ORG_INACTIVE = "organization_inactive"

    def __init__(
        self,
        message_vi: str | None = None,
        message_en: str | None = None,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        merged = dict(details or {})
        if reason:
            merged["reason"] = reason
        self.reason = reason
        super().__init__(message_vi, message_en, merged)


class NotFoundError(ServiceError):
    """Referenced resource does not exist (or is hidden by tenant isolation)."""

    code = ErrorCode.NOT_FOUND
    default_vi = "Không tìm thấy"
    default_en = "Not found"

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        self.resource_type = resource_type
        self.resource_id = resource_id
        details: dict[str, Any] = {"resource_type": resource_type}
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
        super().__init__(
            f"Không tìm thấy {resource_type}",
            f"{resource_type} not found",
            details,
        )


class InvalidTransitionError(ServiceError):
    """Requested status change is not permitted from the current status."""

    code = ErrorCode.INVALID_TRANSITION

    def __init__(self, resource_kind: str, current_status: str, target_status: str):
        self.resource_kind = resource_kind
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Không thể chuyển trạng thái từ {current_status} sang {target_status}",
            f"Cannot transition from {current_status} to {target_status}",
            {
                "resource_kind": resource_kind,
                "current_status": current_status,
                "target_status": target_status,
            },
        )


class InvalidInputError(ServiceError):
    """Malformed input, e.g. reason text below the minimum length."""

    code = ErrorCode.VALIDATION

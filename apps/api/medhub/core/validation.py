"""Input validation helpers for audit-sensitive actions."""

from medhub.core.errors import InvalidInputError

MIN_REASON_LENGTH = 10


def require_reason(reason: str | None, min_length: int = MIN_REASON_LENGTH) -> str:
    """
    Return the trimmed reason or raise if it is shorter than ``min_length``.

    Rejections, suspensions, voids and dispute resolutions all require a
    human-readable justification that ends up in the audit trail.
    """
    text = (reason or "").strip()
    if len(text) < min_length:
        raise InvalidInputError(
            f"Lý do phải có ít nhất {min_length} ký tự",
            f"Reason must be at least {min_length} characters",
            {"field": "reason", "min_length": min_length},
        )
    return text


def require_text(value: str | None, field: str, min_length: int) -> str:
    """Return the trimmed text field or raise VALIDATION naming the field."""
    text = (value or "").strip()
    if len(text) < min_length:
        raise InvalidInputError(
            f"Trường {field} phải có ít nhất {min_length} ký tự",
            f"{field} must be at least {min_length} characters",
            {"field": field, "min_length": min_length},
        )
    return text

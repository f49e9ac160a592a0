"""
Generation Error Classification

Maps gateway failures onto the user-facing taxonomy (message, error type,
HTTP status).
"""

from dataclasses import dataclass
from typing import Optional

from panelcraft.core.constants import (
    CONTENT_POLICY_MARKERS,
    CONTENT_POLICY_MESSAGE,
    CREDIT_LIMIT_MESSAGE,
    ErrorType,
)
from panelcraft.core.exceptions import GatewayError


@dataclass
class ClassifiedError:
    message: str
    error_type: ErrorType
    status_code: int


def is_content_policy_violation(message: Optional[str]) -> bool:
    """Check a gateway message for a content-policy marker (case-insensitive)."""
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in CONTENT_POLICY_MARKERS)


def classify_generation_error(error: Exception) -> ClassifiedError:
    """
    Classify an image-generation failure.

    Content policy is checked before the credit status.
    """
    message = getattr(error, "message", None) or str(error)
    status = error.status_code if isinstance(error, GatewayError) else None

    if is_content_policy_violation(message):
        return ClassifiedError(CONTENT_POLICY_MESSAGE, ErrorType.CONTENT_POLICY, 400)

    if status == 402:
        return ClassifiedError(CREDIT_LIMIT_MESSAGE, ErrorType.CREDIT_LIMIT, 402)

    if status and status >= 400:
        return ClassifiedError(message or f"Failed to generate image: {status}", ErrorType.API_ERROR, status)

    return ClassifiedError(message or "Failed to generate image", ErrorType.API_ERROR, 500)

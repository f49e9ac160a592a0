"""
Panelcraft Constants

Global constants used throughout Panelcraft.
"""

from enum import Enum

# =============================================================================
# VERSION INFO
# =============================================================================
VERSION = "1.0.0"
PROJECT_NAME = "Panelcraft"

# =============================================================================
# ERROR TAXONOMY
# =============================================================================

class ErrorType(str, Enum):
    """User-facing error kinds returned as `errorType`."""
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONTENT_POLICY = "content_policy"
    CREDIT_LIMIT = "credit_limit"
    API_ERROR = "api_error"
    PERSISTENCE = "persistence_error"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"


# Substrings (lowercase) in a gateway error message that mark a
# content-policy rejection.
CONTENT_POLICY_MARKERS = [
    "content policy",
    "content_policy",
    "safety filter",
    "safety system",
    "content filter",
    "nsfw",
    "flagged as sensitive",
    "moderation",
    "violates",
    "harmful content",
]

CREDIT_LIMIT_MESSAGE = (
    "Insufficient API credits. Please add credits to your Together.ai account "
    "at https://api.together.ai/settings/billing or provide your own API key."
)

CONTENT_POLICY_MESSAGE = (
    "Your request was rejected by the image model's content policy. "
    "Please rephrase the page description and try again."
)

# =============================================================================
# STORY CONSTANTS
# =============================================================================

# Title and description limits for generated story metadata
MAX_TITLE_LENGTH = 60
MAX_DESCRIPTION_LENGTH = 200

# Fallback title is the prompt truncated to this many characters
FALLBACK_TITLE_LENGTH = 50

ELLIPSIS = "..."

# Default when the caller does not name a style
DEFAULT_STYLE_ID = "noir"

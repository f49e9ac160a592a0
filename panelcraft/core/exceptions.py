"""
Panelcraft Custom Exceptions

Custom exception classes for error handling throughout Panelcraft.
"""

from typing import Optional


class PanelcraftError(Exception):
    """Base exception for all Panelcraft errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(PanelcraftError):
    """Raised when there's an issue with configuration."""
    pass


class MissingConfigError(ConfigurationError):
    """Raised when a required configuration value is missing."""

    def __init__(self, key: str):
        super().__init__(f"Missing required configuration: {key}", {"key": key})


# =============================================================================
# REQUEST ERRORS
# =============================================================================

class InvalidRequestError(PanelcraftError):
    """Raised when a request is missing required fields."""

    def __init__(self, message: str, field: str = None):
        details = {"field": field} if field else {}
        super().__init__(message, details)


class StoryNotFoundError(PanelcraftError):
    """Raised when a story cannot be found by id or slug."""

    def __init__(self, story_ref: str):
        super().__init__("Story not found", {"story": story_ref})


class PageNotFoundError(PanelcraftError):
    """Raised when a page cannot be found or is not part of the story."""

    def __init__(self, page_id: str):
        super().__init__("Page not found", {"page_id": page_id})


class OwnershipError(PanelcraftError):
    """Raised when a story belongs to a different user."""

    def __init__(self, story_ref: str):
        super().__init__("Unauthorized", {"story": story_ref})


# =============================================================================
# GATEWAY ERRORS
# =============================================================================

class GatewayError(PanelcraftError):
    """Base exception for failures of external collaborators."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: dict = None):
        super().__init__(message, details)
        self.status_code = status_code


class ImageGenerationError(GatewayError):
    """Raised when the image generation API rejects or fails a request."""
    pass


class TextGenerationError(GatewayError):
    """Raised when the text generation API fails or returns unusable output."""
    pass


class StorageError(GatewayError):
    """Raised when re-hosting an image in object storage fails."""
    pass


class PersistenceError(GatewayError):
    """Raised when a database operation fails."""
    pass


class OCRError(GatewayError):
    """Raised when the OCR provider fails."""
    pass

"""
Tests for Generation Error Classification

Tests for panelcraft/story/errors.py
"""

import pytest

from panelcraft.core.constants import ErrorType
from panelcraft.core.exceptions import ImageGenerationError
from panelcraft.story.errors import classify_generation_error, is_content_policy_violation


class TestClassification:
    """Tests for the error taxonomy."""

    @pytest.mark.parametrize("message", [
        "Request blocked by our Safety Filter",
        "Prompt violates the content policy",
        "Image flagged as sensitive",
        "NSFW content detected",
    ])
    def test_content_policy(self, message):
        """Test policy markers map to content_policy with status 400."""
        result = classify_generation_error(ImageGenerationError(message, status_code=422))

        assert result.error_type == ErrorType.CONTENT_POLICY
        assert result.status_code == 400

    def test_content_policy_beats_credit_status(self):
        result = classify_generation_error(ImageGenerationError("content_policy_violation", status_code=402))
        assert result.error_type == ErrorType.CONTENT_POLICY

    def test_credit_limit(self):
        result = classify_generation_error(ImageGenerationError("Payment required", status_code=402))

        assert result.error_type == ErrorType.CREDIT_LIMIT
        assert result.status_code == 402
        assert "API key" in result.message

    def test_gateway_status_passed_through(self):
        result = classify_generation_error(ImageGenerationError("Model overloaded", status_code=503))

        assert result.error_type == ErrorType.API_ERROR
        assert result.status_code == 503
        assert result.message == "Model overloaded"

    def test_unknown_error_is_500(self):
        result = classify_generation_error(RuntimeError("boom"))

        assert result.error_type == ErrorType.API_ERROR
        assert result.status_code == 500
        assert result.message == "boom"

    def test_marker_detection(self):
        assert is_content_policy_violation("MODERATION rejected")
        assert not is_content_policy_violation("timeout")
        assert not is_content_policy_violation(None)

"""
Tests for Domain Models

Tests for panelcraft/core/models.py
"""

from datetime import datetime, timezone

from panelcraft.core.models import Page, Story, TextBlock, Vertex


class TestRows:
    """Tests for row conversion."""

    def test_story_from_row(self):
        story = Story.from_row({
            "id": 7,
            "slug": "comic-abc",
            "title": "Title",
            "user_id": "user-1",
            "style": None,
            "created_at": "2025-03-01T10:00:00Z",
        })

        assert story.id == "7"
        assert story.style == "noir"
        assert story.uses_own_api_key is False
        assert story.created_at == datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_page_from_row(self):
        page = Page.from_row({
            "id": "p1",
            "story_id": "s1",
            "page_number": "2",
            "prompt": "Hero",
            "character_image_urls": None,
        })

        assert page.page_number == 2
        assert page.character_image_urls == []
        assert page.generated_image_url is None


class TestTextBlock:
    """Tests for text block storage format."""

    def test_confidence_stored_as_percent(self):
        block = TextBlock(text="HI", vertices=[Vertex(1, 2), Vertex(3, 4)], confidence=0.974)
        row = block.to_row("page-1")

        assert row["confidence"] == 97
        assert row["bounding_box"] == {"vertices": [{"x": 1, "y": 2}, {"x": 3, "y": 4}]}

    def test_from_row(self):
        block = TextBlock.from_row({
            "id": 5,
            "page_id": "page-1",
            "text": "HI",
            "bounding_box": {"vertices": [{"x": 1}, {"y": 4}]},
            "confidence": 80,
        })

        assert block.id == "5"
        assert block.confidence == 0.8
        assert block.vertices == [Vertex(1, 0), Vertex(0, 4)]

    def test_missing_confidence(self):
        assert TextBlock(text="HI").to_row("p")["confidence"] is None
        assert TextBlock.from_row({"text": "HI"}).confidence is None

    def test_zero_confidence_kept(self):
        block = TextBlock(text="HI", confidence=0.0)

        assert block.to_row("p")["confidence"] == 0
        assert TextBlock.from_row({"text": "HI", "confidence": 0}).confidence == 0.0

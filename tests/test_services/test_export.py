"""
Tests for PDF Export

Tests for panelcraft/services/export.py
"""

import io
import re

import pytest
from PIL import Image

from panelcraft.core.exceptions import InvalidRequestError
from panelcraft.services import export
from panelcraft.services.export import page_image_urls, render_pdf, safe_filename


def jpeg_bytes(size=(200, 300), color="red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG")
    return buffer.getvalue()


def pdf_page_count(data: bytes) -> int:
    return len(re.findall(rb"/Type\s*/Page\b", data))


class TestFilenames:
    """Tests for safe_filename."""

    @pytest.mark.parametrize("title,expected", [
        ("My Comic", "My Comic"),
        ('A/B: "C"?', "A-B- -C--"),
        ("Café Noir", "Caf Noir"),
        ("", "comic"),
        ("日本", "comic"),
    ])
    def test_safe_filename(self, title, expected):
        assert safe_filename(title) == expected


class TestRenderPdf:
    """Tests for PDF rendering."""

    def test_one_page_per_image(self):
        pdf = render_pdf([jpeg_bytes(), jpeg_bytes(color="blue"), jpeg_bytes((1600, 900))])

        assert pdf.startswith(b"%PDF")
        assert pdf_page_count(pdf) == 3

    def test_no_images(self):
        with pytest.raises(InvalidRequestError, match="No images to download"):
            render_pdf([])


class TestExportStory:
    """Tests for export_story_pdf."""

    @pytest.mark.asyncio
    async def test_skips_missing_and_placeholder_images(self, repository, monkeypatch):
        story = repository.add_story("comic-export", "user-1")
        repository.add_page(story, 1)
        repository.add_page(story, 2, image="/placeholder.svg")
        repository.add_page(story, 3, image=None)
        repository.add_page(story, 4)
        fetched = []

        async def fake_fetch(urls, timeout=60.0):
            fetched.extend(urls)
            return [jpeg_bytes() for _ in urls]

        monkeypatch.setattr(export, "fetch_images", fake_fetch)
        story_with_pages = await repository.get_story_with_pages("comic-export")

        pdf = await export.export_story_pdf(story_with_pages)

        assert fetched == page_image_urls(story_with_pages)
        assert len(fetched) == 2
        assert pdf_page_count(pdf) == 2

    @pytest.mark.asyncio
    async def test_story_without_images(self, repository):
        story = repository.add_story("comic-empty", "user-1")
        repository.add_page(story, 1, image=None)

        with pytest.raises(InvalidRequestError):
            await export.export_story_pdf(await repository.get_story_with_pages("comic-empty"))

"""
PDF Export

Renders a story's page images into a multi-page A4 PDF with Pillow.
"""

import asyncio
import io
import re
from typing import List

import httpx
from PIL import Image, ImageDraw, ImageFont

from panelcraft.core.exceptions import InvalidRequestError, StorageError
from panelcraft.core.logging_config import get_logger
from panelcraft.core.models import StoryWithPages

logger = get_logger("services.export")

# A4 at 150 dpi
PAGE_SIZE = (1240, 1754)
PAGE_MARGIN = 60
FOOTER_HEIGHT = 60
FOOTER_TEXT = "Created with Panelcraft"
PLACEHOLDER_IMAGE = "/placeholder.svg"

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
_NON_ASCII = re.compile(r"[^\x00-\x7F]")


def safe_filename(title: str) -> str:
    """ASCII-only file name derived from a story title, 'comic' when empty."""
    cleaned = _INVALID_FILENAME_CHARS.sub("-", _NON_ASCII.sub("", title or "")).strip()
    return cleaned or "comic"


def page_image_urls(story_with_pages: StoryWithPages) -> List[str]:
    return [
        page.generated_image_url
        for page in story_with_pages.pages
        if page.generated_image_url and page.generated_image_url != PLACEHOLDER_IMAGE
    ]


async def fetch_images(urls: List[str], timeout: float = 60.0) -> List[bytes]:
    """Download all images concurrently, preserving order."""
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        async def fetch(url: str) -> bytes:
            response = await client.get(url)
            if response.status_code >= 400:
                raise StorageError(f"Failed to fetch image: {url}", status_code=response.status_code)
            return response.content

        return list(await asyncio.gather(*(fetch(url) for url in urls)))


def _compose_page(image_bytes: bytes) -> Image.Image:
    page = Image.new("RGB", PAGE_SIZE, "white")
    with Image.open(io.BytesIO(image_bytes)) as source:
        image = source.convert("RGB")

    box_width = PAGE_SIZE[0] - 2 * PAGE_MARGIN
    box_height = PAGE_SIZE[1] - 2 * PAGE_MARGIN - FOOTER_HEIGHT
    image.thumbnail((box_width, box_height), Image.LANCZOS)
    if image.width < box_width and image.height < box_height:
        scale = min(box_width / image.width, box_height / image.height)
        image = image.resize((int(image.width * scale), int(image.height * scale)), Image.LANCZOS)

    left = (PAGE_SIZE[0] - image.width) // 2
    page.paste(image, (left, PAGE_MARGIN))

    draw = ImageDraw.Draw(page)
    font = ImageFont.load_default()
    bbox = draw.textbbox((0, 0), FOOTER_TEXT, font=font)
    text_x = (PAGE_SIZE[0] - (bbox[2] - bbox[0])) // 2
    text_y = PAGE_SIZE[1] - PAGE_MARGIN - (bbox[3] - bbox[1])
    draw.text((text_x, text_y), FOOTER_TEXT, fill="black", font=font)
    return page


def render_pdf(images: List[bytes]) -> bytes:
    """One PDF page per image, in order."""
    if not images:
        raise InvalidRequestError("No images to download")

    pages = [_compose_page(data) for data in images]
    buffer = io.BytesIO()
    pages[0].save(buffer, format="PDF", save_all=True, append_images=pages[1:], resolution=150.0)
    return buffer.getvalue()


async def export_story_pdf(story_with_pages: StoryWithPages) -> bytes:
    """Download a story's page images and render them into a PDF."""
    urls = page_image_urls(story_with_pages)
    if not urls:
        raise InvalidRequestError("No images to download")

    images = await fetch_images(urls)
    logger.info(f"Exporting {story_with_pages.story.slug} as PDF ({len(images)} pages)")
    return await asyncio.to_thread(render_pdf, images)

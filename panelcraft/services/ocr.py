"""
Page OCR

Recognizes speech-bubble text on generated pages and stores it as text
blocks. Re-running OCR on a page replaces its previous blocks.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from panelcraft.core.logging_config import get_logger
from panelcraft.core.models import TextBlock
from panelcraft.gateways.base import OCRGateway, StoryRepository

logger = get_logger("services.ocr")


@dataclass
class OCRResult:
    page_id: str
    text_blocks: List[TextBlock] = field(default_factory=list)

    @property
    def full_text(self) -> str:
        return " ".join(block.text for block in self.text_blocks)


class OCRService:
    """Runs OCR for pages and stories."""

    def __init__(self, repository: StoryRepository, ocr_gateway: OCRGateway):
        self.repository = repository
        self.ocr_gateway = ocr_gateway

    async def process_page(self, page_id: str) -> Optional[OCRResult]:
        """
        OCR one page.

        Returns:
            The result, or None when the page is missing or has no image yet
        """
        page = await self.repository.get_page(page_id)
        if page is None or not page.generated_image_url:
            return None

        blocks = await self.ocr_gateway.recognize_text(page.generated_image_url)
        await self.repository.replace_text_blocks(page_id, blocks)

        logger.info(f"OCR page {page_id}: {len(blocks)} text block(s)")
        return OCRResult(page_id=page_id, text_blocks=blocks)

    async def process_story(self, story_id: str) -> List[OCRResult]:
        """OCR every page of a story that has an image, in page order."""
        results = []
        for page in await self.repository.list_pages(story_id):
            if not page.generated_image_url:
                continue
            result = await self.process_page(page.id)
            if result:
                results.append(result)
        return results

    async def page_text_blocks(self, page_id: str) -> List[TextBlock]:
        return await self.repository.list_text_blocks(page_id)

"""
Gateway Interfaces

Abstract adapters for everything outside the process: image generation,
text generation, object storage, persistence and OCR. The orchestrator only
depends on these; tests swap in in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from panelcraft.core.models import Page, Story, StoryWithPages, TextBlock


class ImageGateway(ABC):
    """Generates one image and returns a (possibly temporary) URL."""

    @abstractmethod
    async def generate(
        self,
        model: str,
        prompt: str,
        width: int,
        height: int,
        reference_images: Optional[List[str]] = None
    ) -> str:
        """Generate an image. Raises ImageGenerationError on failure."""
        pass


class TextGateway(ABC):
    """Chat-style text completion."""

    @abstractmethod
    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        max_tokens: int = 300,
        temperature: float = 0.7
    ) -> str:
        """Return the assistant text. Raises TextGenerationError on failure."""
        pass


class StorageGateway(ABC):
    """Re-hosts generated images under a permanent URL."""

    @abstractmethod
    async def upload(self, source_url: str, key: str) -> str:
        """Copy `source_url` to `key` and return its public URL. Raises StorageError."""
        pass


class StoryRepository(ABC):
    """Story, page and text-block persistence. Raises PersistenceError."""

    # Stories

    @abstractmethod
    async def slug_exists(self, slug: str) -> bool:
        pass

    @abstractmethod
    async def create_story(
        self,
        slug: str,
        title: str,
        user_id: str,
        style: str,
        description: Optional[str] = None,
        uses_own_api_key: bool = False
    ) -> Story:
        pass

    @abstractmethod
    async def get_story(self, story_id: str) -> Optional[Story]:
        pass

    @abstractmethod
    async def get_story_by_slug(self, slug: str) -> Optional[Story]:
        pass

    @abstractmethod
    async def get_story_with_pages(self, slug: str) -> Optional[StoryWithPages]:
        pass

    @abstractmethod
    async def list_stories(self, user_id: str) -> List[StoryWithPages]:
        pass

    @abstractmethod
    async def update_story(self, story_id: str, fields: Dict[str, Any]) -> Story:
        pass

    @abstractmethod
    async def delete_story(self, story_id: str) -> None:
        """Delete a story together with its pages."""
        pass

    # Pages

    @abstractmethod
    async def create_page(
        self,
        story_id: str,
        page_number: int,
        prompt: str,
        character_image_urls: List[str],
        model: Optional[str] = None,
        layout: Optional[str] = None,
        is_custom_prompt: bool = False
    ) -> Page:
        pass

    @abstractmethod
    async def get_page(self, page_id: str) -> Optional[Page]:
        pass

    @abstractmethod
    async def list_pages(self, story_id: str) -> List[Page]:
        """Pages of a story ordered by page number."""
        pass

    @abstractmethod
    async def update_page_image(
        self,
        page_id: str,
        image_url: str,
        inputs: Optional[Dict[str, Any]] = None
    ) -> None:
        """Store a new image; `inputs` overwrites the page columns it generated from."""
        pass

    @abstractmethod
    async def delete_page(self, page_id: str) -> None:
        pass

    # Text blocks

    @abstractmethod
    async def replace_text_blocks(self, page_id: str, blocks: List[TextBlock]) -> None:
        """Delete the page's text blocks, then insert `blocks`."""
        pass

    @abstractmethod
    async def list_text_blocks(self, page_id: str) -> List[TextBlock]:
        pass

    # Derived queries shared by every backend

    async def next_page_number(self, story_id: str) -> int:
        """max(existing page numbers) + 1, or 1 for an empty story."""
        pages = await self.list_pages(story_id)
        if not pages:
            return 1
        return max(page.page_number for page in pages) + 1

    async def last_page_image(self, story_id: str) -> Optional[str]:
        """Image of the highest-numbered page that has one."""
        for page in reversed(await self.list_pages(story_id)):
            if page.generated_image_url:
                return page.generated_image_url
        return None

    async def story_character_images(self, story_id: str) -> List[str]:
        """Union of character images across the story's pages, first-seen order."""
        from panelcraft.story.references import story_character_images
        return story_character_images(await self.list_pages(story_id))


class OCRGateway(ABC):
    """Detects text in a hosted image."""

    @abstractmethod
    async def recognize_text(self, image_url: str) -> List[TextBlock]:
        """Return individual text annotations. Raises OCRError."""
        pass

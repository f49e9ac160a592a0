"""
Pytest Configuration and Fixtures

Shared fixtures and in-memory gateway fakes for all tests.
"""

import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from panelcraft.core.config import Settings
from panelcraft.core.exceptions import ImageGenerationError, PersistenceError
from panelcraft.core.models import Page, Story, StoryWithPages, TextBlock, Vertex
from panelcraft.gateways.base import ImageGateway, OCRGateway, StorageGateway, StoryRepository, TextGateway
from panelcraft.story.continuity import ComicOrchestrator

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


# =============================================================================
# FAKES
# =============================================================================

class InMemoryRepository(StoryRepository):
    """StoryRepository kept in dictionaries."""

    def __init__(self):
        self.stories: Dict[str, Story] = {}
        self.pages: Dict[str, Page] = {}
        self.text_blocks: Dict[str, List[TextBlock]] = {}
        self.taken_slugs: set = set()
        self.fail_on: set = set()
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)

    def _check(self, operation: str):
        if operation in self.fail_on:
            raise PersistenceError(f"{operation} failed")

    def _tick(self) -> datetime:
        return BASE_TIME + timedelta(minutes=next(self._clock))

    # Stories

    async def slug_exists(self, slug: str) -> bool:
        return slug in self.taken_slugs or any(s.slug == slug for s in self.stories.values())

    async def create_story(self, slug, title, user_id, style, description=None, uses_own_api_key=False):
        self._check("create_story")
        story_id = f"story-{next(self._ids)}"
        now = self._tick()
        story = Story(
            id=story_id, slug=slug, title=title, user_id=user_id, style=style,
            description=description, uses_own_api_key=uses_own_api_key,
            created_at=now, updated_at=now,
        )
        self.stories[story_id] = story
        return story

    async def get_story(self, story_id):
        return self.stories.get(story_id)

    async def get_story_by_slug(self, slug):
        return next((s for s in self.stories.values() if s.slug == slug), None)

    async def get_story_with_pages(self, slug):
        story = await self.get_story_by_slug(slug)
        if story is None:
            return None
        return StoryWithPages(story=story, pages=await self.list_pages(story.id))

    async def list_stories(self, user_id):
        return [
            StoryWithPages(story=s, pages=await self.list_pages(s.id))
            for s in self.stories.values() if s.user_id == user_id
        ]

    async def update_story(self, story_id, fields):
        self._check("update_story")
        story = self.stories[story_id]
        for key, value in fields.items():
            setattr(story, key, value)
        story.updated_at = self._tick()
        return story

    async def delete_story(self, story_id):
        self._check("delete_story")
        for page_id in [p.id for p in self.pages.values() if p.story_id == story_id]:
            await self.delete_page(page_id)
        self.stories.pop(story_id, None)

    # Pages

    async def create_page(self, story_id, page_number, prompt, character_image_urls,
                          model=None, layout=None, is_custom_prompt=False):
        self._check("create_page")
        page_id = f"page-{next(self._ids)}"
        now = self._tick()
        page = Page(
            id=page_id, story_id=story_id, page_number=page_number, prompt=prompt,
            character_image_urls=list(character_image_urls), model=model, layout=layout,
            is_custom_prompt=is_custom_prompt, created_at=now, updated_at=now,
        )
        self.pages[page_id] = page
        return page

    async def get_page(self, page_id):
        return self.pages.get(page_id)

    async def list_pages(self, story_id):
        return sorted(
            (p for p in self.pages.values() if p.story_id == story_id),
            key=lambda p: p.page_number,
        )

    async def update_page_image(self, page_id, image_url, inputs=None):
        self._check("update_page_image")
        page = self.pages[page_id]
        page.generated_image_url = image_url
        for key, value in (inputs or {}).items():
            setattr(page, key, value)
        page.updated_at = self._tick()

    async def delete_page(self, page_id):
        self._check("delete_page")
        self.pages.pop(page_id, None)
        self.text_blocks.pop(page_id, None)

    # Text blocks

    async def replace_text_blocks(self, page_id, blocks):
        self.text_blocks[page_id] = [
            TextBlock(text=b.text, vertices=list(b.vertices), confidence=b.confidence,
                      id=f"block-{next(self._ids)}", page_id=page_id)
            for b in blocks
        ]

    async def list_text_blocks(self, page_id):
        return list(self.text_blocks.get(page_id, []))

    # Test helpers

    def add_story(self, slug: str, user_id: str, style: str = "noir", **fields) -> Story:
        story_id = f"story-{next(self._ids)}"
        now = self._tick()
        story = Story(id=story_id, slug=slug, title=fields.pop("title", slug.title()),
                      user_id=user_id, style=style, created_at=now, updated_at=now, **fields)
        self.stories[story_id] = story
        return story

    def add_page(self, story: Story, page_number: int, prompt: str = None,
                 image: Optional[str] = "auto", characters: List[str] = None) -> Page:
        page_id = f"page-{next(self._ids)}"
        now = self._tick()
        page = Page(
            id=page_id, story_id=story.id, page_number=page_number,
            prompt=prompt or f"prompt {page_number}",
            character_image_urls=list(characters or []),
            generated_image_url=f"https://cdn.test/{story.id}/p{page_number}.jpg" if image == "auto" else image,
            created_at=now, updated_at=now,
        )
        self.pages[page_id] = page
        return page


class FakeImageGateway(ImageGateway):
    """Records calls; fails with `error` when set."""

    def __init__(self, url: str = "https://images.test/generated.jpg"):
        self.url = url
        self.error: Optional[Exception] = None
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, model, prompt, width, height, reference_images=None):
        self.calls.append({
            "model": model,
            "prompt": prompt,
            "width": width,
            "height": height,
            "reference_images": reference_images,
        })
        if self.error:
            raise self.error
        return self.url

    @property
    def last_call(self) -> Dict[str, Any]:
        return self.calls[-1]


class FakeTextGateway(TextGateway):
    def __init__(self, reply: str = '{"title": "The Midnight Heist", "description": "A thief meets her match."}'):
        self.reply = reply
        self.error: Optional[Exception] = None
        self.calls: List[List[Dict[str, str]]] = []

    async def complete(self, messages, model=None, max_tokens=300, temperature=0.7):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return self.reply


class FakeStorage(StorageGateway):
    def __init__(self):
        self.error: Optional[Exception] = None
        self.uploads: List[Dict[str, str]] = []

    async def upload(self, source_url, key):
        if self.error:
            raise self.error
        self.uploads.append({"source_url": source_url, "key": key})
        return f"https://cdn.test/{key}"


class FakeOCRGateway(OCRGateway):
    def __init__(self, blocks: List[TextBlock] = None):
        self.blocks = blocks if blocks is not None else [
            TextBlock(text="HELLO", vertices=[Vertex(10, 10), Vertex(60, 10), Vertex(60, 30), Vertex(10, 30)], confidence=0.97),
            TextBlock(text="WORLD", vertices=[Vertex(70, 10), Vertex(130, 10), Vertex(130, 30), Vertex(70, 30)]),
        ]
        self.calls: List[str] = []

    async def recognize_text(self, image_url):
        self.calls.append(image_url)
        return list(self.blocks)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment."""
    return Settings(
        _env_file=None,
        supabase_url="http://supabase.test",
        together_api_key="test-key",
        rate_limit_enabled=False,
    )


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def image_gateway() -> FakeImageGateway:
    return FakeImageGateway()


@pytest.fixture
def text_gateway() -> FakeTextGateway:
    return FakeTextGateway()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def ocr_gateway() -> FakeOCRGateway:
    return FakeOCRGateway()


@pytest.fixture
def orchestrator(repository, image_gateway, storage, text_gateway, test_settings) -> ComicOrchestrator:
    return ComicOrchestrator(repository, image_gateway, storage, text_gateway, settings=test_settings)


@pytest.fixture
def owned_story(repository) -> Story:
    """A three-page story owned by user-1."""
    story = repository.add_story("comic-abc123", "user-1", style="manga")
    repository.add_page(story, 1, "Hero wakes up", characters=["https://chars.test/a.png"])
    repository.add_page(story, 2, "Hero meets rival", characters=["https://chars.test/b.png"])
    repository.add_page(story, 3, "They fight", characters=["https://chars.test/a.png", "https://chars.test/c.png"])
    return story


@pytest.fixture
def failing_image():
    """Factory for gateway errors."""
    def make(message: str = "upstream failure", status_code: int = None):
        return ImageGenerationError(message, status_code=status_code)
    return make


"""
Story Management

Listing, reading, editing and deleting stories and pages on behalf of a user.
Ownership is checked before any mutation.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from panelcraft.core.exceptions import (
    InvalidRequestError,
    OwnershipError,
    PageNotFoundError,
    StoryNotFoundError,
)
from panelcraft.core.logging_config import get_logger
from panelcraft.core.models import Page, Story, StoryWithPages
from panelcraft.gateways.base import StoryRepository
from panelcraft.story.references import story_character_images

logger = get_logger("services.stories")

_UNSET = object()


@dataclass
class StorySummary:
    """One row of the user's story list."""
    id: str
    slug: str
    title: str
    created_at: Optional[datetime]
    page_count: int
    cover_image: Optional[str]
    last_updated: Optional[datetime]


def summarize(story_with_pages: StoryWithPages) -> StorySummary:
    """Page count is the highest page number; the cover is page 1's image."""
    story = story_with_pages.story
    pages = story_with_pages.pages

    last_updated = story.created_at
    for page in pages:
        stamp = page.updated_at or page.created_at
        if stamp and (last_updated is None or stamp > last_updated):
            last_updated = stamp

    cover = next((p.generated_image_url for p in pages if p.page_number == 1), None)
    return StorySummary(
        id=story.id,
        slug=story.slug,
        title=story.title,
        created_at=story.created_at,
        page_count=max((p.page_number for p in pages), default=0),
        cover_image=cover,
        last_updated=last_updated,
    )


class StoryService:
    """Story CRUD with ownership checks."""

    def __init__(self, repository: StoryRepository):
        self.repository = repository

    async def list_stories(self, user_id: str) -> List[StorySummary]:
        """User's stories, most recently updated first."""
        summaries = [summarize(s) for s in await self.repository.list_stories(user_id)]
        summaries.sort(key=lambda s: s.last_updated.timestamp() if s.last_updated else 0.0, reverse=True)
        return summaries

    async def get_story(self, slug: str) -> StoryWithPages:
        story_with_pages = await self.repository.get_story_with_pages(slug)
        if story_with_pages is None:
            raise StoryNotFoundError(slug)
        return story_with_pages

    async def get_owned_story(self, slug: str, user_id: str) -> StoryWithPages:
        story_with_pages = await self.get_story(slug)
        if story_with_pages.story.user_id != user_id:
            raise OwnershipError(slug)
        return story_with_pages

    async def update_story(
        self,
        slug: str,
        user_id: str,
        title=_UNSET,
        summary=_UNSET,
        character_descriptions=_UNSET
    ) -> Story:
        """
        Edit title, summary and character descriptions.

        Only the fields passed are changed. Empty summary or character
        descriptions clear the field; an empty title is rejected.
        """
        story = (await self.get_owned_story(slug, user_id)).story

        fields = {}
        if title is not _UNSET:
            if not isinstance(title, str) or not title.strip():
                raise InvalidRequestError("Title must be a non-empty string", field="title")
            fields["title"] = title.strip()
        if summary is not _UNSET:
            fields["summary"] = summary or None
        if character_descriptions is not _UNSET:
            fields["character_descriptions"] = character_descriptions or None

        if not fields:
            raise InvalidRequestError("No fields to update")

        logger.info(f"Updating story {slug}: {sorted(fields)}")
        return await self.repository.update_story(story.id, fields)

    async def delete_story(self, slug: str, user_id: str) -> None:
        story = (await self.get_owned_story(slug, user_id)).story
        await self.repository.delete_story(story.id)
        logger.info(f"Deleted story {slug}")

    async def character_images(self, slug: str, user_id: str) -> List[str]:
        """Character images used anywhere in the story, available for reuse."""
        story_with_pages = await self.get_owned_story(slug, user_id)
        return story_character_images(story_with_pages.pages)

    async def get_owned_page(self, page_id: str, user_id: str) -> Page:
        page = await self.repository.get_page(page_id)
        if page is None:
            raise PageNotFoundError(page_id)
        story = await self.repository.get_story(page.story_id)
        if story is None or story.user_id != user_id:
            raise OwnershipError(page.story_id)
        return page

    async def delete_page(self, page_id: str, user_id: str) -> Page:
        """Delete one page. Remaining pages keep their numbers."""
        page = await self.get_owned_page(page_id, user_id)
        await self.repository.delete_page(page.id)
        logger.info(f"Deleted page {page.page_number} ({page_id}) of story {page.story_id}")
        return page

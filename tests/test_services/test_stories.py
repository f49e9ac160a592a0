"""
Tests for Story Management

Tests for panelcraft/services/stories.py
"""

import pytest

from panelcraft.core.exceptions import InvalidRequestError, OwnershipError, PageNotFoundError, StoryNotFoundError
from panelcraft.services.stories import StoryService, summarize


@pytest.fixture
def service(repository):
    return StoryService(repository)


class TestListing:
    """Tests for the story list."""

    @pytest.mark.asyncio
    async def test_summary_fields(self, service, repository, owned_story):
        summaries = await service.list_stories("user-1")

        assert len(summaries) == 1
        summary = summaries[0]
        assert summary.slug == "comic-abc123"
        assert summary.page_count == 3
        assert summary.cover_image == f"https://cdn.test/{owned_story.id}/p1.jpg"

    @pytest.mark.asyncio
    async def test_page_count_is_highest_number(self, repository):
        """Test a story with pages 1, 2 and 4 reports 4 pages."""
        story = repository.add_story("comic-gaps", "user-1")
        for number in (1, 2, 4):
            repository.add_page(story, number)

        summary = summarize(await repository.get_story_with_pages("comic-gaps"))
        assert summary.page_count == 4

    @pytest.mark.asyncio
    async def test_most_recent_first(self, service, repository):
        older = repository.add_story("comic-older", "user-1")
        newer = repository.add_story("comic-newer", "user-1")
        repository.add_page(newer, 1)
        repository.add_page(older, 1)

        slugs = [s.slug for s in await service.list_stories("user-1")]
        assert slugs == ["comic-older", "comic-newer"]

    @pytest.mark.asyncio
    async def test_only_own_stories(self, service, repository, owned_story):
        repository.add_story("comic-other", "user-2")
        assert [s.slug for s in await service.list_stories("user-2")] == ["comic-other"]

    @pytest.mark.asyncio
    async def test_empty_story(self, service, repository):
        repository.add_story("comic-empty", "user-1")
        summary = (await service.list_stories("user-1"))[0]

        assert summary.page_count == 0
        assert summary.cover_image is None


class TestUpdate:
    """Tests for story edits."""

    @pytest.mark.asyncio
    async def test_partial_update(self, service, owned_story):
        story = await service.update_story("comic-abc123", "user-1", title="  New Title  ")

        assert story.title == "New Title"
        assert story.summary is None

    @pytest.mark.asyncio
    async def test_empty_values_clear(self, service, repository, owned_story):
        await service.update_story("comic-abc123", "user-1", summary="A plot", character_descriptions="Sam")
        story = await service.update_story("comic-abc123", "user-1", summary="", character_descriptions="")

        assert story.summary is None
        assert story.character_descriptions is None

    @pytest.mark.asyncio
    async def test_empty_title_rejected(self, service, owned_story):
        with pytest.raises(InvalidRequestError):
            await service.update_story("comic-abc123", "user-1", title="   ")

    @pytest.mark.asyncio
    async def test_no_fields(self, service, owned_story):
        with pytest.raises(InvalidRequestError, match="No fields to update"):
            await service.update_story("comic-abc123", "user-1")

    @pytest.mark.asyncio
    async def test_not_owner(self, service, owned_story):
        with pytest.raises(OwnershipError):
            await service.update_story("comic-abc123", "user-2", title="Mine now")

    @pytest.mark.asyncio
    async def test_missing(self, service):
        with pytest.raises(StoryNotFoundError):
            await service.get_story("comic-nope")


class TestDeletion:
    """Tests for deleting stories and pages."""

    @pytest.mark.asyncio
    async def test_delete_story_cascades(self, service, repository, owned_story):
        await service.delete_story("comic-abc123", "user-1")

        assert repository.stories == {}
        assert repository.pages == {}

    @pytest.mark.asyncio
    async def test_delete_page_keeps_numbers(self, service, repository, owned_story):
        """Test remaining pages are not renumbered."""
        pages = await repository.list_pages(owned_story.id)

        deleted = await service.delete_page(pages[1].id, "user-1")

        assert deleted.page_number == 2
        assert [p.page_number for p in await repository.list_pages(owned_story.id)] == [1, 3]
        assert await repository.next_page_number(owned_story.id) == 4

    @pytest.mark.asyncio
    async def test_delete_page_not_owner(self, service, repository, owned_story):
        pages = await repository.list_pages(owned_story.id)
        with pytest.raises(OwnershipError):
            await service.delete_page(pages[0].id, "user-2")

    @pytest.mark.asyncio
    async def test_delete_missing_page(self, service):
        with pytest.raises(PageNotFoundError):
            await service.delete_page("page-999", "user-1")


class TestCharacterImages:
    """Tests for story-wide character images."""

    @pytest.mark.asyncio
    async def test_union_in_page_order(self, service, owned_story):
        images = await service.character_images("comic-abc123", "user-1")
        assert images == [
            "https://chars.test/a.png",
            "https://chars.test/b.png",
            "https://chars.test/c.png",
        ]

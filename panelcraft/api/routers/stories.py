"""Story endpoints: list, read, edit, delete and reusable characters."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from panelcraft.api.deps import get_current_user_id, get_optional_user_id, get_story_service
from panelcraft.api.schemas import (
    PageResponse,
    StoryDetailResponse,
    StoryListResponse,
    StoryResponse,
    StorySummaryResponse,
    StoryUpdateRequest,
)
from panelcraft.core.exceptions import PanelcraftError
from panelcraft.core.logging_config import get_logger
from panelcraft.services.stories import StoryService

logger = get_logger("api.stories")

router = APIRouter()


@router.get("", response_model=StoryListResponse)
async def list_stories(
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
):
    """List the current user's stories, most recently updated first."""
    try:
        summaries = await service.list_stories(user_id)
        return StoryListResponse(stories=[
            StorySummaryResponse(
                id=s.id,
                slug=s.slug,
                title=s.title,
                created_at=s.created_at,
                page_count=s.page_count,
                cover_image=s.cover_image,
                last_updated=s.last_updated,
            )
            for s in summaries
        ])

    except PanelcraftError:
        raise
    except Exception as e:
        logger.error(f"List stories error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch stories")


@router.get("/{slug}", response_model=StoryDetailResponse)
async def get_story(
    slug: str,
    user_id: Optional[str] = Depends(get_optional_user_id),
    service: StoryService = Depends(get_story_service),
):
    """Get a story with its pages. Anyone with the slug can read it."""
    try:
        story_with_pages = await service.get_story(slug)
        return StoryDetailResponse(
            story=StoryResponse.from_story(story_with_pages.story),
            pages=[PageResponse.from_page(p) for p in story_with_pages.pages],
            is_owner=bool(user_id) and story_with_pages.story.user_id == user_id,
        )

    except PanelcraftError:
        raise
    except Exception as e:
        logger.error(f"Get story error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch story")


@router.put("/{slug}")
async def update_story(
    slug: str,
    updates: StoryUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
):
    """Edit title, summary and character descriptions."""
    try:
        fields = updates.model_dump(exclude_unset=True)
        story = await service.update_story(slug, user_id, **fields)
        return {"success": True, "story": StoryResponse.from_story(story).model_dump(by_alias=True, mode="json")}

    except PanelcraftError:
        raise
    except Exception as e:
        logger.error(f"Update story error: {e}")
        raise HTTPException(status_code=500, detail="Failed to update story")


@router.delete("/{slug}")
async def delete_story(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
):
    """Delete a story and all its pages."""
    try:
        await service.delete_story(slug, user_id)
        return {"success": True}

    except PanelcraftError:
        raise
    except Exception as e:
        logger.error(f"Delete story error: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete story")


@router.get("/{slug}/characters")
async def get_story_characters(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
):
    """Character images used in the story, for reuse on new pages."""
    try:
        return {"characterImages": await service.character_images(slug, user_id)}

    except PanelcraftError:
        raise
    except Exception as e:
        logger.error(f"Story characters error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch characters")

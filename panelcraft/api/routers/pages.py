"""Page endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from panelcraft.api.deps import get_current_user_id, get_story_service
from panelcraft.core.exceptions import PanelcraftError
from panelcraft.core.logging_config import get_logger
from panelcraft.services.stories import StoryService

logger = get_logger("api.pages")

router = APIRouter()


@router.delete("/{page_id}")
async def delete_page(
    page_id: str,
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
):
    """Delete a page. Other pages keep their numbers."""
    try:
        page = await service.delete_page(page_id, user_id)
        return {"success": True, "pageId": page.id, "pageNumber": page.page_number}

    except PanelcraftError:
        raise
    except Exception as e:
        logger.error(f"Delete page error: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete page")

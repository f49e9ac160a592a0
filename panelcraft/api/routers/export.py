"""PDF download endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from panelcraft.api.deps import get_story_service
from panelcraft.core.exceptions import InvalidRequestError, PanelcraftError
from panelcraft.core.logging_config import get_logger
from panelcraft.services.export import export_story_pdf, safe_filename
from panelcraft.services.stories import StoryService

logger = get_logger("api.export")

router = APIRouter()


@router.get("/download-pdf")
async def download_pdf(
    storySlug: Optional[str] = None,
    service: StoryService = Depends(get_story_service),
):
    """Download a story as a PDF, one page per generated image."""
    if not storySlug:
        raise InvalidRequestError("Story slug required", field="storySlug")

    try:
        story_with_pages = await service.get_story(storySlug)
        pdf = await export_story_pdf(story_with_pages)

    except PanelcraftError:
        raise
    except Exception as e:
        logger.error(f"PDF export error: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate PDF")

    filename = safe_filename(story_with_pages.story.title)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'},
    )

"""OCR endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from panelcraft.api.deps import get_current_user_id, get_ocr_service, get_story_service
from panelcraft.api.schemas import OCRPageResponse, OCRRequest, TextBlockResponse
from panelcraft.core.exceptions import InvalidRequestError, PageNotFoundError, PanelcraftError
from panelcraft.core.logging_config import get_logger
from panelcraft.services.ocr import OCRResult, OCRService
from panelcraft.services.stories import StoryService

logger = get_logger("api.ocr")

router = APIRouter()


def _result_payload(result: OCRResult) -> dict:
    return OCRPageResponse(
        page_id=result.page_id,
        text_blocks=[TextBlockResponse.from_block(b) for b in result.text_blocks],
        full_text=result.full_text,
    ).model_dump(by_alias=True, mode="json")


@router.post("")
async def process_ocr(
    body: OCRRequest,
    user_id: str = Depends(get_current_user_id),
    ocr: OCRService = Depends(get_ocr_service),
    stories: StoryService = Depends(get_story_service),
):
    """Run OCR on one page, or on every page of a story (storyId is the story slug)."""
    if not body.page_id and not body.story_id:
        raise InvalidRequestError("Either pageId or storyId is required")

    try:
        if body.story_id:
            story = (await stories.get_owned_story(body.story_id, user_id)).story
            results = await ocr.process_story(story.id)
            return {
                "success": True,
                "message": f"Processed {len(results)} pages",
                "results": [_result_payload(r) for r in results],
            }

        await stories.get_owned_page(body.page_id, user_id)
        result = await ocr.process_page(body.page_id)
        if result is None:
            raise PageNotFoundError(body.page_id)
        return {"success": True, "result": _result_payload(result)}

    except PanelcraftError:
        raise
    except Exception as e:
        logger.error(f"OCR processing error: {e}")
        raise HTTPException(status_code=500, detail="Failed to process OCR")


@router.get("/{page_id}", response_model=OCRPageResponse)
async def get_page_text(
    page_id: str,
    user_id: str = Depends(get_current_user_id),
    ocr: OCRService = Depends(get_ocr_service),
    stories: StoryService = Depends(get_story_service),
):
    """Stored text blocks of a page."""
    try:
        await stories.get_owned_page(page_id, user_id)
        blocks = await ocr.page_text_blocks(page_id)
        return OCRPageResponse(
            page_id=page_id,
            text_blocks=[TextBlockResponse.from_block(b) for b in blocks],
        )

    except PanelcraftError:
        raise
    except Exception as e:
        logger.error(f"Get text blocks error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch text blocks")

"""Comic generation endpoints: new story, add page and redraw."""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from panelcraft.api.deps import get_current_user_id, get_orchestrator, get_own_api_key
from panelcraft.api.errors import error_response
from panelcraft.api.limits import generation_limit, limiter
from panelcraft.api.schemas import AddPageRequest, GenerateComicRequest, GenerationResponse
from panelcraft.core.constants import ErrorType
from panelcraft.core.logging_config import get_logger
from panelcraft.story.continuity import ComicOrchestrator, GenerationResult, PageGenerationRequest

logger = get_logger("api.comics")

router = APIRouter()


def _to_response(result: GenerationResult):
    if not result.success:
        extra = {"imageUrl": result.image_url} if result.image_url else {}
        return error_response(result.error, result.error_type, result.status_code, **extra)

    return GenerationResponse(
        image_url=result.image_url,
        page_id=result.page_id,
        page_number=result.page_number,
        story_id=result.story_id,
        story_slug=result.story_slug,
        title=result.title,
        description=result.description,
    )


@router.post("/generate-comic", response_model=GenerationResponse)
@limiter.limit(generation_limit)
async def generate_comic(
    request: Request,
    body: GenerateComicRequest,
    user_id: str = Depends(get_current_user_id),
    own_api_key: Optional[str] = Depends(get_own_api_key),
    orchestrator: ComicOrchestrator = Depends(get_orchestrator),
):
    """Create a story and generate its first page."""
    result = await orchestrator.generate_page(
        PageGenerationRequest(
            prompt=body.prompt or "",
            style=body.style,
            character_images=body.character_images,
            model=body.model,
            layout=body.layout,
            custom_system_prompt=body.custom_system_prompt,
            is_continuation=body.is_continuation,
            previous_context=body.previous_context,
            uses_own_api_key=bool(own_api_key),
        ),
        user_id,
    )
    return _to_response(result)


@router.post("/add-page", response_model=GenerationResponse)
@limiter.limit(generation_limit)
async def add_page(
    request: Request,
    body: AddPageRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: ComicOrchestrator = Depends(get_orchestrator),
):
    """Append a page to a story, or redraw an existing page when pageId is given."""
    if not body.story_id or not (body.prompt or "").strip():
        return error_response("Missing required fields: storyId and prompt", ErrorType.VALIDATION, 400)

    result = await orchestrator.generate_page(
        PageGenerationRequest(
            prompt=body.prompt,
            story_slug=body.story_id,
            page_id=body.page_id,
            character_images=body.character_images,
            model=body.model,
            layout=body.layout,
            custom_system_prompt=body.custom_system_prompt,
        ),
        user_id,
    )
    return _to_response(result)

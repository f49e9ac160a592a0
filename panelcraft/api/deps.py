"""
API Dependencies

Authentication and gateway/service wiring for route handlers.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException

from panelcraft.core.config import settings
from panelcraft.core.logging_config import get_logger
from panelcraft.gateways.base import ImageGateway, OCRGateway, StorageGateway, StoryRepository, TextGateway
from panelcraft.gateways.supabase_store import (
    SupabaseRepository,
    SupabaseStorage,
    get_supabase_admin,
    get_supabase_client,
)
from panelcraft.gateways.together import TogetherClient, TogetherImageGateway, TogetherTextGateway
from panelcraft.gateways.vision_ocr import VisionOCRGateway
from panelcraft.services.ocr import OCRService
from panelcraft.services.stories import StoryService
from panelcraft.story.continuity import ComicOrchestrator

logger = get_logger("api.deps")


# =============================================================================
# AUTH
# =============================================================================

async def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    """Extract and validate user ID from the Bearer token."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        if not authorization.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Invalid token format")

        token = authorization.replace("Bearer ", "")
        client = get_supabase_client()
        response = client.auth.get_user(token)

        if not response or not response.user:
            raise HTTPException(status_code=401, detail="Invalid token")

        return response.user.id

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Auth error: {e}")
        raise HTTPException(status_code=401, detail="Authentication failed")


async def get_optional_user_id(
    authorization: Optional[str] = Header(None)
) -> Optional[str]:
    """Get user ID if authenticated, None otherwise."""
    if not authorization:
        return None

    try:
        return await get_current_user_id(authorization)
    except HTTPException:
        return None


def get_own_api_key(x_api_key: Optional[str] = Header(None)) -> Optional[str]:
    """Caller-supplied Together key, if any."""
    return x_api_key or None


# =============================================================================
# GATEWAYS
# =============================================================================

@lru_cache()
def get_repository() -> StoryRepository:
    return SupabaseRepository(get_supabase_admin())


@lru_cache()
def get_storage() -> StorageGateway:
    return SupabaseStorage(get_supabase_admin(), settings.storage_bucket)


@lru_cache()
def get_ocr_gateway() -> OCRGateway:
    return VisionOCRGateway(api_key=settings.google_vision_api_key or None)


def get_together_client(own_api_key: Optional[str] = Depends(get_own_api_key)) -> TogetherClient:
    return TogetherClient(
        api_key=own_api_key or settings.together_api_key or None,
        base_url=settings.together_base_url,
    )


def get_image_gateway(client: TogetherClient = Depends(get_together_client)) -> ImageGateway:
    return TogetherImageGateway(client, temperature=settings.image_temperature)


def get_text_gateway(client: TogetherClient = Depends(get_together_client)) -> TextGateway:
    return TogetherTextGateway(client, default_model=settings.text_model)


# =============================================================================
# SERVICES
# =============================================================================

def get_orchestrator(
    repository: StoryRepository = Depends(get_repository),
    image_gateway: ImageGateway = Depends(get_image_gateway),
    storage: StorageGateway = Depends(get_storage),
    text_gateway: TextGateway = Depends(get_text_gateway),
) -> ComicOrchestrator:
    return ComicOrchestrator(repository, image_gateway, storage, text_gateway, settings=settings)


def get_story_service(repository: StoryRepository = Depends(get_repository)) -> StoryService:
    return StoryService(repository)


def get_ocr_service(
    repository: StoryRepository = Depends(get_repository),
    ocr_gateway: OCRGateway = Depends(get_ocr_gateway),
) -> OCRService:
    return OCRService(repository, ocr_gateway)

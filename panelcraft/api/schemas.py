"""
API Models

Request and response bodies. Field names are camelCase on the wire.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from panelcraft.core.models import Page, Story, TextBlock


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# GENERATION
# =============================================================================

class GenerateComicRequest(ApiModel):
    """Create a new story from its first page."""
    prompt: Optional[str] = None
    style: Optional[str] = None
    character_images: List[str] = Field(default_factory=list, alias="characterImages")
    model: Optional[str] = None
    layout: Optional[str] = None
    custom_system_prompt: Optional[str] = Field(default=None, alias="customSystemPrompt")
    is_continuation: bool = Field(default=False, alias="isContinuation")
    previous_context: str = Field(default="", alias="previousContext")


class AddPageRequest(ApiModel):
    """Append a page to a story, or redraw one when pageId is set."""
    story_id: Optional[str] = Field(default=None, alias="storyId")
    page_id: Optional[str] = Field(default=None, alias="pageId")
    prompt: Optional[str] = None
    character_images: List[str] = Field(default_factory=list, alias="characterImages")
    model: Optional[str] = None
    layout: Optional[str] = None
    custom_system_prompt: Optional[str] = Field(default=None, alias="customSystemPrompt")


class GenerationResponse(ApiModel):
    image_url: str = Field(alias="imageUrl")
    page_id: str = Field(alias="pageId")
    page_number: int = Field(alias="pageNumber")
    story_id: str = Field(alias="storyId")
    story_slug: str = Field(alias="storySlug")
    title: Optional[str] = None
    description: Optional[str] = None


# =============================================================================
# STORIES
# =============================================================================

class StoryUpdateRequest(ApiModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    character_descriptions: Optional[str] = Field(default=None, alias="characterDescriptions")


class PageResponse(ApiModel):
    id: str
    story_id: str = Field(alias="storyId")
    page_number: int = Field(alias="pageNumber")
    prompt: str
    character_image_urls: List[str] = Field(default_factory=list, alias="characterImageUrls")
    model: Optional[str] = None
    layout: Optional[str] = None
    is_custom_prompt: bool = Field(default=False, alias="isCustomPrompt")
    generated_image_url: Optional[str] = Field(default=None, alias="generatedImageUrl")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @classmethod
    def from_page(cls, page: Page) -> "PageResponse":
        return cls(
            id=page.id,
            story_id=page.story_id,
            page_number=page.page_number,
            prompt=page.prompt,
            character_image_urls=page.character_image_urls,
            model=page.model,
            layout=page.layout,
            is_custom_prompt=page.is_custom_prompt,
            generated_image_url=page.generated_image_url,
            created_at=page.created_at,
            updated_at=page.updated_at,
        )


class StoryResponse(ApiModel):
    id: str
    slug: str
    title: str
    description: Optional[str] = None
    style: str
    summary: Optional[str] = None
    character_descriptions: Optional[str] = Field(default=None, alias="characterDescriptions")
    user_id: str = Field(alias="userId")
    uses_own_api_key: bool = Field(default=False, alias="usesOwnApiKey")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @classmethod
    def from_story(cls, story: Story) -> "StoryResponse":
        return cls(
            id=story.id,
            slug=story.slug,
            title=story.title,
            description=story.description,
            style=story.style,
            summary=story.summary,
            character_descriptions=story.character_descriptions,
            user_id=story.user_id,
            uses_own_api_key=story.uses_own_api_key,
            created_at=story.created_at,
            updated_at=story.updated_at,
        )


class StoryDetailResponse(ApiModel):
    story: StoryResponse
    pages: List[PageResponse]
    is_owner: bool = Field(alias="isOwner")


class StorySummaryResponse(ApiModel):
    id: str
    slug: str
    title: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    page_count: int = Field(alias="pageCount")
    cover_image: Optional[str] = Field(default=None, alias="coverImage")
    last_updated: Optional[datetime] = Field(default=None, alias="lastUpdated")


class StoryListResponse(ApiModel):
    stories: List[StorySummaryResponse]


# =============================================================================
# OCR
# =============================================================================

class OCRRequest(ApiModel):
    page_id: Optional[str] = Field(default=None, alias="pageId")
    story_id: Optional[str] = Field(default=None, alias="storyId")


class VertexResponse(ApiModel):
    x: int
    y: int


class BoundingBoxResponse(ApiModel):
    vertices: List[VertexResponse] = Field(default_factory=list)


class TextBlockResponse(ApiModel):
    id: Optional[str] = None
    text: str
    bounding_box: BoundingBoxResponse = Field(alias="boundingBox")
    confidence: Optional[float] = None

    @classmethod
    def from_block(cls, block: TextBlock) -> "TextBlockResponse":
        return cls(
            id=block.id,
            text=block.text,
            bounding_box=BoundingBoxResponse(
                vertices=[VertexResponse(x=v.x, y=v.y) for v in block.vertices]
            ),
            confidence=block.confidence,
        )


class OCRPageResponse(ApiModel):
    page_id: str = Field(alias="pageId")
    text_blocks: List[TextBlockResponse] = Field(default_factory=list, alias="textBlocks")
    full_text: Optional[str] = Field(default=None, alias="fullText")

"""
Page and Story Continuity

One operation generates a comic page in any of three situations:

    new story   no story slug; creates the story and page 1
    add page    story slug; appends page max(existing) + 1
    redraw      story slug and page id; regenerates an existing page

Each flow collects reference images and prior-page context, composes the
prompt, calls the image gateway, re-hosts and persists the result. Failures
never escape as exceptions; they come back as a GenerationResult with an
error type from the taxonomy.

Concurrent redraws of the same page are not serialized; the last successful
write wins.
"""

import asyncio
import time
from dataclasses import dataclass, field, replace
from typing import List, Optional

from panelcraft.core.config import Settings, get_settings
from panelcraft.core.constants import DEFAULT_STYLE_ID, ErrorType
from panelcraft.core.exceptions import (
    InvalidRequestError,
    OwnershipError,
    PageNotFoundError,
    StoryNotFoundError,
)
from panelcraft.core.logging_config import get_logger
from panelcraft.core.models import Page, Story
from panelcraft.core.slugs import unique_slug
from panelcraft.gateways.base import ImageGateway, StorageGateway, StoryRepository, TextGateway
from panelcraft.prompts.composer import PagePrompt, PromptRequest, compose
from panelcraft.prompts.registry import get_image_model, get_layout
from panelcraft.story.errors import classify_generation_error
from panelcraft.story.references import build_reference_set
from panelcraft.story.titles import StoryMetadata, TitleGenerator

logger = get_logger("story.continuity")


@dataclass
class PageGenerationRequest:
    """Per-request generation inputs."""
    prompt: str
    story_slug: Optional[str] = None
    page_id: Optional[str] = None
    style: Optional[str] = None
    character_images: List[str] = field(default_factory=list)
    model: Optional[str] = None
    layout: Optional[str] = None
    custom_system_prompt: Optional[str] = None
    is_continuation: bool = False
    previous_context: str = ""
    uses_own_api_key: bool = False

    @property
    def is_redraw(self) -> bool:
        return bool(self.story_slug and self.page_id)

    @property
    def is_custom_prompt(self) -> bool:
        return bool(self.custom_system_prompt and self.custom_system_prompt.strip())


@dataclass
class GenerationResult:
    """Outcome of a page generation."""
    success: bool
    image_url: Optional[str] = None
    page_id: Optional[str] = None
    page_number: Optional[int] = None
    story_id: Optional[str] = None
    story_slug: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None
    status_code: int = 200

    @classmethod
    def failure(cls, error: str, error_type: ErrorType, status_code: int, **kwargs) -> "GenerationResult":
        return cls(success=False, error=error, error_type=error_type, status_code=status_code, **kwargs)


@dataclass
class _Plan:
    story: Story
    page: Page
    references: List[str]
    prompt: str
    request: PageGenerationRequest
    created_story: bool = False
    created_page: bool = False


class ComicOrchestrator:
    """
    Runs page generation against the gateways.

    Args:
        repository: Story and page persistence
        image_gateway: Image model
        storage: Object storage for re-hosting generated images
        text_gateway: Text model used for new-story titles
        settings: Overrides the cached application settings
    """

    def __init__(
        self,
        repository: StoryRepository,
        image_gateway: ImageGateway,
        storage: StorageGateway,
        text_gateway: TextGateway,
        settings: Settings = None
    ):
        self.repository = repository
        self.image_gateway = image_gateway
        self.storage = storage
        self.settings = settings or get_settings()
        self.title_generator = TitleGenerator(text_gateway, model=self.settings.text_model)

    async def generate_page(self, request: PageGenerationRequest, user_id: str) -> GenerationResult:
        """Generate a page for a new story, an existing story, or redraw one."""
        try:
            self._validate(request)
            if request.is_redraw:
                plan = await self._plan_redraw(request, user_id)
            elif request.story_slug:
                plan = await self._plan_add_page(request, user_id)
            else:
                plan = await self._plan_new_story(request, user_id)
        except InvalidRequestError as e:
            return GenerationResult.failure(e.message, ErrorType.VALIDATION, 400)
        except (StoryNotFoundError, PageNotFoundError) as e:
            return GenerationResult.failure(e.message, ErrorType.NOT_FOUND, 404)
        except OwnershipError as e:
            return GenerationResult.failure(e.message, ErrorType.FORBIDDEN, 403)
        except Exception as e:
            logger.error(f"Failed to prepare page generation: {e}")
            return GenerationResult.failure(f"Failed to prepare page: {e}", ErrorType.PERSISTENCE, 500)

        return await self._execute(plan)

    # =========================================================================
    # PLANNING
    # =========================================================================

    def _validate(self, request: PageGenerationRequest) -> None:
        if not request.prompt or not request.prompt.strip():
            raise InvalidRequestError("Missing required field: prompt", field="prompt")
        if request.page_id and not request.story_slug:
            raise InvalidRequestError("Missing required field: storyId", field="storyId")

    async def _load_owned_story(self, slug: str, user_id: str):
        story_with_pages = await self.repository.get_story_with_pages(slug)
        if story_with_pages is None:
            raise StoryNotFoundError(slug)
        if story_with_pages.story.user_id != user_id:
            raise OwnershipError(slug)
        return story_with_pages

    def _prompt_request(
        self,
        request: PageGenerationRequest,
        story: Story,
        references: List[str],
        previous_pages: List[Page]
    ) -> PromptRequest:
        return PromptRequest(
            prompt=request.prompt,
            style_id=story.style,
            layout_id=request.layout,
            reference_images=references,
            is_continuation=request.is_continuation,
            previous_context=request.previous_context,
            is_add_page=bool(previous_pages),
            previous_pages=[PagePrompt(page.page_number, page.prompt) for page in previous_pages],
            summary=story.summary,
            character_descriptions=story.character_descriptions,
            custom_system_prompt=request.custom_system_prompt,
        )

    async def _plan_new_story(self, request: PageGenerationRequest, user_id: str) -> _Plan:
        slug = await unique_slug(self.repository.slug_exists, self.settings.slug_max_attempts)
        story = await self.repository.create_story(
            slug=slug,
            title="Untitled Comic",
            user_id=user_id,
            style=request.style or DEFAULT_STYLE_ID,
            uses_own_api_key=request.uses_own_api_key,
        )

        try:
            page = await self._create_page(story, 1, request)
        except Exception:
            await self._cleanup(story_id=story.id)
            raise

        references = build_reference_set(None, request.character_images)
        logger.info(f"New story {story.slug}: page 1 with {len(references)} reference(s)")
        return _Plan(
            story=story,
            page=page,
            references=references,
            prompt=compose(self._prompt_request(request, story, references, [])),
            request=request,
            created_story=True,
            created_page=True,
        )

    async def _plan_add_page(self, request: PageGenerationRequest, user_id: str) -> _Plan:
        story_with_pages = await self._load_owned_story(request.story_slug, user_id)
        story = story_with_pages.story

        next_number = await self.repository.next_page_number(story.id)
        previous_image = None
        if next_number > 1:
            previous_image = await self.repository.last_page_image(story.id)

        references = build_reference_set(previous_image, request.character_images)
        prompt = compose(self._prompt_request(request, story, references, story_with_pages.pages))
        page = await self._create_page(story, next_number, request)

        logger.info(f"Story {story.slug}: adding page {next_number} with {len(references)} reference(s)")
        return _Plan(
            story=story,
            page=page,
            references=references,
            prompt=prompt,
            request=request,
            created_page=True,
        )

    async def _plan_redraw(self, request: PageGenerationRequest, user_id: str) -> _Plan:
        story_with_pages = await self._load_owned_story(request.story_slug, user_id)
        story = story_with_pages.story

        target = next((p for p in story_with_pages.pages if p.id == request.page_id), None)
        if target is None:
            raise PageNotFoundError(request.page_id)

        # Inputs the caller leaves out are taken from the page being redrawn
        request = replace(
            request,
            character_images=list(request.character_images or target.character_image_urls),
            layout=request.layout or target.layout,
            model=request.model or target.model,
        )

        earlier = [p for p in story_with_pages.pages if p.page_number < target.page_number]
        anchor = next((p.generated_image_url for p in reversed(earlier) if p.generated_image_url), None)

        references = build_reference_set(anchor, request.character_images)
        logger.info(f"Story {story.slug}: redrawing page {target.page_number} with {len(references)} reference(s)")
        return _Plan(
            story=story,
            page=target,
            references=references,
            prompt=compose(self._prompt_request(request, story, references, earlier)),
            request=request,
        )

    def _page_inputs(self, request: PageGenerationRequest) -> dict:
        return {
            "prompt": request.prompt,
            "character_image_urls": list(request.character_images),
            "model": request.model,
            "layout": request.layout,
            "is_custom_prompt": request.is_custom_prompt,
        }

    async def _create_page(self, story: Story, page_number: int, request: PageGenerationRequest) -> Page:
        return await self.repository.create_page(
            story_id=story.id,
            page_number=page_number,
            **self._page_inputs(request),
        )

    # =========================================================================
    # EXECUTION
    # =========================================================================

    async def _execute(self, plan: _Plan) -> GenerationResult:
        request = plan.request
        identity = dict(
            page_id=plan.page.id,
            page_number=plan.page.page_number,
            story_id=plan.story.id,
            story_slug=plan.story.slug,
        )

        if plan.created_story:
            image_outcome, metadata = await asyncio.gather(
                self._generate_image(plan),
                self.title_generator.generate_or_fallback(request.prompt),
                return_exceptions=True,
            )
        else:
            image_outcome = await self._generate_image(plan)
            metadata = None

        if isinstance(image_outcome, BaseException):
            logger.error(f"Image generation failed for {plan.story.slug} page {plan.page.page_number}: {image_outcome}")
            await self._cleanup_plan(plan)
            classified = classify_generation_error(image_outcome)
            return GenerationResult.failure(
                classified.message,
                classified.error_type,
                classified.status_code,
                story_slug=None if plan.created_story else plan.story.slug,
            )

        image_url = image_outcome
        try:
            image_url = await self.storage.upload(image_url, self._storage_key(plan))
            await self.repository.update_page_image(
                plan.page.id,
                image_url,
                inputs=self._page_inputs(request) if not plan.created_page else None,
            )
        except Exception as e:
            logger.error(f"Failed to save generated page for {plan.story.slug}: {e}")
            await self._cleanup_plan(plan)
            return GenerationResult.failure(
                f"Image was generated but could not be saved: {e}",
                ErrorType.PERSISTENCE,
                500,
                image_url=image_url,
                **(identity if not plan.created_page else {}),
            )

        if isinstance(metadata, StoryMetadata):
            await self._save_metadata(plan, metadata)

        logger.info(f"Generated page {plan.page.page_number} of {plan.story.slug}")
        return GenerationResult(
            success=True,
            image_url=image_url,
            title=plan.story.title,
            description=plan.story.description,
            **identity,
        )

    async def _save_metadata(self, plan: _Plan, metadata: StoryMetadata) -> None:
        """Title the new story; on failure the saved page keeps the placeholder title."""
        try:
            plan.story = await self.repository.update_story(
                plan.story.id,
                {"title": metadata.title, "description": metadata.description},
            )
        except Exception as e:
            logger.warning(f"Failed to save title for {plan.story.slug}, keeping '{plan.story.title}': {e}")

    async def _generate_image(self, plan: _Plan) -> str:
        request = plan.request
        model = get_image_model(request.model)
        dimensions = model.dimensions_for(bool(plan.references))
        layout = get_layout(request.layout)
        logger.debug(
            f"Calling {model.model_id} at {dimensions.width}x{dimensions.height}, "
            f"layout {layout.id}, prompt length {len(plan.prompt)}"
        )
        return await self.image_gateway.generate(
            model=model.model_id,
            prompt=plan.prompt,
            width=dimensions.width,
            height=dimensions.height,
            reference_images=plan.references or None,
        )

    def _storage_key(self, plan: _Plan) -> str:
        return f"{plan.story.id}/page-{plan.page.page_number}-{int(time.time() * 1000)}.jpg"

    # =========================================================================
    # CLEANUP
    # =========================================================================

    async def _cleanup_plan(self, plan: _Plan) -> None:
        """Remove rows created for this request; redraws leave the page as it was."""
        if plan.created_story:
            await self._cleanup(story_id=plan.story.id)
        elif plan.created_page:
            await self._cleanup(page_id=plan.page.id)

    async def _cleanup(self, story_id: Optional[str] = None, page_id: Optional[str] = None) -> None:
        try:
            if story_id:
                await self.repository.delete_story(story_id)
                logger.info(f"Removed story {story_id} after failed generation")
            elif page_id:
                await self.repository.delete_page(page_id)
                logger.info(f"Removed page {page_id} after failed generation")
        except Exception as e:
            logger.error(f"Cleanup failed (story={story_id}, page={page_id}): {e}")

"""
Supabase Gateways

Story/page/text-block persistence on Supabase tables and image re-hosting
on Supabase Storage.

Tables:
    stories           one row per story, unique slug
    pages             one row per page, (story_id, page_number) unique
    page_text_blocks  OCR output per page
"""

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional

import httpx
from supabase import Client, create_client

from panelcraft.core.config import settings
from panelcraft.core.env_loader import get_supabase_service_key
from panelcraft.core.exceptions import PersistenceError, StorageError
from panelcraft.core.logging_config import get_logger
from panelcraft.core.models import Page, Story, StoryWithPages, TextBlock
from panelcraft.gateways.base import StorageGateway, StoryRepository

logger = get_logger("gateways.supabase")

STORIES_TABLE = "stories"
PAGES_TABLE = "pages"
TEXT_BLOCKS_TABLE = "page_text_blocks"


@lru_cache()
def get_supabase_client() -> Client:
    """Get Supabase client with anon key (for auth checks)."""
    return create_client(settings.supabase_url, settings.supabase_anon_key)


@lru_cache()
def get_supabase_admin() -> Client:
    """Get Supabase client with service key (for data and storage)."""
    service_key = settings.supabase_service_key or get_supabase_service_key()
    if not service_key:
        logger.warning("No service key configured - falling back to anon key")
        return get_supabase_client()
    return create_client(settings.supabase_url, service_key)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SupabaseRepository(StoryRepository):
    """StoryRepository backed by Supabase tables."""

    def __init__(self, client: Client):
        self.client = client

    def _first(self, response, what: str) -> Dict[str, Any]:
        if not response.data:
            raise PersistenceError(f"Failed to {what}")
        return response.data[0]

    # Stories

    async def slug_exists(self, slug: str) -> bool:
        try:
            response = self.client.table(STORIES_TABLE) \
                .select("id") \
                .eq("slug", slug) \
                .limit(1) \
                .execute()
        except Exception as e:
            raise PersistenceError(f"Slug lookup failed: {e}")
        return bool(response.data)

    async def create_story(
        self,
        slug: str,
        title: str,
        user_id: str,
        style: str,
        description: Optional[str] = None,
        uses_own_api_key: bool = False
    ) -> Story:
        try:
            response = self.client.table(STORIES_TABLE).insert({
                "slug": slug,
                "title": title,
                "user_id": user_id,
                "style": style,
                "description": description,
                "uses_own_api_key": uses_own_api_key,
            }).execute()
        except Exception as e:
            raise PersistenceError(f"Create story failed: {e}")
        return Story.from_row(self._first(response, "create story"))

    async def get_story(self, story_id: str) -> Optional[Story]:
        try:
            response = self.client.table(STORIES_TABLE) \
                .select("*") \
                .eq("id", story_id) \
                .limit(1) \
                .execute()
        except Exception as e:
            raise PersistenceError(f"Get story failed: {e}")
        return Story.from_row(response.data[0]) if response.data else None

    async def get_story_by_slug(self, slug: str) -> Optional[Story]:
        try:
            response = self.client.table(STORIES_TABLE) \
                .select("*") \
                .eq("slug", slug) \
                .limit(1) \
                .execute()
        except Exception as e:
            raise PersistenceError(f"Get story failed: {e}")
        return Story.from_row(response.data[0]) if response.data else None

    async def get_story_with_pages(self, slug: str) -> Optional[StoryWithPages]:
        story = await self.get_story_by_slug(slug)
        if story is None:
            return None
        return StoryWithPages(story=story, pages=await self.list_pages(story.id))

    async def list_stories(self, user_id: str) -> List[StoryWithPages]:
        try:
            stories = self.client.table(STORIES_TABLE) \
                .select("*") \
                .eq("user_id", user_id) \
                .execute()
            story_ids = [row["id"] for row in stories.data or []]
            pages = []
            if story_ids:
                pages = self.client.table(PAGES_TABLE) \
                    .select("*") \
                    .in_("story_id", story_ids) \
                    .order("page_number") \
                    .execute().data or []
        except Exception as e:
            raise PersistenceError(f"List stories failed: {e}")

        by_story: Dict[str, List[Page]] = {str(story_id): [] for story_id in story_ids}
        for row in pages:
            page = Page.from_row(row)
            by_story.setdefault(page.story_id, []).append(page)

        return [
            StoryWithPages(story=Story.from_row(row), pages=by_story.get(str(row["id"]), []))
            for row in stories.data or []
        ]

    async def update_story(self, story_id: str, fields: Dict[str, Any]) -> Story:
        try:
            response = self.client.table(STORIES_TABLE) \
                .update({**fields, "updated_at": _now()}) \
                .eq("id", story_id) \
                .execute()
        except Exception as e:
            raise PersistenceError(f"Update story failed: {e}")
        return Story.from_row(self._first(response, "update story"))

    async def delete_story(self, story_id: str) -> None:
        try:
            page_ids = [
                row["id"] for row in self.client.table(PAGES_TABLE)
                .select("id")
                .eq("story_id", story_id)
                .execute().data or []
            ]
            if page_ids:
                self.client.table(TEXT_BLOCKS_TABLE).delete().in_("page_id", page_ids).execute()
                self.client.table(PAGES_TABLE).delete().eq("story_id", story_id).execute()
            self.client.table(STORIES_TABLE).delete().eq("id", story_id).execute()
        except Exception as e:
            raise PersistenceError(f"Delete story failed: {e}")

    # Pages

    async def create_page(
        self,
        story_id: str,
        page_number: int,
        prompt: str,
        character_image_urls: List[str],
        model: Optional[str] = None,
        layout: Optional[str] = None,
        is_custom_prompt: bool = False
    ) -> Page:
        try:
            response = self.client.table(PAGES_TABLE).insert({
                "story_id": story_id,
                "page_number": page_number,
                "prompt": prompt,
                "character_image_urls": character_image_urls,
                "model": model,
                "layout": layout,
                "is_custom_prompt": is_custom_prompt,
            }).execute()
        except Exception as e:
            raise PersistenceError(f"Create page failed: {e}")
        return Page.from_row(self._first(response, "create page"))

    async def get_page(self, page_id: str) -> Optional[Page]:
        try:
            response = self.client.table(PAGES_TABLE) \
                .select("*") \
                .eq("id", page_id) \
                .limit(1) \
                .execute()
        except Exception as e:
            raise PersistenceError(f"Get page failed: {e}")
        return Page.from_row(response.data[0]) if response.data else None

    async def list_pages(self, story_id: str) -> List[Page]:
        try:
            response = self.client.table(PAGES_TABLE) \
                .select("*") \
                .eq("story_id", story_id) \
                .order("page_number") \
                .execute()
        except Exception as e:
            raise PersistenceError(f"List pages failed: {e}")
        return [Page.from_row(row) for row in response.data or []]

    async def update_page_image(
        self,
        page_id: str,
        image_url: str,
        inputs: Optional[Dict[str, Any]] = None
    ) -> None:
        update = {**(inputs or {}), "generated_image_url": image_url, "updated_at": _now()}
        try:
            response = self.client.table(PAGES_TABLE).update(update).eq("id", page_id).execute()
        except Exception as e:
            raise PersistenceError(f"Update page failed: {e}")
        self._first(response, "update page")

    async def delete_page(self, page_id: str) -> None:
        try:
            self.client.table(TEXT_BLOCKS_TABLE).delete().eq("page_id", page_id).execute()
            self.client.table(PAGES_TABLE).delete().eq("id", page_id).execute()
        except Exception as e:
            raise PersistenceError(f"Delete page failed: {e}")

    # Text blocks

    async def replace_text_blocks(self, page_id: str, blocks: List[TextBlock]) -> None:
        try:
            self.client.table(TEXT_BLOCKS_TABLE).delete().eq("page_id", page_id).execute()
            if blocks:
                self.client.table(TEXT_BLOCKS_TABLE) \
                    .insert([block.to_row(page_id) for block in blocks]) \
                    .execute()
        except Exception as e:
            raise PersistenceError(f"Replace text blocks failed: {e}")

    async def list_text_blocks(self, page_id: str) -> List[TextBlock]:
        try:
            response = self.client.table(TEXT_BLOCKS_TABLE) \
                .select("*") \
                .eq("page_id", page_id) \
                .execute()
        except Exception as e:
            raise PersistenceError(f"List text blocks failed: {e}")
        return [TextBlock.from_row(row) for row in response.data or []]


class SupabaseStorage(StorageGateway):
    """Downloads a generated image and stores it in a public bucket."""

    def __init__(self, client: Client, bucket: str, timeout: float = 60.0):
        self.client = client
        self.bucket = bucket
        self.timeout = timeout

    async def upload(self, source_url: str, key: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as http:
                response = await http.get(source_url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageError(f"Failed to download generated image: {e}")

        content_type = response.headers.get("content-type", "image/jpeg")
        try:
            bucket = self.client.storage.from_(self.bucket)
            bucket.upload(key, response.content, {"content-type": content_type})
            public_url = bucket.get_public_url(key)
        except Exception as e:
            raise StorageError(f"Failed to upload {key}: {e}")

        logger.debug(f"Stored {key} ({len(response.content)} bytes)")
        return public_url.rstrip("?")

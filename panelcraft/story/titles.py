"""
Story Title Generation

Asks the text model for a title and a one-line description of a new story.
Any failure degrades to a title derived from the prompt.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from panelcraft.core.constants import (
    ELLIPSIS,
    FALLBACK_TITLE_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
)
from panelcraft.core.exceptions import TextGenerationError
from panelcraft.core.logging_config import get_logger
from panelcraft.gateways.base import TextGateway

logger = get_logger("story.titles")

TITLE_SYSTEM_PROMPT = (
    "You name comic books. Given the description of the first page of a comic, "
    "reply with a JSON object with two keys: \"title\" (a catchy title of at most "
    f"{MAX_TITLE_LENGTH} characters) and \"description\" (one sentence of at most "
    f"{MAX_DESCRIPTION_LENGTH} characters). Reply with the JSON object only."
)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


@dataclass
class StoryMetadata:
    title: str
    description: Optional[str] = None
    generated: bool = True


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Pull the outermost JSON object out of free-form model output."""
    if not text:
        return None
    match = _JSON_OBJECT.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def truncate(text: str, limit: int) -> str:
    """Cut `text` to at most `limit` characters, ending with an ellipsis when cut."""
    if len(text) <= limit:
        return text
    return text[: max(0, limit - len(ELLIPSIS))].rstrip() + ELLIPSIS


def fallback_title(prompt: str) -> str:
    """First 50 characters of the prompt, with an ellipsis when longer."""
    prompt = prompt.strip()
    if len(prompt) > FALLBACK_TITLE_LENGTH:
        return prompt[:FALLBACK_TITLE_LENGTH] + ELLIPSIS
    return prompt


class TitleGenerator:
    """Generates story metadata through a TextGateway."""

    def __init__(self, text_gateway: TextGateway, model: Optional[str] = None):
        self.text_gateway = text_gateway
        self.model = model

    async def generate(self, prompt: str) -> StoryMetadata:
        """Generate title and description. Raises TextGenerationError."""
        reply = await self.text_gateway.complete(
            messages=[
                {"role": "system", "content": TITLE_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            model=self.model,
            max_tokens=200,
            temperature=0.7,
        )

        data = extract_json_object(reply)
        if not data or not str(data.get("title") or "").strip():
            raise TextGenerationError("Text model returned no usable title", details={"reply": reply[:200]})

        description = str(data.get("description") or "").strip() or None
        return StoryMetadata(
            title=truncate(str(data["title"]).strip(), MAX_TITLE_LENGTH),
            description=truncate(description, MAX_DESCRIPTION_LENGTH) if description else None,
        )

    async def generate_or_fallback(self, prompt: str) -> StoryMetadata:
        """Like `generate`, but never raises."""
        try:
            return await self.generate(prompt)
        except Exception as e:
            logger.warning(f"Title generation failed, using prompt fallback: {e}")
            return StoryMetadata(title=fallback_title(prompt), generated=False)

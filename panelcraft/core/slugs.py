"""
Story slug generation.

Slugs are opaque, URL-safe and unique. Uniqueness is checked against the
persistence layer a bounded number of times before falling back to a
timestamped random slug.
"""

import secrets
import string
import time
from typing import Awaitable, Callable

from panelcraft.core.logging_config import get_logger

logger = get_logger("core.slugs")

_ALPHABET = string.ascii_lowercase + string.digits


def _random_token(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_comic_slug() -> str:
    """Generate a random slug such as ``comic-k3v9x0q2mb``."""
    return f"comic-{_random_token(10)}"


def fallback_slug() -> str:
    """Timestamped slug used when the random candidates keep colliding."""
    return f"story-{int(time.time() * 1000)}-{_random_token(5)}"


async def unique_slug(
    slug_exists: Callable[[str], Awaitable[bool]],
    max_attempts: int = 10
) -> str:
    """
    Pick a slug that does not exist yet.

    Args:
        slug_exists: Async predicate telling whether a slug is taken
        max_attempts: Number of random candidates to try

    Returns:
        A free slug, or a timestamped fallback after `max_attempts` collisions
    """
    for _ in range(max_attempts):
        slug = generate_comic_slug()
        if not await slug_exists(slug):
            return slug

    logger.warning(f"No free slug after {max_attempts} attempts, using fallback")
    return fallback_slug()

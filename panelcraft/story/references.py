"""
Reference Image Sets

The reference list sent to the image model: the previous page's image as a
style anchor, then the characters chosen for this page. Duplicates are dropped
keeping the first occurrence.
"""

from typing import Iterable, List, Optional

from panelcraft.core.models import Page


def dedupe(urls: Iterable[str]) -> List[str]:
    """Drop empty and repeated URLs, preserving first-seen order."""
    seen = set()
    result = []
    for url in urls:
        if url and url not in seen:
            seen.add(url)
            result.append(url)
    return result


def build_reference_set(
    previous_page_image: Optional[str],
    page_characters: Iterable[str]
) -> List[str]:
    """
    Assemble the reference images for one generation.

    Story characters not selected for this page are never added implicitly.
    """
    anchor = [previous_page_image] if previous_page_image else []
    return dedupe([*anchor, *page_characters])


def story_character_images(pages: Iterable[Page]) -> List[str]:
    """All character images used across pages, ordered by page number then first use."""
    ordered = sorted(pages, key=lambda page: page.page_number)
    return dedupe(url for page in ordered for url in page.character_image_urls)

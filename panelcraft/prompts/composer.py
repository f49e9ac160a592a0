"""
Prompt Composer

Builds the final image-model prompt from a PromptRequest. Composition is a
pure function of the request: same request, same string.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from panelcraft.prompts.consistency import character_block
from panelcraft.prompts.registry import layout_description, style_description

STORY_SEPARATOR = "\n\nSTORY:\n"

PREAMBLE = "Professional comic book page illustration."

CONSISTENCY_RULES = """CHARACTER CONSISTENCY RULES (HIGHEST PRIORITY):
- If reference images are provided, the characters' FACES must be 100% identical to the reference images
- Never change hair color, eye color, facial structure, or distinctive features
- Apply comic style to body/pose/action but preserve exact facial appearance
- Same character must look identical across all panels they appear in"""

LETTERING_RULES = """TEXT AND LETTERING (CRITICAL):
- All text in speech bubbles must be PERFECTLY CLEAR, LEGIBLE, and correctly spelled
- Use bold clean comic book lettering, large and easy to read
- Speech bubbles: crisp white fill, solid black outline, pointed tail toward speaker
- Keep dialogue SHORT: maximum 1-2 sentences per bubble
- NO blurry, warped, or unreadable text"""

COMPOSITION_RULES = """COMPOSITION:
- Vary camera angles across panels: close-up, medium shot, wide establishing shot
- Natural visual flow: follow the reading order of the layout
- Dynamic character poses with clear expressive acting
- Detailed backgrounds matching the scene and mood"""


@dataclass
class PagePrompt:
    """A prior page as seen by the composer."""
    page_number: int
    prompt: str


@dataclass
class PromptRequest:
    """Everything the composer needs for one page."""
    prompt: str
    style_id: Optional[str] = None
    layout_id: Optional[str] = None
    reference_images: List[str] = field(default_factory=list)
    is_continuation: bool = False
    previous_context: str = ""
    is_add_page: bool = False
    previous_pages: List[PagePrompt] = field(default_factory=list)
    summary: Optional[str] = None
    character_descriptions: Optional[str] = None
    custom_system_prompt: Optional[str] = None


def story_overview_section(summary: Optional[str], character_descriptions: Optional[str]) -> str:
    paragraphs = []
    if summary and summary.strip():
        paragraphs.append(f"STORY OVERVIEW:\n{summary.strip()}")
    if character_descriptions and character_descriptions.strip():
        paragraphs.append(f"CHARACTERS:\n{character_descriptions.strip()}")
    if not paragraphs:
        return ""
    return "\n" + "\n\n".join(paragraphs) + "\n"


def continuation_section(request: PromptRequest) -> str:
    section = ""
    if request.is_continuation and request.previous_context:
        section = (
            "\nCONTINUATION CONTEXT:\n"
            "This is a continuation of an existing story. "
            f"The previous page showed: {request.previous_context}\n"
            "Maintain visual consistency with the previous panels. "
            "Continue the narrative naturally.\n"
        )

    # Add-page context takes precedence over a single previous page
    if request.is_add_page and request.previous_pages:
        history = "\n".join(
            f"Page {page.page_number}: {page.prompt}" for page in request.previous_pages
        )
        section = (
            "\nSTORY CONTINUATION CONTEXT:\n"
            "This is a continuation of an existing comic story. Here are the previous pages:\n"
            f"{history}\n\n"
            "The new page should naturally continue this story. Maintain the same "
            "characters, setting, and narrative style. Reference previous events "
            "and build upon them.\n"
        )
    return section


def compose(request: PromptRequest) -> str:
    """
    Compose the final prompt for the image model.

    A non-blank custom_system_prompt replaces the whole template.
    """
    override = request.custom_system_prompt
    if override and override.strip():
        return f"{override}{STORY_SEPARATOR}{request.prompt}"

    style_text = style_description(request.style_id)
    layout_text, panel_count = layout_description(request.layout_id)
    characters = character_block(request.reference_images, request.style_id, panel_count)

    system_prompt = "\n".join([
        PREAMBLE,
        story_overview_section(request.summary, request.character_descriptions),
        continuation_section(request),
        characters,
        "",
        CONSISTENCY_RULES,
        "",
        LETTERING_RULES,
        "",
        layout_text,
        "",
        "ART STYLE:",
        style_text,
        characters,
        "",
        COMPOSITION_RULES,
    ])

    return f"{system_prompt}{STORY_SEPARATOR}{request.prompt}"

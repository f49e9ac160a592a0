"""
Style, Layout and Image Model Registry

Static lookup tables for the prompt composer and the orchestrator. Lookups
never fail: unknown ids fall back to the defaults (noir style,
6-panel webtoon layout, Flash 2.5 model).
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ComicStyle:
    """A visual style and its art-direction prompt fragment."""
    id: str
    name: str
    prompt: str


@dataclass(frozen=True)
class PageLayout:
    """A named panel arrangement."""
    id: str
    name: str
    description: str
    prompt: str
    panel_count: int


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int


@dataclass(frozen=True)
class ImageModelSpec:
    """An image model and its two dimension presets."""
    id: str
    name: str
    model_id: str
    description: str
    supports_reference_images: bool
    dimensions_with_ref: Dimensions
    dimensions_without_ref: Dimensions

    def dimensions_for(self, has_references: bool) -> Dimensions:
        """Dimensions to request, depending on whether reference images are sent."""
        if has_references and self.supports_reference_images:
            return self.dimensions_with_ref
        return self.dimensions_without_ref


# =============================================================================
# STYLES
# =============================================================================

COMIC_STYLES: List[ComicStyle] = [
    ComicStyle(
        id="noir",
        name="Noir",
        prompt=(
            "film noir style, high contrast black and white, deep dramatic shadows, "
            "1940s detective aesthetic, heavy bold inking, moody atmospheric lighting"
        ),
    ),
    ComicStyle(
        id="manga",
        name="Manga",
        prompt=(
            "Japanese manga style, clean precise black linework, screen tone shading, "
            "expressive eyes, dynamic speed lines, black and white with impact effects"
        ),
    ),
    ComicStyle(
        id="superhero",
        name="Superhero",
        prompt=(
            "classic American superhero comic style, bold vibrant colors, dynamic heroic "
            "poses, detailed muscular anatomy, Jim Lee and Jack Kirby inspired"
        ),
    ),
    ComicStyle(
        id="american-modern",
        name="American Modern",
        prompt=(
            "contemporary American superhero comic style, bold vibrant colors, dynamic "
            "heroic poses, detailed muscular anatomy, cinematic action scenes, modern digital art"
        ),
    ),
    ComicStyle(
        id="vintage",
        name="Vintage",
        prompt=(
            "Golden Age 1950s comic style, visible halftone Ben-Day dots, limited retro "
            "color palette, nostalgic warm tones, classic adventure comics"
        ),
    ),
    ComicStyle(
        id="modern",
        name="Modern",
        prompt=(
            "contemporary digital comic art, smooth gradient coloring, detailed realistic "
            "backgrounds, cinematic widescreen composition, graphic novel quality"
        ),
    ),
    ComicStyle(
        id="watercolor",
        name="Watercolor",
        prompt=(
            "painted watercolor comic style, soft blended edges, flowing artistic colors, "
            "delicate linework with painted fills, ethereal atmosphere"
        ),
    ),
]

DEFAULT_STYLE_ID = "noir"

_STYLES_BY_ID: Dict[str, ComicStyle] = {style.id: style for style in COMIC_STYLES}


# =============================================================================
# LAYOUTS
# =============================================================================

def _webtoon_layout(panel_count: int) -> PageLayout:
    rows = []
    for number in range(1, panel_count + 1):
        if number == 1:
            position = "row 1 (top)"
        elif number == panel_count:
            position = f"row {number} (bottom)"
        else:
            position = f"row {number}"
        rows.append(f"[  Panel {number}  ] - {position}")

    prompt = "\n".join([
        "PAGE LAYOUT:",
        f"Vertical webtoon-style comic strip with 1 column and {panel_count} stacked rows:",
        *rows,
        "- All panels stacked vertically in a SINGLE COLUMN, NO side-by-side panels",
        "- Each panel is a wide horizontal strip spanning the full width",
        "- Solid black panel borders with clean white gutters between rows",
        "- Reading order: top to bottom (vertical scroll format)",
        "- This is a webtoon/vertical scroll format - NOT a traditional comic page grid",
    ])
    return PageLayout(
        id=f"webtoon-{panel_count}-panel",
        name=f"{panel_count} Panels",
        description=f"Vertical scroll, 1 column x {panel_count} rows",
        prompt=prompt,
        panel_count=panel_count,
    )


CLASSIC_FIVE_PANEL = PageLayout(
    id="classic-5-panel",
    name="Classic 5 Panels",
    description="Traditional page, 2 / 1 / 2 grid",
    prompt="\n".join([
        "PAGE LAYOUT:",
        "5-panel comic page arranged as:",
        "[Panel 1] [Panel 2] - top row, 2 equal panels",
        "[    Panel 3      ] - middle row, 1 large cinematic hero panel",
        "[Panel 4] [Panel 5] - bottom row, 2 equal panels",
        "- Solid black panel borders with clean white gutters between panels",
        "- Each panel clearly separated and distinct",
    ]),
    panel_count=5,
)

PAGE_LAYOUTS: List[PageLayout] = [_webtoon_layout(n) for n in range(2, 7)] + [CLASSIC_FIVE_PANEL]

DEFAULT_LAYOUT_ID = "webtoon-6-panel"

_LAYOUTS_BY_ID: Dict[str, PageLayout] = {layout.id: layout for layout in PAGE_LAYOUTS}


# =============================================================================
# IMAGE MODELS
# =============================================================================

IMAGE_MODELS: List[ImageModelSpec] = [
    ImageModelSpec(
        id="flash-image-2.5",
        name="Flash 2.5",
        model_id="google/flash-image-2.5",
        description="Fast, good quality",
        supports_reference_images=True,
        dimensions_with_ref=Dimensions(width=864, height=1184),
        dimensions_without_ref=Dimensions(width=768, height=1344),
    ),
    ImageModelSpec(
        id="gemini-3-pro",
        name="Gemini 3 Pro",
        model_id="google/gemini-3-pro-image",
        description="Best quality, slower",
        supports_reference_images=True,
        dimensions_with_ref=Dimensions(width=896, height=1200),
        dimensions_without_ref=Dimensions(width=768, height=1376),
    ),
]

DEFAULT_IMAGE_MODEL_ID = "flash-image-2.5"

_MODELS_BY_ID: Dict[str, ImageModelSpec] = {model.id: model for model in IMAGE_MODELS}


# =============================================================================
# LOOKUPS
# =============================================================================

def get_style(style_id: Optional[str]) -> ComicStyle:
    """Resolve a style id, falling back to noir."""
    return _STYLES_BY_ID.get(style_id or "", _STYLES_BY_ID[DEFAULT_STYLE_ID])


def style_description(style_id: Optional[str]) -> str:
    """Prompt fragment for a style id."""
    return get_style(style_id).prompt


def get_layout(layout_id: Optional[str]) -> PageLayout:
    """Resolve a layout id, falling back to the 6-panel webtoon layout."""
    return _LAYOUTS_BY_ID.get(layout_id or "", _LAYOUTS_BY_ID[DEFAULT_LAYOUT_ID])


def layout_description(layout_id: Optional[str]) -> Tuple[str, int]:
    """Prompt fragment and panel count for a layout id."""
    layout = get_layout(layout_id)
    return layout.prompt, layout.panel_count


def get_image_model(model_id: Optional[str]) -> ImageModelSpec:
    """Resolve an image model id, falling back to Flash 2.5."""
    return _MODELS_BY_ID.get(model_id or "", _MODELS_BY_ID[DEFAULT_IMAGE_MODEL_ID])

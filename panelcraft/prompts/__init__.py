"""
Panelcraft Prompts Module

Style and layout registry, character consistency rules and the prompt composer.
"""

from .registry import (
    COMIC_STYLES,
    PAGE_LAYOUTS,
    IMAGE_MODELS,
    ComicStyle,
    PageLayout,
    ImageModelSpec,
    Dimensions,
    get_style,
    get_layout,
    get_image_model,
    style_description,
    layout_description,
)
from .consistency import character_block, ordinal_label
from .composer import PromptRequest, PagePrompt, compose

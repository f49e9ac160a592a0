"""
Character Consistency Rules

Turns the number of character reference images into one instruction block.
The block is built once and embedded twice by the composer.

Policy by reference count:
    0   no block
    1   single character, must appear in every panel
    2   two labelled characters, co-present in all but one panel
    3+  every character labelled by ordinal, same co-presence rule
"""

from typing import Callable, Dict, List, Sequence

from panelcraft.prompts.registry import get_style

NAMED_ORDINALS = ["FIRST", "SECOND", "THIRD", "FOURTH", "FIFTH"]


def ordinal_label(index: int) -> str:
    """
    Ordinal label for a zero-based reference index.

    The first five use words; beyond that the label is numeric (6TH, 21ST, 22ND).
    """
    if index < len(NAMED_ORDINALS):
        return NAMED_ORDINALS[index]

    number = index + 1
    if 10 <= number % 100 <= 20:
        suffix = "TH"
    else:
        suffix = {1: "ST", 2: "ND", 3: "RD"}.get(number % 10, "TH")
    return f"{number}{suffix}"


def every_panel_phrase(panel_count: int) -> str:
    """Phrase for 'all panels', singular when the layout has one panel."""
    if panel_count <= 1:
        return "the panel"
    return f"ALL {panel_count} panels"


def co_presence_phrase(panel_count: int) -> str:
    """Phrase for how many panels the characters must share, never below one."""
    if panel_count <= 1:
        return "the panel"
    required = max(1, panel_count - 1)
    return f"at least {required} of the {panel_count} panels"


def _single_character_block(references: Sequence[str], style_id: str, panel_count: int) -> str:
    return "\n".join([
        "",
        "CRITICAL FACE CONSISTENCY INSTRUCTIONS:",
        "- REFERENCE CHARACTER: Use the uploaded image as EXACT reference for the protagonist's face and appearance",
        "- FACE MATCHING: The character's face must be IDENTICAL to the reference image - same eyes, nose, mouth, hair, facial structure",
        "- APPEARANCE PRESERVATION: Maintain exact skin tone, hair color/style, eye color, and distinctive facial features",
        f"- CHARACTER CONSISTENCY: This exact same character must appear in {every_panel_phrase(panel_count)} with the same face throughout",
        f"- STYLE APPLICATION: Apply {style_id} comic art style to the body/pose/action but KEEP THE FACE EXACTLY AS IN THE REFERENCE IMAGE",
        "- NO VARIATION: Do not alter, modify, or change the character's face in any way from the reference",
    ])


def _dual_character_block(references: Sequence[str], style_id: str, panel_count: int) -> str:
    return "\n".join([
        "",
        "CRITICAL DUAL CHARACTER FACE CONSISTENCY INSTRUCTIONS:",
        "- CHARACTER 1 REFERENCE: Use the FIRST uploaded image as EXACT reference for Character 1's face and appearance",
        "- CHARACTER 2 REFERENCE: Use the SECOND uploaded image as EXACT reference for Character 2's face and appearance",
        "- FACE MATCHING: Both characters' faces must be IDENTICAL to their respective reference images",
        "- VISUAL DISTINCTION: Keep both characters clearly visually distinct with their unique faces, hair, and features",
        f"- CONSISTENT PRESENCE: Both characters must appear together in {co_presence_phrase(panel_count)}",
        f"- STYLE APPLICATION: Apply {style_id} comic art style while maintaining EXACT facial features from references",
        "- NO FACE VARIATION: Never alter or modify either character's face from their reference images",
    ])


def _multi_character_block(references: Sequence[str], style_id: str, panel_count: int) -> str:
    count = len(references)
    lines = ["", f"CRITICAL MULTI-CHARACTER FACE CONSISTENCY INSTRUCTIONS ({count} CHARACTERS):"]
    for index in range(count):
        lines.append(
            f"- CHARACTER {index + 1} REFERENCE: Use the {ordinal_label(index)} uploaded image "
            f"as EXACT reference for Character {index + 1}'s face and appearance"
        )
    lines.extend([
        f"- FACE MATCHING: All {count} characters' faces must be IDENTICAL to their respective reference images",
        "- VISUAL DISTINCTION: Keep every character clearly visually distinct with their unique faces, hair, and features",
        f"- CONSISTENT PRESENCE: All {count} characters must appear together in {co_presence_phrase(panel_count)}",
        f"- STYLE APPLICATION: Apply {style_id} comic art style while maintaining EXACT facial features from references",
        "- NO FACE VARIATION: Never alter or modify any character's face from their reference images",
    ])
    return "\n".join(lines)


BlockBuilder = Callable[[Sequence[str], str, int], str]

# Exact counts; anything above the largest key uses MULTI_CHARACTER_POLICY.
CHARACTER_POLICIES: Dict[int, BlockBuilder] = {
    1: _single_character_block,
    2: _dual_character_block,
}

MULTI_CHARACTER_POLICY: BlockBuilder = _multi_character_block


def policy_for(count: int) -> BlockBuilder:
    """Block builder for a reference count (count must be positive)."""
    return CHARACTER_POLICIES.get(count, MULTI_CHARACTER_POLICY)


def character_block(references: List[str], style_id: str, panel_count: int) -> str:
    """
    Build the character consistency block.

    Args:
        references: Ordered reference image URLs
        style_id: Requested style id; unknown ids are named as the fallback style
        panel_count: Panel count of the resolved layout

    Returns:
        Instruction block, or an empty string when there are no references
    """
    if not references:
        return ""

    resolved_style = get_style(style_id).id
    return policy_for(len(references))(references, resolved_style, panel_count)

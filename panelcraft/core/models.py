"""
Domain Models

Stories, pages and OCR text blocks as plain dataclasses. Rows coming from the
persistence layer are converted with `from_row`, and back with `to_row`.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class Story:
    """A sequence of pages sharing style and character continuity."""
    id: str
    slug: str
    title: str
    user_id: str
    style: str = "noir"
    description: Optional[str] = None
    summary: Optional[str] = None
    character_descriptions: Optional[str] = None
    uses_own_api_key: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Story":
        return cls(
            id=str(row["id"]),
            slug=row["slug"],
            title=row["title"],
            user_id=row["user_id"],
            style=row.get("style") or "noir",
            description=row.get("description"),
            summary=row.get("summary"),
            character_descriptions=row.get("character_descriptions"),
            uses_own_api_key=bool(row.get("uses_own_api_key", False)),
            created_at=_parse_timestamp(row.get("created_at")),
            updated_at=_parse_timestamp(row.get("updated_at")),
        )


@dataclass
class Page:
    """One generated comic image plus its generation inputs."""
    id: str
    story_id: str
    page_number: int
    prompt: str
    character_image_urls: List[str] = field(default_factory=list)
    model: Optional[str] = None
    layout: Optional[str] = None
    is_custom_prompt: bool = False
    generated_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Page":
        return cls(
            id=str(row["id"]),
            story_id=str(row["story_id"]),
            page_number=int(row["page_number"]),
            prompt=row["prompt"],
            character_image_urls=list(row.get("character_image_urls") or []),
            model=row.get("model"),
            layout=row.get("layout"),
            is_custom_prompt=bool(row.get("is_custom_prompt", False)),
            generated_image_url=row.get("generated_image_url"),
            created_at=_parse_timestamp(row.get("created_at")),
            updated_at=_parse_timestamp(row.get("updated_at")),
        )


@dataclass
class StoryWithPages:
    """A story together with its pages ordered by page number."""
    story: Story
    pages: List[Page] = field(default_factory=list)


@dataclass
class Vertex:
    x: int
    y: int


@dataclass
class TextBlock:
    """A piece of recognized text and its bounding polygon in image pixels."""
    text: str
    vertices: List[Vertex] = field(default_factory=list)
    confidence: Optional[float] = None
    id: Optional[str] = None
    page_id: Optional[str] = None

    def to_row(self, page_id: str) -> Dict[str, Any]:
        """Row for the text block table; confidence is stored as a 0-100 integer."""
        return {
            "page_id": page_id,
            "text": self.text,
            "bounding_box": {"vertices": [{"x": v.x, "y": v.y} for v in self.vertices]},
            "confidence": round(self.confidence * 100) if self.confidence is not None else None,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TextBlock":
        box = row.get("bounding_box") or {}
        confidence = row.get("confidence")
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            page_id=str(row["page_id"]) if row.get("page_id") is not None else None,
            text=row["text"],
            vertices=[Vertex(x=v.get("x", 0), y=v.get("y", 0)) for v in box.get("vertices", [])],
            confidence=confidence / 100 if confidence is not None else None,
        )

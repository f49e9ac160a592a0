"""
Google Cloud Vision OCR Gateway

Text detection through the `images:annotate` REST endpoint.
"""

from typing import List, Optional

import httpx

from panelcraft.core.env_loader import get_google_vision_api_key
from panelcraft.core.exceptions import MissingConfigError, OCRError
from panelcraft.core.logging_config import get_logger
from panelcraft.core.models import TextBlock, Vertex
from panelcraft.gateways.base import OCRGateway

logger = get_logger("gateways.vision")

ANNOTATE_URL = "https://vision.googleapis.com/v1/images:annotate"


class VisionOCRGateway(OCRGateway):
    """OCRGateway using TEXT_DETECTION on a remote image URI."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key or get_google_vision_api_key()
        if not self.api_key:
            raise MissingConfigError("GOOGLE_VISION_API_KEY")
        self.timeout = timeout
        self._transport = transport

    async def recognize_text(self, image_url: str) -> List[TextBlock]:
        body = {
            "requests": [{
                "image": {"source": {"imageUri": image_url}},
                "features": [{"type": "TEXT_DETECTION"}],
            }]
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(ANNOTATE_URL, params={"key": self.api_key}, json=body)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise OCRError(f"Vision API error: {e.response.text}", status_code=e.response.status_code)
        except httpx.HTTPError as e:
            raise OCRError(f"Vision request failed: {e}")

        responses = response.json().get("responses") or [{}]
        result = responses[0]
        if result.get("error"):
            raise OCRError(result["error"].get("message", "Vision API error"))

        annotations = result.get("textAnnotations") or []
        # The first annotation is the full text of the image
        return [self._to_block(annotation) for annotation in annotations[1:]]

    @staticmethod
    def _to_block(annotation: dict) -> TextBlock:
        vertices = (annotation.get("boundingPoly") or {}).get("vertices") or []
        return TextBlock(
            text=annotation.get("description", ""),
            vertices=[Vertex(x=v.get("x", 0), y=v.get("y", 0)) for v in vertices],
            confidence=annotation.get("confidence"),
        )

"""
Together AI Gateways

Image generation and chat completions against the Together REST API.
"""

from typing import Any, Dict, List, Optional

import httpx

from panelcraft.core.env_loader import get_together_api_key
from panelcraft.core.exceptions import ImageGenerationError, MissingConfigError, TextGenerationError
from panelcraft.core.logging_config import get_logger
from panelcraft.gateways.base import ImageGateway, TextGateway

logger = get_logger("gateways.together")

DEFAULT_BASE_URL = "https://api.together.xyz/v1"
DEFAULT_TIMEOUT = 180.0


def _error_message(response: httpx.Response) -> str:
    """Best-effort error message from a Together error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if isinstance(error, str):
        return error
    return f"HTTP {response.status_code}: {response.reason_phrase}"


class TogetherClient:
    """Shared transport for the Together endpoints."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key or get_together_api_key()
        if not self.api_key:
            raise MissingConfigError("TOGETHER_API_KEY")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def post(self, path: str, body: Dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.post(f"{self.base_url}{path}", headers=self._headers(), json=body)


class TogetherImageGateway(ImageGateway):
    """Image generation through /images/generations."""

    def __init__(self, client: TogetherClient, temperature: float = 0.1):
        self.client = client
        self.temperature = temperature

    async def generate(
        self,
        model: str,
        prompt: str,
        width: int,
        height: int,
        reference_images: Optional[List[str]] = None
    ) -> str:
        body: Dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "width": width,
            "height": height,
            "temperature": self.temperature,
            "n": 1,
        }
        if reference_images:
            body["reference_images"] = reference_images

        try:
            response = await self.client.post("/images/generations", body)
        except httpx.HTTPError as e:
            raise ImageGenerationError(f"Image request failed: {e}")

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(f"Together image API error {response.status_code}: {message}")
            raise ImageGenerationError(message, status_code=response.status_code)

        data = response.json().get("data") or []
        if not data or not data[0].get("url"):
            raise ImageGenerationError("No image URL in response", status_code=500)
        return data[0]["url"]


class TogetherTextGateway(TextGateway):
    """Chat completions through /chat/completions."""

    def __init__(self, client: TogetherClient, default_model: str):
        self.client = client
        self.default_model = default_model

    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        max_tokens: int = 300,
        temperature: float = 0.7
    ) -> str:
        body = {
            "model": model or self.default_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        try:
            response = await self.client.post("/chat/completions", body)
        except httpx.HTTPError as e:
            raise TextGenerationError(f"Text request failed: {e}")

        if response.status_code >= 400:
            raise TextGenerationError(_error_message(response), status_code=response.status_code)

        try:
            return response.json()["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise TextGenerationError(f"Malformed completion response: {e}")
